"""User profile and sharing-settings services."""

from __future__ import annotations

from typing import Optional

from skilltrack.core.users.models import User, UserSharingSettings
from skilltrack.core.users.schemas import SharingSettingsSchema, UpdateProfileRequest
from skilltrack.extensions import db


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def update_profile(user: User, payload: UpdateProfileRequest) -> User:
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is None and key in ("first_name", "last_name", "theme_preference"):
            continue
        if isinstance(value, str):
            value = value.strip()
        setattr(user, key, value)
    db.session.commit()
    return user


def get_sharing_settings(user_id: int) -> UserSharingSettings:
    """Return the user's sharing row, creating the default one on first access."""
    settings = UserSharingSettings.query.filter_by(user_id=user_id).first()
    if settings is None:
        settings = UserSharingSettings(user_id=user_id)
        db.session.add(settings)
        db.session.commit()
    return settings


def update_sharing_settings(user_id: int, payload: SharingSettingsSchema) -> UserSharingSettings:
    settings = get_sharing_settings(user_id)
    if payload.public_username:
        taken = (
            UserSharingSettings.query.filter(
                UserSharingSettings.public_username == payload.public_username,
                UserSharingSettings.user_id != user_id,
            ).first()
        )
        if taken:
            raise ValueError("duplicate")
    if payload.is_profile_public and not payload.public_username:
        raise ValueError("validation_error")

    for key, value in payload.model_dump().items():
        setattr(settings, key, value)
    db.session.commit()
    return settings


def find_public_profile(username: str) -> Optional[UserSharingSettings]:
    """Sharing row of a public profile by username, or None when hidden or unknown."""
    normalized = (username or "").strip().lower()
    if not normalized:
        return None
    return UserSharingSettings.query.filter_by(
        public_username=normalized, is_profile_public=True
    ).first()
