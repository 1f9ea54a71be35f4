"""Typed schemas for user and sharing IO."""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from skilltrack.core.users.models import User, UserSharingSettings

_USERNAME_REGEX = re.compile(r"^[a-z0-9_-]{3,50}$")


class UserResponse(BaseModel):
    # Persisted emails are not re-validated on the way out.
    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    job_title: Optional[str] = None
    bio: Optional[str] = None
    theme_preference: str = "light"
    is_active: bool = True
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UpdateProfileRequest(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    job_title: Optional[str] = Field(default=None, max_length=150)
    bio: Optional[str] = Field(default=None, max_length=4096)
    theme_preference: Optional[Literal["light", "dark"]] = None


class SharingSettingsSchema(BaseModel):
    is_profile_public: bool = False
    public_username: Optional[str] = None
    show_skills: bool = True
    show_progress: bool = True
    show_goals: bool = False
    show_statistics: bool = True

    model_config = ConfigDict(from_attributes=True)

    @field_validator("public_username")
    @classmethod
    def normalize_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().lower()
        if not v:
            return None
        if not _USERNAME_REGEX.match(v):
            raise ValueError("username must be 3-50 chars of a-z, 0-9, '-' or '_'")
        return v


def serialize_user(user: "User") -> UserResponse:
    return UserResponse.model_validate(user)


def serialize_sharing(settings: Optional["UserSharingSettings"]) -> SharingSettingsSchema:
    if settings is None:
        return SharingSettingsSchema()
    return SharingSettingsSchema.model_validate(settings)
