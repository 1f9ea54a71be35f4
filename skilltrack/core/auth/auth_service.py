"""Authentication service layer."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from sqlalchemy import func

from skilltrack.core.auth.events import AUTH_USER_PASSWORD_CHANGED, AUTH_USER_REGISTERED
from skilltrack.core.auth.models import JWTBlocklist, SessionToken
from skilltrack.core.auth.password import hash_password, verify_password
from skilltrack.core.auth.schemas import ChangePasswordRequest, RegisterRequest
from skilltrack.core.users.models import User, UserSharingSettings
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox import enqueue as enqueue_outbox

logger = logging.getLogger(__name__)


def authenticate_user(email: str, password: str) -> Optional[User]:
    """Return the active user if credentials are valid and stamp last login."""
    user = User.query.filter(func.lower(User.email) == email.strip().lower()).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    user.last_login_at = datetime.utcnow()
    db.session.commit()
    return user


def issue_tokens(user: User) -> dict[str, str]:
    """Create access and refresh tokens for a user."""
    identity = str(user.id)
    access_token = create_access_token(identity=identity, additional_claims={"email": user.email})
    refresh_token = create_refresh_token(identity=identity)

    # Persist refresh jti for revocation checks
    decoded_refresh = decode_token(refresh_token)
    expires = decoded_refresh.get("exp")
    db.session.add(
        SessionToken(
            user_id=user.id,
            jti=decoded_refresh.get("jti"),
            expires_at=datetime.utcfromtimestamp(expires) if expires else None,
        )
    )
    db.session.commit()
    return {"access_token": access_token, "refresh_token": refresh_token}


def revoke_refresh_token(jti: str, user_id: Optional[int] = None) -> None:
    token = SessionToken.query.filter_by(jti=jti).first()
    if token:
        token.revoked = True
    if not JWTBlocklist.query.filter_by(jti=jti).first():
        db.session.add(JWTBlocklist(jti=jti, created_by=user_id))
    db.session.commit()


def is_token_revoked(jti: str) -> bool:
    if not jti:
        return False
    if JWTBlocklist.query.filter_by(jti=jti).first():
        return True
    token = SessionToken.query.filter_by(jti=jti).first()
    return bool(token and token.revoked)


def register_user(payload: RegisterRequest, auto_issue_tokens: bool = False) -> dict:
    """Create a user with default sharing settings and emit a registration event."""
    existing = User.query.filter(func.lower(User.email) == payload.email).first()
    if existing:
        raise ValueError("email_already_exists")

    user = User(
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        password_hash=hash_password(payload.password),
    )
    user.sharing_settings = UserSharingSettings()
    db.session.add(user)
    db.session.flush()

    enqueue_outbox(
        AUTH_USER_REGISTERED,
        {
            "user_id": user.id,
            "email": user.email,
            "first_name": user.first_name,
            "last_name": user.last_name,
        },
        user_id=user.id,
    )
    db.session.commit()
    logger.info("Registered user %s", user.id)

    tokens = issue_tokens(user) if auto_issue_tokens else {}
    return {"user": user, **tokens}


def change_password(user: User, payload: ChangePasswordRequest) -> None:
    """Rotate the password and revoke every outstanding refresh token."""
    if not verify_password(payload.current_password, user.password_hash):
        raise ValueError("invalid_credentials")
    user.password_hash = hash_password(payload.new_password)
    SessionToken.query.filter_by(user_id=user.id, revoked=False).update(
        {"revoked": True}, synchronize_session=False
    )
    enqueue_outbox(
        AUTH_USER_PASSWORD_CHANGED,
        {"user_id": user.id, "changed_at": datetime.utcnow().isoformat()},
        user_id=user.id,
    )
    db.session.commit()
