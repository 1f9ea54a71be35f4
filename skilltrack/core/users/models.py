"""User, profile and public sharing models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship

from skilltrack.extensions import db


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)


class User(db.Model, TimestampMixin):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(db.String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(db.String(100), nullable=False, default="")
    job_title: Mapped[str | None] = mapped_column(db.String(150))
    bio: Mapped[str | None] = mapped_column(db.Text)
    theme_preference: Mapped[str] = mapped_column(db.String(20), nullable=False, default="light")
    is_active: Mapped[bool] = mapped_column(default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(nullable=True)

    sharing_settings: Mapped["UserSharingSettings | None"] = relationship(
        "UserSharingSettings",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class UserSharingSettings(db.Model, TimestampMixin):
    __tablename__ = "user_sharing_settings"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        db.ForeignKey("user.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    is_profile_public: Mapped[bool] = mapped_column(default=False)
    public_username: Mapped[str | None] = mapped_column(db.String(50), unique=True)
    show_skills: Mapped[bool] = mapped_column(default=True)
    show_progress: Mapped[bool] = mapped_column(default=True)
    show_goals: Mapped[bool] = mapped_column(default=False)
    show_statistics: Mapped[bool] = mapped_column(default=True)

    user: Mapped[User] = relationship("User", back_populates="sharing_settings")
