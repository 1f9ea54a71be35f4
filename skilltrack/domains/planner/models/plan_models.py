"""Persisted AI plan generation attempts."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column

from skilltrack.extensions import db

PLAN_STATUSES = ("pending", "completed", "applied")


class AiGeneratedPlan(db.Model):
    __tablename__ = "ai_generated_plan"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    skill_id: Mapped[int | None] = mapped_column(db.ForeignKey("skill.id", ondelete="SET NULL"))
    goal_description: Mapped[str] = mapped_column(db.Text, nullable=False)
    target_date: Mapped[date | None] = mapped_column(db.Date)
    dedication_frequency: Mapped[str | None] = mapped_column(db.String(20))
    dedication_hours: Mapped[Decimal | None] = mapped_column(db.Numeric(5, 2))
    preferred_time_slot: Mapped[str | None] = mapped_column(db.String(20))
    clarifications: Mapped[list] = mapped_column(db.JSON, default=list)
    ai_response: Mapped[dict | None] = mapped_column(db.JSON)
    status: Mapped[str] = mapped_column(db.String(20), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)
