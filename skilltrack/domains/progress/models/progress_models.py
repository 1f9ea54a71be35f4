"""Progress log, milestone completion and daily stat models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column, relationship

from skilltrack.domains.skills.models.skill_models import Goal, Milestone, Skill
from skilltrack.extensions import db


class ProgressLog(db.Model):
    __tablename__ = "progress_log"
    __table_args__ = (
        db.Index("ix_progress_log_user_date", "user_id", "log_date"),
        db.Index("ix_progress_log_skill_date", "skill_id", "log_date"),
        db.Index("ix_progress_log_goal", "goal_id"),
        db.CheckConstraint("hours_logged > 0 AND hours_logged <= 24", name="ck_progress_log_hours"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    skill_id: Mapped[int] = mapped_column(db.ForeignKey("skill.id", ondelete="CASCADE"), nullable=False)
    goal_id: Mapped[int | None] = mapped_column(db.ForeignKey("skill_goal.id", ondelete="SET NULL"))
    title: Mapped[str | None] = mapped_column(db.String(300))
    description: Mapped[str | None] = mapped_column(db.Text)
    hours_logged: Mapped[Decimal] = mapped_column(db.Numeric(5, 2), nullable=False)
    log_date: Mapped[date] = mapped_column(db.Date, nullable=False)
    quality_rating: Mapped[int | None] = mapped_column()
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    skill: Mapped[Skill] = relationship("Skill")
    goal: Mapped[Goal | None] = relationship("Goal")
    milestone_completions: Mapped[list["MilestoneCompletion"]] = relationship(
        "MilestoneCompletion",
        back_populates="progress_log",
        cascade="all, delete-orphan",
    )

    @property
    def completed_milestone_ids(self) -> list[int]:
        return sorted(mc.milestone_id for mc in self.milestone_completions)


class MilestoneCompletion(db.Model):
    __tablename__ = "milestone_completion"
    __table_args__ = (
        db.UniqueConstraint("progress_log_id", "milestone_id", name="uq_milestone_completion_log_milestone"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    progress_log_id: Mapped[int] = mapped_column(
        db.ForeignKey("progress_log.id", ondelete="CASCADE"), nullable=False
    )
    milestone_id: Mapped[int] = mapped_column(
        db.ForeignKey("skill_milestone.id", ondelete="CASCADE"), nullable=False, index=True
    )
    completed_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    progress_log: Mapped[ProgressLog] = relationship("ProgressLog", back_populates="milestone_completions")
    milestone: Mapped[Milestone] = relationship("Milestone", back_populates="completions")


class DailyStat(db.Model):
    __tablename__ = "daily_stat"
    __table_args__ = (
        db.UniqueConstraint("user_id", "stat_date", name="uq_daily_stat_user_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    stat_date: Mapped[date] = mapped_column(db.Date, nullable=False)
    total_hours_logged: Mapped[Decimal] = mapped_column(db.Numeric(10, 2), nullable=False, default=Decimal("0"))
    skills_practiced: Mapped[int] = mapped_column(default=0)
    goals_completed: Mapped[int] = mapped_column(default=0)
    milestones_completed: Mapped[int] = mapped_column(default=0)
    logs_count: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)
