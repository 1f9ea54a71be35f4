"""Category, skill, schedule, goal and milestone models."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column, relationship

from skilltrack.extensions import db

SKILL_STATUSES = ("not_started", "in_progress", "paused", "completed")
GOAL_STATUSES = ("pending", "in_progress", "completed")
VISIBILITIES = ("private", "public")


class Category(db.Model):
    __tablename__ = "skill_category"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(db.String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(db.String(500))
    icon: Mapped[str | None] = mapped_column(db.String(50))
    color: Mapped[str | None] = mapped_column(db.String(20))
    is_system: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)


class Skill(db.Model):
    __tablename__ = "skill"
    __table_args__ = (
        db.Index("ix_skill_user_status", "user_id", "status"),
        db.Index("ix_skill_user_category", "user_id", "category_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    category_id: Mapped[int | None] = mapped_column(db.ForeignKey("skill_category.id", ondelete="SET NULL"))
    name: Mapped[str] = mapped_column(db.String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    big_goal: Mapped[str | None] = mapped_column(db.Text)
    mastery_percentage: Mapped[Decimal] = mapped_column(db.Numeric(5, 2), nullable=False, default=Decimal("0"))
    total_hours_logged: Mapped[Decimal] = mapped_column(db.Numeric(10, 2), nullable=False, default=Decimal("0"))
    target_hours: Mapped[Decimal | None] = mapped_column(db.Numeric(10, 2))
    visibility: Mapped[str] = mapped_column(db.String(20), nullable=False, default="private")
    public_slug: Mapped[str | None] = mapped_column(db.String(250), unique=True)
    view_count: Mapped[int] = mapped_column(default=0)
    target_date: Mapped[date | None] = mapped_column(db.Date)
    started_at: Mapped[datetime | None] = mapped_column()
    completed_at: Mapped[datetime | None] = mapped_column()
    status: Mapped[str] = mapped_column(db.String(20), nullable=False, default="not_started")
    icon: Mapped[str | None] = mapped_column(db.String(50))
    color: Mapped[str | None] = mapped_column(db.String(20))
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    category: Mapped[Category | None] = relationship("Category")
    goals: Mapped[list["Goal"]] = relationship(
        "Goal",
        back_populates="skill",
        cascade="all, delete-orphan",
        order_by="Goal.sort_order",
    )
    schedule: Mapped["SkillSchedule | None"] = relationship(
        "SkillSchedule",
        back_populates="skill",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"


class SkillSchedule(db.Model):
    __tablename__ = "skill_schedule"

    id: Mapped[int] = mapped_column(primary_key=True)
    skill_id: Mapped[int] = mapped_column(
        db.ForeignKey("skill.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    frequency: Mapped[str] = mapped_column(db.String(20), nullable=False, default="weekly")
    hours_per_period: Mapped[Decimal] = mapped_column(db.Numeric(5, 2), nullable=False, default=Decimal("5"))
    preferred_time_slot: Mapped[str] = mapped_column(db.String(20), nullable=False, default="any")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    skill: Mapped[Skill] = relationship("Skill", back_populates="schedule")
    days: Mapped[list["ScheduleDay"]] = relationship(
        "ScheduleDay",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="ScheduleDay.id",
    )


class ScheduleDay(db.Model):
    __tablename__ = "skill_schedule_day"
    __table_args__ = (
        db.UniqueConstraint("schedule_id", "day_of_week", name="uq_schedule_day"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    schedule_id: Mapped[int] = mapped_column(
        db.ForeignKey("skill_schedule.id", ondelete="CASCADE"), nullable=False
    )
    day_of_week: Mapped[str] = mapped_column(db.String(10), nullable=False)
    start_time: Mapped[time | None] = mapped_column(db.Time)
    end_time: Mapped[time | None] = mapped_column(db.Time)
    label: Mapped[str | None] = mapped_column(db.String(100))

    schedule: Mapped[SkillSchedule] = relationship("SkillSchedule", back_populates="days")


class Goal(db.Model):
    __tablename__ = "skill_goal"
    __table_args__ = (
        db.Index("ix_skill_goal_skill_sort", "skill_id", "sort_order"),
        db.Index("ix_skill_goal_user_status", "user_id", "status"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    skill_id: Mapped[int] = mapped_column(db.ForeignKey("skill.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(db.String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    progress_percentage: Mapped[Decimal] = mapped_column(db.Numeric(5, 2), nullable=False, default=Decimal("0"))
    target_hours: Mapped[Decimal | None] = mapped_column(db.Numeric(10, 2))
    logged_hours: Mapped[Decimal] = mapped_column(db.Numeric(10, 2), nullable=False, default=Decimal("0"))
    target_date: Mapped[date | None] = mapped_column(db.Date)
    started_at: Mapped[datetime | None] = mapped_column()
    completed_at: Mapped[datetime | None] = mapped_column()
    status: Mapped[str] = mapped_column(db.String(20), nullable=False, default="pending")
    priority: Mapped[int] = mapped_column(default=0)
    sort_order: Mapped[int] = mapped_column(default=0)
    is_ai_generated: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    skill: Mapped[Skill] = relationship("Skill", back_populates="goals")
    milestones: Mapped[list["Milestone"]] = relationship(
        "Milestone",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="Milestone.sort_order",
    )


class Milestone(db.Model):
    __tablename__ = "skill_milestone"
    __table_args__ = (
        db.Index("ix_skill_milestone_goal_sort", "goal_id", "sort_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    goal_id: Mapped[int] = mapped_column(db.ForeignKey("skill_goal.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(db.String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(db.Text)
    category: Mapped[str | None] = mapped_column(db.String(50))
    is_completed: Mapped[bool] = mapped_column(default=False)
    completed_at: Mapped[datetime | None] = mapped_column()
    sort_order: Mapped[int] = mapped_column(default=0)
    is_ai_generated: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    goal: Mapped[Goal] = relationship("Goal", back_populates="milestones")
    completions: Mapped[list["MilestoneCompletion"]] = relationship(
        "MilestoneCompletion",
        back_populates="milestone",
        cascade="all, delete-orphan",
    )
