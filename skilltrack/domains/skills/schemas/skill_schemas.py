"""Skill, goal and milestone schemas and DTOs."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

DAYS_OF_WEEK = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

Visibility = Literal["private", "public"]
SkillStatus = Literal["not_started", "in_progress", "paused", "completed"]
GoalStatus = Literal["pending", "in_progress", "completed"]


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class ScheduleDayRequest(BaseModel):
    day_of_week: str
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    label: Optional[str] = Field(default=None, max_length=100)

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in DAYS_OF_WEEK:
            raise ValueError("unknown day of week")
        return v


class ScheduleRequest(BaseModel):
    frequency: Literal["daily", "weekly", "monthly"] = "weekly"
    hours_per_period: Decimal = Field(default=Decimal("5"), gt=0, le=744)
    preferred_time_slot: Literal["any", "morning", "afternoon", "evening", "night"] = "any"
    days: List[ScheduleDayRequest] = Field(default_factory=list)

    @field_validator("days")
    @classmethod
    def unique_days(cls, v: List[ScheduleDayRequest]) -> List[ScheduleDayRequest]:
        seen = [d.day_of_week for d in v]
        if len(seen) != len(set(seen)):
            raise ValueError("duplicate day_of_week")
        return v


class MilestoneCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: Optional[str] = Field(default=None, max_length=4096)
    category: Optional[str] = Field(default=None, max_length=50)
    sort_order: Optional[int] = Field(default=None, ge=0)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return _strip_required(v)


class GoalCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: Optional[str] = Field(default=None, max_length=4096)
    target_hours: Optional[Decimal] = Field(default=None, gt=0)
    target_date: Optional[date] = None
    priority: int = Field(default=0, ge=0, le=10)
    sort_order: Optional[int] = Field(default=None, ge=0)
    milestones: List[MilestoneCreate] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return _strip_required(v)


class GoalUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    description: Optional[str] = Field(default=None, max_length=4096)
    target_hours: Optional[Decimal] = Field(default=None, gt=0)
    target_date: Optional[date] = None
    status: Optional[GoalStatus] = None
    priority: Optional[int] = Field(default=None, ge=0, le=10)
    sort_order: Optional[int] = Field(default=None, ge=0)


class GoalStatusUpdate(BaseModel):
    status: GoalStatus


class SkillCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=4096)
    big_goal: Optional[str] = Field(default=None, max_length=4096)
    category_id: Optional[int] = None
    target_hours: Optional[Decimal] = Field(default=None, gt=0)
    target_date: Optional[date] = None
    visibility: Visibility = "private"
    icon: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=20)
    schedule: Optional[ScheduleRequest] = None
    goals: List[GoalCreate] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_required(v)


class SkillUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=4096)
    big_goal: Optional[str] = Field(default=None, max_length=4096)
    category_id: Optional[int] = None
    target_hours: Optional[Decimal] = Field(default=None, gt=0)
    target_date: Optional[date] = None
    visibility: Optional[Visibility] = None
    status: Optional[SkillStatus] = None
    icon: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=20)


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_system: bool = False


class MilestoneResponse(BaseModel):
    id: int
    goal_id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    is_completed: bool
    completed_at: Optional[datetime] = None
    sort_order: int
    is_ai_generated: bool


class GoalResponse(BaseModel):
    id: int
    skill_id: int
    skill_name: str
    title: str
    description: Optional[str] = None
    progress_percentage: float
    target_hours: Optional[float] = None
    logged_hours: float
    target_date: Optional[date] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: str
    priority: int
    sort_order: int
    is_ai_generated: bool
    milestones_count: int
    completed_milestones_count: int
    milestones: List[MilestoneResponse] = []


class ScheduleDayResponse(BaseModel):
    day_of_week: str
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    label: Optional[str] = None


class ScheduleResponse(BaseModel):
    frequency: str
    hours_per_period: float
    preferred_time_slot: str
    days: List[ScheduleDayResponse] = []


class SkillResponse(BaseModel):
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    big_goal: Optional[str] = None
    category: Optional[CategoryResponse] = None
    mastery_percentage: float
    total_hours_logged: float
    target_hours: Optional[float] = None
    visibility: str
    public_slug: Optional[str] = None
    view_count: int = 0
    target_date: Optional[date] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: str
    icon: Optional[str] = None
    color: Optional[str] = None
    goals_count: int
    completed_goals_count: int
    created_at: Optional[datetime] = None


class SkillDetailResponse(SkillResponse):
    schedule: Optional[ScheduleResponse] = None
    goals: List[GoalResponse] = []
