"""Progress log schemas and dashboard DTOs."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ProgressLogCreate(BaseModel):
    skill_id: int
    goal_id: Optional[int] = None
    title: Optional[str] = Field(default=None, max_length=300)
    description: Optional[str] = Field(default=None, max_length=4096)
    hours_logged: Decimal = Field(gt=0, le=24, decimal_places=2)
    log_date: date
    quality_rating: Optional[int] = Field(default=None, ge=1, le=5)
    completed_milestone_ids: List[int] = Field(default_factory=list)

    @field_validator("completed_milestone_ids")
    @classmethod
    def dedupe_ids(cls, v: List[int]) -> List[int]:
        return list(dict.fromkeys(v))


class ProgressLogFilter(BaseModel):
    skill_id: Optional[int] = None
    goal_id: Optional[int] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)


class WeeklyActivityQuery(BaseModel):
    weeks: int = Field(default=12, ge=1, le=260)


class ProgressLogResponse(BaseModel):
    id: int
    skill_id: int
    skill_name: str
    goal_id: Optional[int] = None
    goal_title: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    hours_logged: float
    log_date: date
    quality_rating: Optional[int] = None
    completed_milestone_ids: List[int] = []
    created_at: Optional[datetime] = None


class DashboardStatsResponse(BaseModel):
    total_skills: int
    active_skills: int
    completed_goals: int
    total_goals: int
    total_hours_this_week: float
    total_hours_all_time: float
    current_streak: int
    overall_progress: float


class WeeklyActivityResponse(BaseModel):
    week_number: int
    week_start: date
    week_end: date
    week_label: str
    hours_logged: float
