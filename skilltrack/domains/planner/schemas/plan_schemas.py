"""Planner request and plan schemas.

Plans coming back from the model use camelCase keys; both spellings are
accepted and plans are always emitted in snake_case.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Clarification(BaseModel):
    question: str = Field(min_length=1, max_length=2000)
    answer: str = Field(min_length=1, max_length=2000)


class PlanRequest(BaseModel):
    goal_description: str = Field(min_length=1, max_length=4000)
    target_date: Optional[date] = None
    frequency: Optional[Literal["daily", "weekly", "monthly"]] = None
    hours_per_period: Optional[Decimal] = Field(default=None, gt=0, le=744)
    preferred_time_slot: Optional[str] = Field(default=None, max_length=20)
    clarifications: List[Clarification] = Field(default_factory=list)

    @field_validator("goal_description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class PlanGoal(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, max_length=300)
    description: Optional[str] = None
    week_number: Optional[int] = Field(default=None, alias="weekNumber")
    milestones: List[str] = Field(default_factory=list)


class SkillPlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    skill_name: str = Field(min_length=1, max_length=200, alias="skillName")
    description: Optional[str] = None
    big_goal: Optional[str] = Field(default=None, alias="bigGoal")
    category: Optional[str] = None
    goals: List[PlanGoal] = Field(default_factory=list)


class PlanResponse(BaseModel):
    needs_clarification: bool = False
    clarification_question: Optional[str] = None
    plan: Optional[SkillPlan] = None
    plan_id: Optional[int] = None


class RefineGoalRequest(BaseModel):
    instruction: str = Field(min_length=1, max_length=2000)
    goal: PlanGoal


class ApplyPlanRequest(BaseModel):
    plan: SkillPlan
    target_date: Optional[date] = None
    plan_id: Optional[int] = None
