"""Model to DTO mappers for the skills domain."""

from __future__ import annotations

from skilltrack.domains.skills.models.skill_models import (
    Category,
    Goal,
    Milestone,
    Skill,
    SkillSchedule,
)
from skilltrack.domains.skills.schemas.skill_schemas import (
    CategoryResponse,
    GoalResponse,
    MilestoneResponse,
    ScheduleDayResponse,
    ScheduleResponse,
    SkillDetailResponse,
    SkillResponse,
)


def map_category(category: Category) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description,
        icon=category.icon,
        color=category.color,
        is_system=category.is_system,
    )


def map_milestone(milestone: Milestone) -> MilestoneResponse:
    return MilestoneResponse(
        id=milestone.id,
        goal_id=milestone.goal_id,
        title=milestone.title,
        description=milestone.description,
        category=milestone.category,
        is_completed=milestone.is_completed,
        completed_at=milestone.completed_at,
        sort_order=milestone.sort_order,
        is_ai_generated=milestone.is_ai_generated,
    )


def map_goal(goal: Goal, include_milestones: bool = True) -> GoalResponse:
    milestones = list(goal.milestones or [])
    return GoalResponse(
        id=goal.id,
        skill_id=goal.skill_id,
        skill_name=goal.skill.name if goal.skill else "",
        title=goal.title,
        description=goal.description,
        progress_percentage=goal.progress_percentage or 0,
        target_hours=goal.target_hours,
        logged_hours=goal.logged_hours or 0,
        target_date=goal.target_date,
        started_at=goal.started_at,
        completed_at=goal.completed_at,
        status=goal.status,
        priority=goal.priority,
        sort_order=goal.sort_order,
        is_ai_generated=goal.is_ai_generated,
        milestones_count=len(milestones),
        completed_milestones_count=sum(1 for m in milestones if m.is_completed),
        milestones=[map_milestone(m) for m in milestones] if include_milestones else [],
    )


def map_schedule(schedule: SkillSchedule) -> ScheduleResponse:
    return ScheduleResponse(
        frequency=schedule.frequency,
        hours_per_period=schedule.hours_per_period,
        preferred_time_slot=schedule.preferred_time_slot,
        days=[
            ScheduleDayResponse(
                day_of_week=day.day_of_week,
                start_time=day.start_time,
                end_time=day.end_time,
                label=day.label,
            )
            for day in schedule.days
        ],
    )


def _skill_fields(skill: Skill) -> dict:
    goals = list(skill.goals or [])
    return {
        "id": skill.id,
        "user_id": skill.user_id,
        "name": skill.name,
        "description": skill.description,
        "big_goal": skill.big_goal,
        "category": map_category(skill.category) if skill.category else None,
        "mastery_percentage": skill.mastery_percentage or 0,
        "total_hours_logged": skill.total_hours_logged or 0,
        "target_hours": skill.target_hours,
        "visibility": skill.visibility,
        "public_slug": skill.public_slug,
        "view_count": skill.view_count or 0,
        "target_date": skill.target_date,
        "started_at": skill.started_at,
        "completed_at": skill.completed_at,
        "status": skill.status,
        "icon": skill.icon,
        "color": skill.color,
        "goals_count": len(goals),
        "completed_goals_count": sum(1 for g in goals if g.status == "completed"),
        "created_at": skill.created_at,
    }


def map_skill(skill: Skill) -> SkillResponse:
    return SkillResponse(**_skill_fields(skill))


def map_skill_detail(skill: Skill, include_goals: bool = True) -> SkillDetailResponse:
    return SkillDetailResponse(
        **_skill_fields(skill),
        schedule=map_schedule(skill.schedule) if skill.schedule else None,
        goals=[map_goal(g) for g in skill.goals] if include_goals else [],
    )
