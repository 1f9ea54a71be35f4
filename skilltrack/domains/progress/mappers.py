from __future__ import annotations

from skilltrack.domains.progress.calculators import DashboardStats, WeeklyBucket
from skilltrack.domains.progress.models.progress_models import ProgressLog
from skilltrack.domains.progress.schemas.progress_schemas import (
    DashboardStatsResponse,
    ProgressLogResponse,
    WeeklyActivityResponse,
)


def map_log(log: ProgressLog) -> ProgressLogResponse:
    return ProgressLogResponse(
        id=log.id,
        skill_id=log.skill_id,
        skill_name=log.skill.name if log.skill else "",
        goal_id=log.goal_id,
        goal_title=log.goal.title if log.goal else None,
        title=log.title,
        description=log.description,
        hours_logged=log.hours_logged,
        log_date=log.log_date,
        quality_rating=log.quality_rating,
        completed_milestone_ids=log.completed_milestone_ids,
        created_at=log.created_at,
    )


def map_dashboard(stats: DashboardStats) -> DashboardStatsResponse:
    return DashboardStatsResponse(
        total_skills=stats.total_skills,
        active_skills=stats.active_skills,
        completed_goals=stats.completed_goals,
        total_goals=stats.total_goals,
        total_hours_this_week=stats.total_hours_this_week,
        total_hours_all_time=stats.total_hours_all_time,
        current_streak=stats.current_streak,
        overall_progress=stats.overall_progress,
    )


def map_weekly_bucket(bucket: WeeklyBucket) -> WeeklyActivityResponse:
    return WeeklyActivityResponse(
        week_number=bucket.week_number,
        week_start=bucket.week_start,
        week_end=bucket.week_end,
        week_label=bucket.week_label,
        hours_logged=bucket.hours_logged,
    )
