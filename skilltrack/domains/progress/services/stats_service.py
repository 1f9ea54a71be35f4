"""Dashboard and weekly activity reads, recomputed on every call."""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from flask import current_app, has_app_context

from skilltrack.core.utils.clock import SystemClock, get_clock
from skilltrack.domains.progress import calculators
from skilltrack.domains.progress.models.progress_models import ProgressLog
from skilltrack.domains.skills.models.skill_models import Goal, Skill
from skilltrack.extensions import db

DEFAULT_STREAK_LOOKBACK_DAYS = 365
MAX_WEEKS = 260


def _streak_lookback() -> int:
    if has_app_context():
        return int(current_app.config.get("STREAK_LOOKBACK_DAYS", DEFAULT_STREAK_LOOKBACK_DAYS))
    return DEFAULT_STREAK_LOOKBACK_DAYS


def get_dashboard_stats(user_id: int, clock: Optional[SystemClock] = None) -> calculators.DashboardStats:
    clock = get_clock(clock)
    today = clock.today()

    skills = [
        (row.status, row.mastery_percentage)
        for row in db.session.query(Skill.status, Skill.mastery_percentage).filter(
            Skill.user_id == user_id
        )
    ]
    goal_statuses = [
        row.status for row in db.session.query(Goal.status).filter(Goal.user_id == user_id)
    ]
    log_points = [
        (row.log_date, row.hours_logged)
        for row in db.session.query(ProgressLog.log_date, ProgressLog.hours_logged).filter(
            ProgressLog.user_id == user_id
        )
    ]
    streak_dates = [
        row.log_date
        for row in db.session.query(ProgressLog.log_date)
        .filter(ProgressLog.user_id == user_id, ProgressLog.log_date <= today)
        .distinct()
        .order_by(ProgressLog.log_date.desc())
        .limit(_streak_lookback())
    ]
    return calculators.aggregate_dashboard(skills, goal_statuses, log_points, streak_dates, today)


def get_weekly_activity(
    user_id: int, weeks: int = 12, clock: Optional[SystemClock] = None
) -> List[calculators.WeeklyBucket]:
    """Monday-Sunday hour totals for the last ``weeks`` weeks, oldest first."""
    if weeks < 1 or weeks > MAX_WEEKS:
        raise ValueError("validation_error")
    clock = get_clock(clock)
    today = clock.today()
    first_day = calculators.week_start(today) - timedelta(weeks=weeks - 1)
    last_day = calculators.week_start(today) + timedelta(days=6)
    log_points = [
        (row.log_date, row.hours_logged)
        for row in db.session.query(ProgressLog.log_date, ProgressLog.hours_logged).filter(
            ProgressLog.user_id == user_id,
            ProgressLog.log_date >= first_day,
            ProgressLog.log_date <= last_day,
        )
    ]
    return calculators.bucket_weekly_activity(log_points, today, weeks)
