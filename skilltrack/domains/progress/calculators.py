"""Pure progress roll-up rules.

Nothing in this module touches the database. Callers load plain snapshots,
hand them to these functions and persist whatever comes back. All hour and
percentage values are ``Decimal`` quantized to two places, matching the
``Numeric(.., 2)`` columns they end up in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

HUNDRED = Decimal("100")
ZERO = Decimal("0")
CENT = Decimal("0.01")

STATUS_COMPLETED = "completed"
STATUS_IN_PROGRESS = "in_progress"


def quantize(value: Decimal | int | float | None) -> Decimal:
    if value is None:
        return ZERO.quantize(CENT)
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_hours(hours: Iterable[Decimal | int | float]) -> Decimal:
    return quantize(sum((quantize(h) for h in hours), ZERO))


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    return quantize(min(HUNDRED, part / whole * HUNDRED))


# --- streak ---


def compute_streak(log_dates: Iterable[date], today: date) -> int:
    """Consecutive logged days ending today, or ending yesterday if today is empty."""
    days = set(log_dates)
    if not days:
        return 0
    cursor = today
    if cursor not in days:
        cursor = today - timedelta(days=1)
        if cursor not in days:
            return 0
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


# --- goal / skill recalculation ---


@dataclass(frozen=True)
class GoalSnapshot:
    status: str
    progress_percentage: Decimal
    target_hours: Optional[Decimal]
    completed_at: Optional[datetime]
    log_hours: Sequence[Decimal] = ()
    milestone_total: int = 0
    milestone_completed: int = 0


@dataclass(frozen=True)
class GoalProgress:
    logged_hours: Decimal
    progress_percentage: Decimal
    status: str
    completed_at: Optional[datetime]

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED


def recalculate_goal(snapshot: GoalSnapshot, now: datetime) -> GoalProgress:
    """Milestone ratio wins over hours; completion is sticky once reached."""
    logged = sum_hours(snapshot.log_hours)
    percentage = quantize(snapshot.progress_percentage)
    target = snapshot.target_hours

    if snapshot.milestone_total > 0:
        percentage = _percentage(Decimal(snapshot.milestone_completed), Decimal(snapshot.milestone_total))
    elif target is not None and target > 0:
        percentage = _percentage(logged, Decimal(target))

    status = snapshot.status
    completed_at = snapshot.completed_at
    if percentage >= HUNDRED and status != STATUS_COMPLETED:
        status = STATUS_COMPLETED
        completed_at = now

    return GoalProgress(
        logged_hours=logged,
        progress_percentage=percentage,
        status=status,
        completed_at=completed_at,
    )


@dataclass(frozen=True)
class SkillSnapshot:
    mastery_percentage: Decimal
    target_hours: Optional[Decimal]
    log_hours: Sequence[Decimal] = ()
    goal_statuses: Sequence[str] = ()


@dataclass(frozen=True)
class SkillProgress:
    total_hours_logged: Decimal
    mastery_percentage: Decimal


def recalculate_skill(snapshot: SkillSnapshot) -> SkillProgress:
    """Hours win over goal completion ratio, the reverse of the goal rule."""
    total = sum_hours(snapshot.log_hours)
    mastery = quantize(snapshot.mastery_percentage)
    target = snapshot.target_hours

    if target is not None and target > 0:
        mastery = _percentage(total, Decimal(target))
    elif snapshot.goal_statuses:
        completed = sum(1 for status in snapshot.goal_statuses if status == STATUS_COMPLETED)
        mastery = _percentage(Decimal(completed), Decimal(len(snapshot.goal_statuses)))

    return SkillProgress(total_hours_logged=total, mastery_percentage=mastery)


# --- daily rollup ---


@dataclass(frozen=True)
class DayLog:
    skill_id: int
    hours: Decimal
    milestones_completed: int = 0


@dataclass(frozen=True)
class DailyRollup:
    total_hours_logged: Decimal
    skills_practiced: int
    logs_count: int
    milestones_completed: int
    goals_completed: int


def rollup_daily_stat(logs: Sequence[DayLog], goals_completed: int = 0) -> DailyRollup:
    """Full overwrite values for one (user, day) row; empty input yields zeros."""
    return DailyRollup(
        total_hours_logged=sum_hours(log.hours for log in logs),
        skills_practiced=len({log.skill_id for log in logs}),
        logs_count=len(logs),
        milestones_completed=sum(log.milestones_completed for log in logs),
        goals_completed=goals_completed,
    )


# --- dashboard ---


@dataclass(frozen=True)
class DashboardStats:
    total_skills: int
    active_skills: int
    completed_goals: int
    total_goals: int
    total_hours_this_week: Decimal
    total_hours_all_time: Decimal
    current_streak: int
    overall_progress: Decimal


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def aggregate_dashboard(
    skills: Sequence[Tuple[str, Decimal]],
    goal_statuses: Sequence[str],
    log_points: Sequence[Tuple[date, Decimal]],
    streak_dates: Iterable[date],
    today: date,
) -> DashboardStats:
    """Combine per-user rows into dashboard figures.

    ``skills`` holds (status, mastery_percentage) pairs and ``log_points``
    (log_date, hours) pairs for every log the user owns.
    """
    start = week_start(today)
    end = start + timedelta(days=6)
    masteries = [quantize(mastery) for _, mastery in skills]
    overall = quantize(sum(masteries, ZERO) / len(masteries)) if masteries else quantize(ZERO)

    return DashboardStats(
        total_skills=len(skills),
        active_skills=sum(1 for status, _ in skills if status == STATUS_IN_PROGRESS),
        completed_goals=sum(1 for status in goal_statuses if status == STATUS_COMPLETED),
        total_goals=len(goal_statuses),
        total_hours_this_week=sum_hours(h for d, h in log_points if start <= d <= end),
        total_hours_all_time=sum_hours(h for _, h in log_points),
        current_streak=compute_streak(streak_dates, today),
        overall_progress=overall,
    )


# --- weekly activity ---


@dataclass(frozen=True)
class WeeklyBucket:
    week_number: int
    week_start: date
    week_end: date
    hours_logged: Decimal
    week_label: str


def format_week_label(start: date, end: date) -> str:
    if start.year != end.year:
        return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"
    return f"{start:%b} {start.day} - {end:%b} {end.day}"


def week_windows(today: date, weeks: int) -> List[Tuple[date, date]]:
    """Monday-Sunday spans, oldest first, the last one containing ``today``."""
    if weeks < 1:
        raise ValueError("validation_error")
    current = week_start(today)
    first = current - timedelta(weeks=weeks - 1)
    return [
        (first + timedelta(weeks=i), first + timedelta(weeks=i, days=6))
        for i in range(weeks)
    ]


def bucket_weekly_activity(
    log_points: Sequence[Tuple[date, Decimal]], today: date, weeks: int
) -> List[WeeklyBucket]:
    buckets: List[WeeklyBucket] = []
    for index, (start, end) in enumerate(week_windows(today, weeks)):
        hours = sum_hours(h for d, h in log_points if start <= d <= end)
        buckets.append(
            WeeklyBucket(
                week_number=index + 1,
                week_start=start,
                week_end=end,
                hours_logged=hours,
                week_label=format_week_label(start, end),
            )
        )
    return buckets
