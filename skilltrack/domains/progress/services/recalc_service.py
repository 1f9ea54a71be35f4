"""Persist goal, skill and daily-stat recomputations.

Every function here loads the source rows, delegates the arithmetic to
``calculators`` and writes the result back with ``flush()``. None of them
commit: the caller owns the transaction so a whole log mutation lands or
rolls back as one unit.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import case, func

from skilltrack.core.utils.clock import SystemClock, get_clock
from skilltrack.domains.progress import calculators
from skilltrack.domains.progress.models.progress_models import (
    DailyStat,
    MilestoneCompletion,
    ProgressLog,
)
from skilltrack.domains.skills.events import SKILLS_GOAL_COMPLETED
from skilltrack.domains.skills.models.skill_models import Goal, Milestone, Skill
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox import enqueue as enqueue_outbox

logger = logging.getLogger(__name__)


def recalculate_skill_progress(skill_id: int) -> Optional[Skill]:
    skill = Skill.query.filter_by(id=skill_id).with_for_update().first()
    if skill is None:
        return None

    log_hours = [
        row.hours_logged
        for row in db.session.query(ProgressLog.hours_logged).filter(ProgressLog.skill_id == skill_id)
    ]
    goal_statuses = [
        row.status for row in db.session.query(Goal.status).filter(Goal.skill_id == skill_id)
    ]
    result = calculators.recalculate_skill(
        calculators.SkillSnapshot(
            mastery_percentage=skill.mastery_percentage,
            target_hours=skill.target_hours,
            log_hours=log_hours,
            goal_statuses=goal_statuses,
        )
    )
    skill.total_hours_logged = result.total_hours_logged
    skill.mastery_percentage = result.mastery_percentage
    db.session.flush()
    return skill


def recalculate_goal_progress(goal_id: int, clock: Optional[SystemClock] = None) -> Optional[Goal]:
    """Recompute one goal, stage a completion event on transition, then its skill."""
    clock = get_clock(clock)
    goal = Goal.query.filter_by(id=goal_id).with_for_update().first()
    if goal is None:
        return None

    log_hours = [
        row.hours_logged
        for row in db.session.query(ProgressLog.hours_logged).filter(ProgressLog.goal_id == goal_id)
    ]
    milestone_total, milestone_completed = (
        db.session.query(
            func.count(Milestone.id),
            func.coalesce(
                func.sum(case((Milestone.is_completed.is_(True), 1), else_=0)), 0
            ),
        )
        .filter(Milestone.goal_id == goal_id)
        .one()
    )
    was_completed = goal.status == calculators.STATUS_COMPLETED
    result = calculators.recalculate_goal(
        calculators.GoalSnapshot(
            status=goal.status,
            progress_percentage=goal.progress_percentage,
            target_hours=goal.target_hours,
            completed_at=goal.completed_at,
            log_hours=log_hours,
            milestone_total=int(milestone_total or 0),
            milestone_completed=int(milestone_completed or 0),
        ),
        clock.now(),
    )
    goal.logged_hours = result.logged_hours
    goal.progress_percentage = result.progress_percentage
    goal.status = result.status
    goal.completed_at = result.completed_at
    db.session.flush()

    if result.is_completed and not was_completed:
        logger.info("Goal %s reached completion", goal.id)
        enqueue_outbox(
            SKILLS_GOAL_COMPLETED,
            {
                "goal_id": goal.id,
                "skill_id": goal.skill_id,
                "user_id": goal.user_id,
                "completed_at": goal.completed_at.isoformat(),
            },
            user_id=goal.user_id,
        )

    recalculate_skill_progress(goal.skill_id)
    return goal


def rebuild_daily_stat(user_id: int, day: date) -> DailyStat:
    """Find-or-create the (user, day) row and overwrite it from that day's logs."""
    stat = (
        DailyStat.query.filter_by(user_id=user_id, stat_date=day)
        .with_for_update()
        .first()
    )
    if stat is None:
        stat = DailyStat(user_id=user_id, stat_date=day)
        db.session.add(stat)

    logs = ProgressLog.query.filter_by(user_id=user_id, log_date=day).all()
    completions_by_log = dict(
        db.session.query(MilestoneCompletion.progress_log_id, func.count(MilestoneCompletion.id))
        .join(ProgressLog, ProgressLog.id == MilestoneCompletion.progress_log_id)
        .filter(ProgressLog.user_id == user_id, ProgressLog.log_date == day)
        .group_by(MilestoneCompletion.progress_log_id)
        .all()
    )
    goals_completed = sum(
        1
        for (completed_at,) in db.session.query(Goal.completed_at).filter(
            Goal.user_id == user_id,
            Goal.status == calculators.STATUS_COMPLETED,
            Goal.completed_at.isnot(None),
        )
        if completed_at.date() == day
    )
    rollup = calculators.rollup_daily_stat(
        [
            calculators.DayLog(
                skill_id=log.skill_id,
                hours=log.hours_logged,
                milestones_completed=int(completions_by_log.get(log.id, 0)),
            )
            for log in logs
        ],
        goals_completed=goals_completed,
    )
    stat.total_hours_logged = rollup.total_hours_logged
    stat.skills_practiced = rollup.skills_practiced
    stat.logs_count = rollup.logs_count
    stat.milestones_completed = rollup.milestones_completed
    stat.goals_completed = rollup.goals_completed
    db.session.flush()
    return stat


def stat_days_for_goals(goal_ids: Iterable[int]) -> set[date]:
    """Days whose daily stat counts a milestone completion or a completion of these goals."""
    goal_ids = list(goal_ids)
    if not goal_ids:
        return set()
    days = {
        log_date
        for (log_date,) in db.session.query(ProgressLog.log_date)
        .join(MilestoneCompletion, MilestoneCompletion.progress_log_id == ProgressLog.id)
        .join(Milestone, Milestone.id == MilestoneCompletion.milestone_id)
        .filter(Milestone.goal_id.in_(goal_ids))
        .distinct()
    }
    days.update(
        completed_at.date()
        for (completed_at,) in db.session.query(Goal.completed_at).filter(
            Goal.id.in_(goal_ids),
            Goal.status == calculators.STATUS_COMPLETED,
            Goal.completed_at.isnot(None),
        )
    )
    return days


def run_cascade(
    user_id: int,
    *,
    goal_ids: Iterable[int],
    skill_ids: Iterable[int],
    days: Iterable[date],
    clock: Optional[SystemClock] = None,
) -> None:
    """Goals (each pulling its skill along), then remaining skills, then daily stats."""
    clock = get_clock(clock)
    touched_skills: set[int] = set()
    completed_now = False
    for goal_id in sorted(set(goal_ids)):
        goal = Goal.query.filter_by(id=goal_id).first()
        before = goal.status if goal else None
        goal = recalculate_goal_progress(goal_id, clock=clock)
        if goal is None:
            continue
        touched_skills.add(goal.skill_id)
        if goal.status == calculators.STATUS_COMPLETED and before != calculators.STATUS_COMPLETED:
            completed_now = True

    for skill_id in sorted(set(skill_ids) - touched_skills):
        recalculate_skill_progress(skill_id)

    stat_days = set(days)
    if completed_now:
        stat_days.add(clock.today())
    for day in sorted(stat_days):
        rebuild_daily_stat(user_id, day)
