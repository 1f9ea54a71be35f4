"""Progress log service: log mutations drive the recompute cascade.

A create or delete validates ownership first, then runs milestone
bookkeeping, goal and skill recomputation and the daily rollup inside one
transaction. Any failure rolls the whole mutation back.
"""

from __future__ import annotations

import logging
from typing import Optional

from skilltrack.core.utils.clock import SystemClock, get_clock
from skilltrack.core.utils.pagination import paginate
from skilltrack.domains.progress.events import PROGRESS_LOG_CREATED, PROGRESS_LOG_DELETED
from skilltrack.domains.progress.models.progress_models import MilestoneCompletion, ProgressLog
from skilltrack.domains.progress.schemas.progress_schemas import ProgressLogCreate
from skilltrack.domains.progress.services.recalc_service import run_cascade
from skilltrack.domains.skills.models.skill_models import Goal, Milestone, Skill
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox import enqueue as enqueue_outbox

logger = logging.getLogger(__name__)


def _validate_references(user_id: int, data: ProgressLogCreate) -> None:
    skill = Skill.query.filter_by(id=data.skill_id, user_id=user_id).first()
    if not skill:
        raise ValueError("invalid_reference")
    if data.goal_id is not None:
        goal = Goal.query.filter_by(id=data.goal_id, user_id=user_id).first()
        if not goal or goal.skill_id != data.skill_id:
            raise ValueError("invalid_reference")


def create_log(
    user_id: int, data: ProgressLogCreate, clock: Optional[SystemClock] = None
) -> ProgressLog:
    """Record time against a skill and cascade it through every aggregate.

    Milestone ids that are unknown, not owned or already completed are
    skipped silently.
    """
    clock = get_clock(clock)
    _validate_references(user_id, data)

    try:
        log = ProgressLog(
            user_id=user_id,
            skill_id=data.skill_id,
            goal_id=data.goal_id,
            title=(data.title or "").strip() or None,
            description=(data.description or "").strip() or None,
            hours_logged=data.hours_logged,
            log_date=data.log_date,
            quality_rating=data.quality_rating,
            created_at=clock.now(),
        )
        db.session.add(log)
        db.session.flush()

        affected_goals = {log.goal_id} if log.goal_id else set()
        completed_ids = []
        if data.completed_milestone_ids:
            milestones = Milestone.query.filter(
                Milestone.id.in_(data.completed_milestone_ids),
                Milestone.user_id == user_id,
            ).all()
            for milestone in milestones:
                if milestone.is_completed:
                    continue
                now = clock.now()
                milestone.is_completed = True
                milestone.completed_at = now
                log.milestone_completions.append(
                    MilestoneCompletion(milestone_id=milestone.id, completed_at=now)
                )
                affected_goals.add(milestone.goal_id)
                completed_ids.append(milestone.id)
            db.session.flush()

        run_cascade(
            user_id,
            goal_ids=affected_goals,
            skill_ids=[log.skill_id],
            days=[log.log_date],
            clock=clock,
        )

        enqueue_outbox(
            PROGRESS_LOG_CREATED,
            {
                "log_id": log.id,
                "user_id": user_id,
                "skill_id": log.skill_id,
                "goal_id": log.goal_id,
                "hours_logged": str(log.hours_logged),
                "log_date": log.log_date.isoformat(),
                "completed_milestone_ids": sorted(completed_ids),
            },
            user_id=user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Progress log cascade failed for user %s", user_id)
        raise
    return log


def get_log(user_id: int, log_id: int) -> Optional[ProgressLog]:
    return ProgressLog.query.filter_by(id=log_id, user_id=user_id).first()


def delete_log(user_id: int, log_id: int, clock: Optional[SystemClock] = None) -> bool:
    """Remove a log and reverse its hours; completed milestones stay completed."""
    clock = get_clock(clock)
    log = get_log(user_id, log_id)
    if not log:
        return False

    goal_id, skill_id, log_date = log.goal_id, log.skill_id, log.log_date
    try:
        db.session.delete(log)
        db.session.flush()
        run_cascade(
            user_id,
            goal_ids=[goal_id] if goal_id else [],
            skill_ids=[skill_id],
            days=[log_date],
            clock=clock,
        )
        enqueue_outbox(
            PROGRESS_LOG_DELETED,
            {
                "log_id": log_id,
                "user_id": user_id,
                "skill_id": skill_id,
                "goal_id": goal_id,
                "log_date": log_date.isoformat(),
            },
            user_id=user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Progress log delete cascade failed for user %s", user_id)
        raise
    return True


def list_logs(
    user_id: int,
    *,
    skill_id: Optional[int] = None,
    goal_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    query = ProgressLog.query.filter_by(user_id=user_id)
    if skill_id is not None:
        query = query.filter(ProgressLog.skill_id == skill_id)
    if goal_id is not None:
        query = query.filter(ProgressLog.goal_id == goal_id)
    query = query.order_by(
        ProgressLog.log_date.desc(), ProgressLog.created_at.desc(), ProgressLog.id.desc()
    )
    return paginate(query, page, page_size)
