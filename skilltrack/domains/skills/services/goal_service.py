"""Goal service: goals and milestones under a skill."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func

from skilltrack.core.utils.clock import SystemClock, get_clock
from skilltrack.domains.progress.models.progress_models import ProgressLog
from skilltrack.domains.progress.services.recalc_service import (
    rebuild_daily_stat,
    recalculate_goal_progress,
    recalculate_skill_progress,
    stat_days_for_goals,
)
from skilltrack.domains.skills.events import (
    SKILLS_GOAL_COMPLETED,
    SKILLS_GOAL_CREATED,
    SKILLS_GOAL_DELETED,
    SKILLS_GOAL_UPDATED,
)
from skilltrack.domains.skills.models.skill_models import Goal, Skill
from skilltrack.domains.skills.schemas.skill_schemas import GoalCreate, GoalUpdate
from skilltrack.domains.skills.services.skill_service import build_goal
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox import enqueue as enqueue_outbox


def _owned_skill(user_id: int, skill_id: int) -> Optional[Skill]:
    return Skill.query.filter_by(id=skill_id, user_id=user_id).first()


def list_goals(user_id: int, skill_id: int) -> Optional[List[Goal]]:
    if not _owned_skill(user_id, skill_id):
        return None
    return (
        Goal.query.filter_by(skill_id=skill_id, user_id=user_id)
        .order_by(Goal.sort_order.asc(), Goal.id.asc())
        .all()
    )


def get_goal(user_id: int, goal_id: int, skill_id: Optional[int] = None) -> Optional[Goal]:
    query = Goal.query.filter_by(id=goal_id, user_id=user_id)
    if skill_id is not None:
        query = query.filter_by(skill_id=skill_id)
    return query.first()


def create_goal(user_id: int, skill_id: int, data: GoalCreate) -> Goal:
    skill = _owned_skill(user_id, skill_id)
    if not skill:
        raise ValueError("not_found")

    next_order = (
        db.session.query(func.coalesce(func.max(Goal.sort_order), -1))
        .filter(Goal.skill_id == skill_id)
        .scalar()
    ) + 1
    try:
        goal = build_goal(skill, data, sort_order=next_order)
        db.session.flush()
        recalculate_skill_progress(skill_id)
        enqueue_outbox(
            SKILLS_GOAL_CREATED,
            {
                "goal_id": goal.id,
                "skill_id": skill_id,
                "user_id": user_id,
                "title": goal.title,
                "milestone_count": len(goal.milestones),
                "is_ai_generated": goal.is_ai_generated,
            },
            user_id=user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return goal


def _apply_status(goal: Goal, status: str, clock: SystemClock) -> bool:
    """Stamp lifecycle fields for a manual status change; True on a first completion.

    A manual change may reopen a completed goal. ``completed_at`` keeps its
    first stamp, so completing it again neither restamps nor forces 100.
    """
    if status == goal.status:
        return False
    goal.status = status
    if status == "in_progress" and goal.started_at is None:
        goal.started_at = clock.now()
    if status == "completed" and goal.completed_at is None:
        goal.completed_at = clock.now()
        goal.progress_percentage = Decimal("100.00")
        return True
    return False


def _enqueue_completed(goal: Goal) -> None:
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


def update_goal(
    user_id: int,
    skill_id: int,
    goal_id: int,
    data: GoalUpdate,
    clock: Optional[SystemClock] = None,
) -> Optional[Goal]:
    clock = get_clock(clock)
    goal = get_goal(user_id, goal_id, skill_id=skill_id)
    if not goal:
        return None

    fields = data.model_dump(exclude_unset=True)
    changed: Dict[str, object] = {}
    target_changed = False
    completed_now = False
    previous_status, previous_completed_at = goal.status, goal.completed_at
    try:
        for key, value in fields.items():
            if key == "status":
                if value is not None:
                    completed_now = _apply_status(goal, value, clock)
                    changed[key] = goal.status
                continue
            if key in ("title", "priority", "sort_order") and value is None:
                continue
            if isinstance(value, str):
                value = value.strip()
            if key == "target_hours" and value != goal.target_hours:
                target_changed = True
            setattr(goal, key, value)
            changed[key] = str(value) if value is not None else None
        db.session.flush()

        if target_changed and not completed_now:
            recalculate_goal_progress(goal.id, clock=clock)
        else:
            recalculate_skill_progress(goal.skill_id)
        if goal.status != previous_status or goal.completed_at != previous_completed_at:
            stamps = (previous_completed_at, goal.completed_at)
            for day in sorted({stamp.date() for stamp in stamps if stamp is not None}):
                rebuild_daily_stat(user_id, day)
        if completed_now:
            _enqueue_completed(goal)

        enqueue_outbox(
            SKILLS_GOAL_UPDATED,
            {"goal_id": goal.id, "skill_id": goal.skill_id, "user_id": user_id, "fields": changed},
            user_id=user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return goal


def update_goal_status(
    user_id: int, goal_id: int, status: str, clock: Optional[SystemClock] = None
) -> Optional[Goal]:
    goal = get_goal(user_id, goal_id)
    if not goal:
        return None
    return update_goal(user_id, goal.skill_id, goal_id, GoalUpdate(status=status), clock=clock)


def delete_goal(user_id: int, skill_id: int, goal_id: int) -> bool:
    """Delete a goal; its logs stay attached to the skill without a goal."""
    goal = get_goal(user_id, goal_id, skill_id=skill_id)
    if not goal:
        return False
    try:
        affected_days = stat_days_for_goals([goal_id])
        ProgressLog.query.filter_by(goal_id=goal_id).update(
            {"goal_id": None}, synchronize_session="fetch"
        )
        goal.skill.goals.remove(goal)
        db.session.delete(goal)
        db.session.flush()
        recalculate_skill_progress(skill_id)
        # completions of its milestones went with the goal
        for day in sorted(affected_days):
            rebuild_daily_stat(user_id, day)
        enqueue_outbox(
            SKILLS_GOAL_DELETED,
            {"goal_id": goal_id, "skill_id": skill_id, "user_id": user_id},
            user_id=user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return True
