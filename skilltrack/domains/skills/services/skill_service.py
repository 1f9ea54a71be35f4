"""Skill service: CRUD, schedules, public slugs and event emission."""

from __future__ import annotations

import logging
import random
import re
from typing import Dict, List, Optional

from skilltrack.core.utils.clock import SystemClock, get_clock
from skilltrack.domains.progress.models.progress_models import ProgressLog
from skilltrack.domains.progress.services.recalc_service import (
    rebuild_daily_stat,
    recalculate_skill_progress,
    stat_days_for_goals,
)
from skilltrack.domains.skills.events import (
    SKILLS_SKILL_CREATED,
    SKILLS_SKILL_DELETED,
    SKILLS_SKILL_UPDATED,
)
from skilltrack.domains.skills.models.skill_models import (
    Category,
    Goal,
    Milestone,
    ScheduleDay,
    Skill,
    SkillSchedule,
)
from skilltrack.domains.skills.schemas.skill_schemas import (
    GoalCreate,
    ScheduleRequest,
    SkillCreate,
    SkillUpdate,
)
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox import enqueue as enqueue_outbox

logger = logging.getLogger(__name__)

_slug_pattern = re.compile(r"[^a-z0-9]+")
SLUG_ATTEMPTS = 10


def _slugify(value: str) -> str:
    value = (value or "").lower().strip()
    value = _slug_pattern.sub("-", value)
    value = value.strip("-")
    return value[:200] or "skill"


def generate_public_slug(name: str) -> str:
    """``<slugified-name>-NNNN``, retried until unused."""
    base = _slugify(name)
    for _ in range(SLUG_ATTEMPTS):
        candidate = f"{base}-{random.randint(1000, 9999)}"
        if not Skill.query.filter_by(public_slug=candidate).first():
            return candidate
    raise ValueError("duplicate")


def _ensure_category(category_id: Optional[int]) -> None:
    if category_id is not None and db.session.get(Category, category_id) is None:
        raise ValueError("invalid_reference")


def _apply_schedule(skill: Skill, data: ScheduleRequest) -> None:
    schedule = skill.schedule
    if schedule is None:
        schedule = SkillSchedule(skill=skill)
        db.session.add(schedule)
    schedule.frequency = data.frequency
    schedule.hours_per_period = data.hours_per_period
    schedule.preferred_time_slot = data.preferred_time_slot
    if schedule.days:
        # old rows must be gone before re-inserting the same day_of_week
        schedule.days.clear()
        db.session.flush()
    schedule.days = [
        ScheduleDay(
            day_of_week=day.day_of_week,
            start_time=day.start_time,
            end_time=day.end_time,
            label=day.label,
        )
        for day in data.days
    ]


def build_goal(skill: Skill, data: GoalCreate, sort_order: int, is_ai_generated: bool = False) -> Goal:
    """Attach a goal with its milestones to ``skill``; caller flushes."""
    goal = Goal(
        skill=skill,
        user_id=skill.user_id,
        title=data.title,
        description=(data.description or "").strip() or None,
        target_hours=data.target_hours,
        target_date=data.target_date,
        priority=data.priority,
        sort_order=data.sort_order if data.sort_order is not None else sort_order,
        status="pending",
        is_ai_generated=is_ai_generated,
    )
    for index, item in enumerate(data.milestones):
        goal.milestones.append(
            Milestone(
                user_id=skill.user_id,
                title=item.title,
                description=(item.description or "").strip() or None,
                category=item.category,
                sort_order=item.sort_order if item.sort_order is not None else index,
                is_ai_generated=is_ai_generated,
            )
        )
    db.session.add(goal)
    return goal


def create_skill(user_id: int, data: SkillCreate, clock: Optional[SystemClock] = None) -> Skill:
    clock = get_clock(clock)
    _ensure_category(data.category_id)

    skill = Skill(
        user_id=user_id,
        name=data.name,
        description=(data.description or "").strip() or None,
        big_goal=(data.big_goal or "").strip() or None,
        category_id=data.category_id,
        target_hours=data.target_hours,
        target_date=data.target_date,
        visibility=data.visibility,
        icon=data.icon,
        color=data.color,
        status="in_progress",
        started_at=clock.now(),
    )
    if skill.is_public:
        skill.public_slug = generate_public_slug(skill.name)
    db.session.add(skill)
    if data.schedule is not None:
        _apply_schedule(skill, data.schedule)
    for index, goal_data in enumerate(data.goals):
        build_goal(skill, goal_data, sort_order=index)
    db.session.flush()

    enqueue_outbox(
        SKILLS_SKILL_CREATED,
        {
            "skill_id": skill.id,
            "user_id": user_id,
            "name": skill.name,
            "category_id": skill.category_id,
            "visibility": skill.visibility,
            "goal_count": len(data.goals),
            "created_at": skill.created_at.isoformat(),
        },
        user_id=user_id,
    )
    db.session.commit()
    logger.info("Skill %s created for user %s", skill.id, user_id)
    return skill


def get_skill(user_id: int, skill_id: int) -> Optional[Skill]:
    return Skill.query.filter_by(id=skill_id, user_id=user_id).first()


def list_skills(
    user_id: int,
    visibility: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Skill]:
    query = Skill.query.filter_by(user_id=user_id)
    if visibility:
        query = query.filter(Skill.visibility == visibility)
    if status:
        query = query.filter(Skill.status == status)
    return query.order_by(Skill.created_at.desc(), Skill.id.desc()).all()


def list_categories() -> List[Category]:
    return Category.query.order_by(Category.name.asc()).all()


def update_skill(
    user_id: int,
    skill_id: int,
    data: SkillUpdate,
    schedule: Optional[ScheduleRequest] = None,
    clock: Optional[SystemClock] = None,
) -> Optional[Skill]:
    clock = get_clock(clock)
    skill = get_skill(user_id, skill_id)
    if not skill:
        return None

    fields = data.model_dump(exclude_unset=True)
    if "category_id" in fields:
        _ensure_category(fields["category_id"])

    changed_fields: Dict[str, object] = {}
    target_changed = False
    for key, value in fields.items():
        if key in ("name", "status", "visibility") and value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
        if key == "target_hours" and value != skill.target_hours:
            target_changed = True
        if key == "status" and value != skill.status:
            if value == "in_progress" and skill.started_at is None:
                skill.started_at = clock.now()
            if value == "completed":
                skill.completed_at = clock.now()
        setattr(skill, key, value)
        changed_fields[key] = str(value) if value is not None else None

    if skill.is_public and not skill.public_slug:
        skill.public_slug = generate_public_slug(skill.name)
    if schedule is not None:
        _apply_schedule(skill, schedule)
        changed_fields["schedule"] = schedule.frequency
    db.session.flush()

    if target_changed:
        recalculate_skill_progress(skill.id)

    enqueue_outbox(
        SKILLS_SKILL_UPDATED,
        {
            "skill_id": skill.id,
            "user_id": user_id,
            "fields": changed_fields,
            "updated_at": clock.now().isoformat(),
        },
        user_id=user_id,
    )
    db.session.commit()
    return skill


def delete_skill(user_id: int, skill_id: int) -> bool:
    """Delete a skill with its goals and logs, then rebuild the affected daily stats."""
    skill = get_skill(user_id, skill_id)
    if not skill:
        return False
    try:
        logs = ProgressLog.query.filter_by(skill_id=skill_id, user_id=user_id).all()
        affected_days = {log.log_date for log in logs}
        affected_days |= stat_days_for_goals(goal.id for goal in skill.goals)
        for log in logs:
            db.session.delete(log)
        db.session.flush()
        db.session.delete(skill)
        db.session.flush()
        for day in sorted(affected_days):
            rebuild_daily_stat(user_id, day)
        enqueue_outbox(
            SKILLS_SKILL_DELETED,
            {"skill_id": skill_id, "user_id": user_id},
            user_id=user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return True
