"""AI learning-plan generation, goal refinement and plan application."""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from flask import current_app
from pydantic import ValidationError
from sqlalchemy import func

from skilltrack.core.utils.clock import SystemClock, get_clock
from skilltrack.domains.planner.events import PLANNER_PLAN_APPLIED, PLANNER_PLAN_GENERATED
from skilltrack.domains.planner.models.plan_models import AiGeneratedPlan
from skilltrack.domains.planner.schemas.plan_schemas import (
    ApplyPlanRequest,
    PlanGoal,
    PlanRequest,
    PlanResponse,
    SkillPlan,
)
from skilltrack.domains.planner.services.gemini_client import (
    PlanParseError,
    extract_json_object,
    generate_text,
)
from skilltrack.domains.skills.models.skill_models import Category, Goal, Milestone, Skill
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox import enqueue as enqueue_outbox

logger = logging.getLogger(__name__)

VAGUE_TERMS = ("learn", "get better at", "improve", "master", "understand")
MIN_GOAL_WORDS = 5
PLAN_CATEGORIES = (
    "Programming",
    "Languages",
    "Music",
    "Art & Design",
    "Business",
    "Health & Fitness",
    "Personal Development",
    "Academic",
    "Other",
)


def needs_clarification(request: PlanRequest) -> bool:
    goal = request.goal_description.lower()
    if len(goal.split()) < MIN_GOAL_WORDS:
        return True
    return any(term in goal for term in VAGUE_TERMS) and not request.clarifications


def _context_block(request: PlanRequest) -> str:
    lines = [f"Goal: {request.goal_description}"]
    if request.target_date:
        lines.append(f"Target date: {request.target_date:%B} {request.target_date.day}, {request.target_date.year}")
    if request.frequency:
        lines.append(f"Frequency: {request.frequency}")
    if request.hours_per_period is not None:
        lines.append(f"Hours per period: {request.hours_per_period}")
    for item in request.clarifications:
        lines.append(f"Q: {item.question}")
        lines.append(f"A: {item.answer}")
    return "\n".join(lines)


def build_clarification_prompt(request: PlanRequest) -> str:
    target = (
        f"{request.target_date:%B} {request.target_date.day}, {request.target_date.year}"
        if request.target_date
        else "Not specified"
    )
    hours = request.hours_per_period if request.hours_per_period is not None else "some"
    return (
        "You are helping someone build a personal learning plan. "
        f'They want to: "{request.goal_description}"\n\n'
        f"Target date: {target}\n"
        f"Time commitment: {hours} hours {request.frequency or ''}\n"
        f"Preferred time: {request.preferred_time_slot or 'Any time'}\n\n"
        "The goal is still vague. Ask exactly ONE clarifying question that helps you learn "
        "their current level, the sub-topics they care about, how they will use the skill, "
        "or a concrete project or outcome they have in mind.\n"
        "Reply with the question only, in a friendly conversational tone."
    )


def build_plan_prompt(request: PlanRequest) -> str:
    example = {
        "skillName": "Short name for the skill",
        "description": "One or two sentences describing the skill",
        "bigGoal": "The main outcome the learner is after",
        "category": "One of: " + ", ".join(PLAN_CATEGORIES),
        "goals": [
            {
                "title": "Week 1: goal title",
                "description": "What this week covers",
                "weekNumber": 1,
                "milestones": ["Concrete step 1", "Concrete step 2", "Concrete step 3"],
            }
        ],
    }
    return (
        "You are an experienced learning coach. Build a structured learning plan from the "
        "details below.\n\n"
        f"{_context_block(request)}\n\n"
        "Answer with JSON using exactly this structure:\n"
        f"{json.dumps(example, indent=2)}\n\n"
        "Include 4 to 8 weekly goals, each with 3 to 5 specific, actionable milestones.\n"
        "Reply with the JSON only and no other text."
    )


def _save_attempt(
    user_id: int, request: PlanRequest, plan: Optional[SkillPlan], status: str
) -> AiGeneratedPlan:
    record = AiGeneratedPlan(
        user_id=user_id,
        goal_description=request.goal_description,
        target_date=request.target_date,
        dedication_frequency=request.frequency,
        dedication_hours=request.hours_per_period,
        preferred_time_slot=request.preferred_time_slot,
        clarifications=[c.model_dump() for c in request.clarifications],
        ai_response=plan.model_dump(mode="json") if plan else None,
        status=status,
    )
    db.session.add(record)
    db.session.flush()
    return record


def _parse_plan(text: Optional[str]) -> SkillPlan:
    data = extract_json_object(text)
    try:
        return SkillPlan.model_validate(data)
    except ValidationError as e:
        logger.error("AI plan JSON did not match the plan shape")
        raise PlanParseError("AI plan has an unexpected shape") from e


def generate_plan(user_id: int, request: PlanRequest) -> PlanResponse:
    """Return a clarifying question or a full plan, persisting the attempt.

    Raises:
        PlanGenerationError: If the AI service is unavailable or unusable
    """
    max_clarifications = int(current_app.config.get("AI_MAX_CLARIFICATIONS", 2))
    if len(request.clarifications) < max_clarifications and needs_clarification(request):
        question = (generate_text(build_clarification_prompt(request)) or "").strip()
        if question:
            record = _save_attempt(user_id, request, None, "pending")
            db.session.commit()
            return PlanResponse(
                needs_clarification=True, clarification_question=question, plan_id=record.id
            )

    plan = _parse_plan(generate_text(build_plan_prompt(request)))
    record = _save_attempt(user_id, request, plan, "completed")
    enqueue_outbox(
        PLANNER_PLAN_GENERATED,
        {"plan_id": record.id, "user_id": user_id, "goal_count": len(plan.goals)},
        user_id=user_id,
    )
    db.session.commit()
    logger.info("Generated AI plan %s for user %s", record.id, user_id)
    return PlanResponse(plan=plan, plan_id=record.id)


def refine_goal(instruction: str, goal: PlanGoal) -> PlanGoal:
    prompt = (
        "You are an experienced learning coach. The learner wants to change one goal of "
        "their plan.\n\n"
        f"Current goal JSON:\n{json.dumps(goal.model_dump(mode='json', by_alias=True))}\n\n"
        f'Instruction: "{instruction}"\n\n'
        "Rewrite the goal title, description and milestones to follow the instruction, "
        "keeping the same structure. Reply with the updated goal JSON object only."
    )
    data = extract_json_object(generate_text(prompt))
    try:
        return PlanGoal.model_validate(data)
    except ValidationError as e:
        raise PlanParseError("refined goal has an unexpected shape") from e


def _resolve_category(name: Optional[str]) -> Optional[int]:
    if not name or not name.strip():
        return None
    category = Category.query.filter(func.lower(Category.name) == name.strip().lower()).first()
    return category.id if category else None


def apply_plan(user_id: int, data: ApplyPlanRequest, clock: Optional[SystemClock] = None) -> Skill:
    """Create the skill, goals and milestones of an accepted plan in one transaction."""
    clock = get_clock(clock)
    plan = data.plan
    now = clock.now()
    milestone_count = 0
    try:
        skill = Skill(
            user_id=user_id,
            category_id=_resolve_category(plan.category),
            name=plan.skill_name.strip(),
            description=plan.description,
            big_goal=plan.big_goal,
            status="in_progress",
            started_at=now,
            target_date=data.target_date,
        )
        db.session.add(skill)
        for goal_order, item in enumerate(plan.goals):
            goal = Goal(
                skill=skill,
                user_id=user_id,
                title=item.title,
                description=item.description,
                status="pending",
                is_ai_generated=True,
                sort_order=goal_order,
            )
            milestones: List[Milestone] = [
                Milestone(user_id=user_id, title=title, is_ai_generated=True, sort_order=order)
                for order, title in enumerate(t for t in item.milestones if t and t.strip())
            ]
            goal.milestones.extend(milestones)
            milestone_count += len(milestones)
            db.session.add(goal)
        db.session.flush()

        plan_id = None
        if data.plan_id is not None:
            record = AiGeneratedPlan.query.filter_by(id=data.plan_id, user_id=user_id).first()
            if record:
                record.status = "applied"
                record.skill_id = skill.id
                plan_id = record.id

        enqueue_outbox(
            PLANNER_PLAN_APPLIED,
            {
                "plan_id": plan_id,
                "user_id": user_id,
                "skill_id": skill.id,
                "goal_count": len(plan.goals),
                "milestone_count": milestone_count,
            },
            user_id=user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info("Applied AI plan to new skill %s for user %s", skill.id, user_id)
    return skill
