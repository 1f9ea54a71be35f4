"""AI planner API."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from skilltrack.core.utils.decorators import csrf_protected
from skilltrack.core.utils.validation import validation_response
from skilltrack.domains.planner.schemas.plan_schemas import (
    ApplyPlanRequest,
    PlanRequest,
    RefineGoalRequest,
)
from skilltrack.domains.planner.services.gemini_client import (
    PlanGenerationError,
    PlanNotConfiguredError,
)
from skilltrack.domains.planner.services.plan_service import apply_plan, generate_plan, refine_goal
from skilltrack.domains.skills.mappers import map_skill_detail

plan_api_bp = Blueprint("plan_api", __name__)


def _plan_error(exc: PlanGenerationError):
    if isinstance(exc, PlanNotConfiguredError):
        return (
            jsonify({"ok": False, "error": "ai_not_configured", "message": "AI service not configured."}),
            503,
        )
    current_app.logger.warning("AI plan generation failed: %s", type(exc).__name__)
    return (
        jsonify(
            {
                "ok": False,
                "error": "ai_unavailable",
                "message": "Failed to generate plan. Please try again.",
            }
        ),
        502,
    )


@plan_api_bp.post("/generate-plan")
@jwt_required()
@csrf_protected
def generate_plan_endpoint():
    payload = request.get_json(silent=True) or {}
    try:
        data = PlanRequest.model_validate(payload)
    except ValidationError as exc:
        return validation_response(exc)
    try:
        result = generate_plan(int(get_jwt_identity()), data)
    except PlanGenerationError as exc:
        return _plan_error(exc)
    return jsonify({"ok": True, **result.model_dump(mode="json")})


@plan_api_bp.post("/refine-goal")
@jwt_required()
@csrf_protected
def refine_goal_endpoint():
    payload = request.get_json(silent=True) or {}
    try:
        data = RefineGoalRequest.model_validate(payload)
    except ValidationError as exc:
        return validation_response(exc)
    try:
        goal = refine_goal(data.instruction, data.goal)
    except PlanGenerationError as exc:
        return _plan_error(exc)
    return jsonify({"ok": True, "goal": goal.model_dump(mode="json")})


@plan_api_bp.post("/apply-plan")
@jwt_required()
@csrf_protected
def apply_plan_endpoint():
    payload = request.get_json(silent=True) or {}
    try:
        data = ApplyPlanRequest.model_validate(payload)
    except ValidationError as exc:
        return validation_response(exc)
    skill = apply_plan(int(get_jwt_identity()), data)
    return jsonify({"ok": True, "skill": map_skill_detail(skill).model_dump(mode="json")}), 201
