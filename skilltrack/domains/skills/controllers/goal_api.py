"""Goal-by-id API controllers."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from skilltrack.core.utils.decorators import csrf_protected
from skilltrack.core.utils.validation import validation_response
from skilltrack.domains.skills.mappers import map_goal
from skilltrack.domains.skills.schemas.skill_schemas import GoalStatusUpdate
from skilltrack.domains.skills.services.goal_service import get_goal, update_goal_status

goal_api_bp = Blueprint("goal_api", __name__)


@goal_api_bp.get("/<int:goal_id>")
@jwt_required()
def get_goal_endpoint(goal_id: int):
    goal = get_goal(int(get_jwt_identity()), goal_id)
    if not goal:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "goal": map_goal(goal).model_dump(mode="json")})


@goal_api_bp.patch("/<int:goal_id>/status")
@jwt_required()
@csrf_protected
def update_goal_status_endpoint(goal_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = GoalStatusUpdate.model_validate(payload)
    except ValidationError as exc:
        return validation_response(exc)
    goal = update_goal_status(int(get_jwt_identity()), goal_id, data.status)
    if not goal:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "goal": map_goal(goal).model_dump(mode="json")})
