"""Skill and nested goal API controllers (thin, service-backed)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from skilltrack.core.utils.decorators import csrf_protected
from skilltrack.core.utils.validation import service_error_response, validation_response
from skilltrack.domains.skills.mappers import map_category, map_goal, map_skill, map_skill_detail
from skilltrack.domains.skills.schemas.skill_schemas import (
    GoalCreate,
    GoalUpdate,
    ScheduleRequest,
    SkillCreate,
    SkillUpdate,
)
from skilltrack.domains.skills.services.goal_service import (
    create_goal,
    delete_goal,
    get_goal,
    list_goals,
    update_goal,
)
from skilltrack.domains.skills.services.skill_service import (
    create_skill,
    delete_skill,
    get_skill,
    list_categories,
    list_skills,
    update_skill,
)

skill_api_bp = Blueprint("skill_api", __name__)


@skill_api_bp.get("/categories")
@jwt_required()
def list_categories_endpoint():
    categories = [map_category(c).model_dump(mode="json") for c in list_categories()]
    return jsonify({"ok": True, "categories": categories})


@skill_api_bp.post("")
@jwt_required()
@csrf_protected
def create_skill_endpoint():
    payload = request.get_json(silent=True) or {}
    try:
        data = SkillCreate.model_validate(payload)
    except ValidationError as exc:
        return validation_response(exc)
    user_id = int(get_jwt_identity())
    try:
        skill = create_skill(user_id, data)
    except ValueError as exc:
        return service_error_response(exc)
    return jsonify({"ok": True, "skill": map_skill_detail(skill).model_dump(mode="json")}), 201


@skill_api_bp.get("")
@jwt_required()
def list_skills_endpoint():
    user_id = int(get_jwt_identity())
    visibility = request.args.get("visibility") or None
    status = request.args.get("status") or None
    skills = list_skills(user_id, visibility=visibility, status=status)
    return jsonify({"ok": True, "skills": [map_skill(s).model_dump(mode="json") for s in skills]})


@skill_api_bp.get("/<int:skill_id>")
@jwt_required()
def get_skill_endpoint(skill_id: int):
    skill = get_skill(int(get_jwt_identity()), skill_id)
    if not skill:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "skill": map_skill_detail(skill).model_dump(mode="json")})


@skill_api_bp.patch("/<int:skill_id>")
@jwt_required()
@csrf_protected
def update_skill_endpoint(skill_id: int):
    payload = request.get_json(silent=True) or {}
    schedule_payload = payload.pop("schedule", None) if isinstance(payload, dict) else None
    try:
        data = SkillUpdate.model_validate(payload)
        schedule = (
            ScheduleRequest.model_validate(schedule_payload) if schedule_payload is not None else None
        )
    except ValidationError as exc:
        return validation_response(exc)
    user_id = int(get_jwt_identity())
    try:
        skill = update_skill(user_id, skill_id, data, schedule=schedule)
    except ValueError as exc:
        return service_error_response(exc)
    if not skill:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "skill": map_skill_detail(skill).model_dump(mode="json")})


@skill_api_bp.delete("/<int:skill_id>")
@jwt_required()
@csrf_protected
def delete_skill_endpoint(skill_id: int):
    deleted = delete_skill(int(get_jwt_identity()), skill_id)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@skill_api_bp.get("/<int:skill_id>/goals")
@jwt_required()
def list_goals_endpoint(skill_id: int):
    goals = list_goals(int(get_jwt_identity()), skill_id)
    if goals is None:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "goals": [map_goal(g).model_dump(mode="json") for g in goals]})


@skill_api_bp.post("/<int:skill_id>/goals")
@jwt_required()
@csrf_protected
def create_goal_endpoint(skill_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = GoalCreate.model_validate(payload)
    except ValidationError as exc:
        return validation_response(exc)
    try:
        goal = create_goal(int(get_jwt_identity()), skill_id, data)
    except ValueError as exc:
        return service_error_response(exc)
    return jsonify({"ok": True, "goal": map_goal(goal).model_dump(mode="json")}), 201


@skill_api_bp.get("/<int:skill_id>/goals/<int:goal_id>")
@jwt_required()
def get_goal_endpoint(skill_id: int, goal_id: int):
    goal = get_goal(int(get_jwt_identity()), goal_id, skill_id=skill_id)
    if not goal:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "goal": map_goal(goal).model_dump(mode="json")})


@skill_api_bp.put("/<int:skill_id>/goals/<int:goal_id>")
@jwt_required()
@csrf_protected
def update_goal_endpoint(skill_id: int, goal_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = GoalUpdate.model_validate(payload)
    except ValidationError as exc:
        return validation_response(exc)
    goal = update_goal(int(get_jwt_identity()), skill_id, goal_id, data)
    if not goal:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "goal": map_goal(goal).model_dump(mode="json")})


@skill_api_bp.delete("/<int:skill_id>/goals/<int:goal_id>")
@jwt_required()
@csrf_protected
def delete_goal_endpoint(skill_id: int, goal_id: int):
    deleted = delete_goal(int(get_jwt_identity()), skill_id, goal_id)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})
