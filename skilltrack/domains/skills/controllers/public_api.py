"""Public (unauthenticated) sharing endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_jwt_extended import get_jwt_identity, jwt_required

from skilltrack.domains.skills.mappers import map_skill_detail
from skilltrack.domains.skills.services.public_service import (
    build_public_profile,
    get_public_skill_by_slug,
    get_skill_for_details,
)

public_api_bp = Blueprint("public_api", __name__)


@public_api_bp.get("/skills/<string:slug>")
def public_skill_endpoint(slug: str):
    skill = get_public_skill_by_slug(slug)
    if not skill:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "skill": map_skill_detail(skill).model_dump(mode="json")})


@public_api_bp.get("/skills/<int:skill_id>/details")
@jwt_required(optional=True)
def skill_details_endpoint(skill_id: int):
    identity = get_jwt_identity()
    viewer_id = int(identity) if identity is not None else None
    skill = get_skill_for_details(skill_id, viewer_id=viewer_id)
    if not skill:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "skill": map_skill_detail(skill).model_dump(mode="json")})


@public_api_bp.get("/users/<string:username>")
def public_profile_endpoint(username: str):
    profile = build_public_profile(username)
    if not profile:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "profile": profile})
