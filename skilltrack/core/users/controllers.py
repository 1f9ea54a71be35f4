"""User profile and sharing API."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from skilltrack.core.users.schemas import (
    SharingSettingsSchema,
    UpdateProfileRequest,
    serialize_sharing,
    serialize_user,
)
from skilltrack.core.users.services import (
    get_sharing_settings,
    get_user,
    update_profile,
    update_sharing_settings,
)
from skilltrack.core.utils.decorators import csrf_protected
from skilltrack.core.utils.validation import jsonable_errors

user_api_bp = Blueprint("user_api", __name__)


@user_api_bp.get("/me")
@jwt_required()
def api_me():
    user = get_user(int(get_jwt_identity()))
    if not user:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "user": serialize_user(user).model_dump(mode="json")})


@user_api_bp.patch("/me")
@jwt_required()
@csrf_protected
def api_update_me():
    user = get_user(int(get_jwt_identity()))
    if not user:
        return jsonify({"ok": False, "error": "not_found"}), 404
    payload = request.get_json(silent=True) or {}
    try:
        data = UpdateProfileRequest.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "validation_error", "details": jsonable_errors(exc)}),
            400,
        )
    user = update_profile(user, data)
    return jsonify({"ok": True, "user": serialize_user(user).model_dump(mode="json")})


@user_api_bp.get("/me/sharing")
@jwt_required()
def api_get_sharing():
    settings = get_sharing_settings(int(get_jwt_identity()))
    return jsonify({"ok": True, "sharing": serialize_sharing(settings).model_dump(mode="json")})


@user_api_bp.put("/me/sharing")
@jwt_required()
@csrf_protected
def api_update_sharing():
    payload = request.get_json(silent=True) or {}
    try:
        data = SharingSettingsSchema.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "validation_error", "details": jsonable_errors(exc)}),
            400,
        )
    try:
        settings = update_sharing_settings(int(get_jwt_identity()), data)
    except ValueError as exc:
        code = str(exc)
        if code == "duplicate":
            return jsonify({"ok": False, "error": "duplicate"}), 409
        return jsonify({"ok": False, "error": "validation_error"}), 400
    return jsonify({"ok": True, "sharing": serialize_sharing(settings).model_dump(mode="json")})
