"""Auth HTTP controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, session
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, jwt_required
from pydantic import ValidationError

from skilltrack.core.auth.auth_service import (
    authenticate_user,
    change_password,
    issue_tokens,
    register_user,
    revoke_refresh_token,
)
from skilltrack.core.auth.csrf import generate_csrf_token
from skilltrack.core.auth.schemas import ChangePasswordRequest, LoginRequest, RegisterRequest
from skilltrack.core.users.schemas import serialize_user
from skilltrack.core.users.services import get_user
from skilltrack.core.utils.decorators import csrf_protected
from skilltrack.core.utils.validation import jsonable_errors
from skilltrack.extensions import limiter

auth_bp = Blueprint("auth_api", __name__)


@auth_bp.post("/register")
@limiter.limit("5/minute")
def register():
    payload = request.get_json(silent=True) or {}
    try:
        data = RegisterRequest.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "validation_error", "details": jsonable_errors(exc)}),
            400,
        )
    try:
        result = register_user(
            data,
            auto_issue_tokens=current_app.config.get("AUTO_LOGIN_ON_REGISTER", False),
        )
    except ValueError as exc:
        if str(exc) == "email_already_exists":
            return jsonify({"ok": False, "error": "email_already_exists"}), 409
        return jsonify({"ok": False, "error": "registration_failed"}), 400

    resp = {"ok": True, "user": serialize_user(result["user"]).model_dump(mode="json")}
    if "access_token" in result:
        resp.update(
            {
                "access_token": result["access_token"],
                "refresh_token": result.get("refresh_token"),
                "csrf_token": generate_csrf_token(),
            }
        )
    return jsonify(resp), 201


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login():
    # Login stays stateless even if a stale session cookie is present.
    session.clear()
    payload = request.get_json(silent=True) or {}
    try:
        data = LoginRequest.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "validation_error", "details": jsonable_errors(exc)}),
            400,
        )
    user = authenticate_user(data.email, data.password)
    if not user:
        return jsonify({"ok": False, "error": "invalid_credentials"}), 401
    tokens = issue_tokens(user)
    return jsonify(
        {
            "ok": True,
            **tokens,
            "csrf_token": generate_csrf_token(),
            "user": serialize_user(user).model_dump(mode="json"),
        }
    )


@auth_bp.post("/refresh")
@jwt_required(refresh=True)
@limiter.limit("30/minute")
def refresh():
    new_access = create_access_token(identity=str(get_jwt_identity()))
    return jsonify({"ok": True, "access_token": new_access})


@auth_bp.post("/logout")
@jwt_required(refresh=True)
@csrf_protected
def logout():
    jti = get_jwt().get("jti")
    if jti:
        revoke_refresh_token(jti, user_id=int(get_jwt_identity()))
    return jsonify({"ok": True})


@auth_bp.get("/me")
@jwt_required()
def me():
    user = get_user(int(get_jwt_identity()))
    if not user:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "user": serialize_user(user).model_dump(mode="json")})


@auth_bp.post("/change-password")
@jwt_required()
@csrf_protected
@limiter.limit("5/minute")
def change_password_route():
    user = get_user(int(get_jwt_identity()))
    if not user:
        return jsonify({"ok": False, "error": "not_found"}), 404
    payload = request.get_json(silent=True) or {}
    try:
        data = ChangePasswordRequest.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "validation_error", "details": jsonable_errors(exc)}),
            400,
        )
    try:
        change_password(user, data)
    except ValueError:
        return jsonify({"ok": False, "error": "invalid_credentials"}), 400
    return jsonify({"ok": True})
