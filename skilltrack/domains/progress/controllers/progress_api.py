"""Progress log, dashboard and weekly activity API."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from skilltrack.core.utils.decorators import csrf_protected
from skilltrack.core.utils.validation import service_error_response, validation_response
from skilltrack.domains.progress.mappers import map_dashboard, map_log, map_weekly_bucket
from skilltrack.domains.progress.schemas.progress_schemas import (
    ProgressLogCreate,
    ProgressLogFilter,
    WeeklyActivityQuery,
)
from skilltrack.domains.progress.services.progress_service import (
    create_log,
    delete_log,
    get_log,
    list_logs,
)
from skilltrack.domains.progress.services.stats_service import (
    get_dashboard_stats,
    get_weekly_activity,
)

progress_api_bp = Blueprint("progress_api", __name__)


@progress_api_bp.post("")
@jwt_required()
@csrf_protected
def create_log_endpoint():
    payload = request.get_json(silent=True) or {}
    try:
        data = ProgressLogCreate.model_validate(payload)
    except ValidationError as exc:
        return validation_response(exc)
    try:
        log = create_log(int(get_jwt_identity()), data)
    except ValueError as exc:
        return service_error_response(exc)
    return jsonify({"ok": True, "log": map_log(log).model_dump(mode="json")}), 201


@progress_api_bp.get("")
@jwt_required()
def list_logs_endpoint():
    args = request.args.to_dict()
    args.setdefault("page_size", current_app.config.get("PROGRESS_PAGE_SIZE", 20))
    try:
        query = ProgressLogFilter.model_validate(args)
    except ValidationError as exc:
        return validation_response(exc)
    result = list_logs(
        int(get_jwt_identity()),
        skill_id=query.skill_id,
        goal_id=query.goal_id,
        page=query.page,
        page_size=query.page_size,
    )
    return jsonify(
        {
            "ok": True,
            "logs": [map_log(log).model_dump(mode="json") for log in result["items"]],
            "page": result["page"],
            "page_size": result["per_page"],
            "total": result["total"],
            "total_pages": result["total_pages"],
        }
    )


@progress_api_bp.get("/<int:log_id>")
@jwt_required()
def get_log_endpoint(log_id: int):
    log = get_log(int(get_jwt_identity()), log_id)
    if not log:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "log": map_log(log).model_dump(mode="json")})


@progress_api_bp.delete("/<int:log_id>")
@jwt_required()
@csrf_protected
def delete_log_endpoint(log_id: int):
    deleted = delete_log(int(get_jwt_identity()), log_id)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@progress_api_bp.get("/stats")
@jwt_required()
def dashboard_stats_endpoint():
    stats = get_dashboard_stats(int(get_jwt_identity()))
    return jsonify({"ok": True, "stats": map_dashboard(stats).model_dump(mode="json")})


@progress_api_bp.get("/weekly")
@jwt_required()
def weekly_activity_endpoint():
    args = request.args.to_dict()
    args.setdefault("weeks", current_app.config.get("WEEKLY_ACTIVITY_DEFAULT_WEEKS", 12))
    try:
        query = WeeklyActivityQuery.model_validate(args)
    except ValidationError as exc:
        return validation_response(exc)
    try:
        buckets = get_weekly_activity(int(get_jwt_identity()), weeks=query.weeks)
    except ValueError as exc:
        return service_error_response(exc)
    return jsonify(
        {"ok": True, "weeks": [map_weekly_bucket(b).model_dump(mode="json") for b in buckets]}
    )
