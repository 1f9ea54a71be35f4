"""SkillTrack application factory and bootstrap."""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from flask import Flask
from sqlalchemy.engine import processors

from skilltrack.config import config_by_name
from skilltrack.core.events.event_bus import event_bus
from skilltrack.core.utils.clock import SystemClock
from skilltrack.extensions import init_extensions, jwt


def _patch_str_to_datetime_processor() -> None:
    """Make SQLAlchemy tolerant of sqlite returning datetime objects."""
    original = processors.str_to_datetime

    def _safe(value):
        if value is None or isinstance(value, datetime):
            return value
        try:
            return original(value)
        except TypeError:
            return value

    processors.str_to_datetime = _safe


_patch_str_to_datetime_processor()


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the SkillTrack Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)
    instance_root.mkdir(parents=True, exist_ok=True)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    is_sqlite = db_uri and db_uri.startswith("sqlite:")
    if is_sqlite and db_uri.startswith("sqlite:///") and not db_uri.startswith("sqlite:////"):
        db_path = db_uri.replace("sqlite:///", "", 1)
        abs_path = project_root / db_path
        abs_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{abs_path}"

    engine_opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    connect_args = dict(engine_opts.get("connect_args") or {})
    if is_sqlite:
        connect_args["detect_types"] = 0
        connect_args.setdefault("timeout", 30)
    else:
        # sqlite-only connect_args break Postgres drivers
        connect_args.pop("detect_types", None)
        if "timeout" in connect_args:
            timeout_val = connect_args.pop("timeout")
            if db_uri.startswith("postgresql"):
                connect_args.setdefault("connect_timeout", timeout_val)
    if connect_args:
        engine_opts["connect_args"] = connect_args
    else:
        engine_opts.pop("connect_args", None)
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_opts

    _configure_logging(app)
    _import_models()
    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_auth_handlers(app)

    app.extensions["event_bus"] = event_bus
    app.extensions["clock"] = SystemClock()

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    @app.get("/api/v1/ping")
    def ping():
        """Lightweight endpoint for load-balancer health checks."""
        return {"pong": True}, 200

    from skilltrack.scripts.commands import register_commands

    register_commands(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger("skilltrack").setLevel(level)


def _import_models() -> None:
    """Import every model module so mappers and migration metadata are complete."""
    from skilltrack.core.auth import models as _auth_models  # noqa: F401
    from skilltrack.core.events import event_models  # noqa: F401
    from skilltrack.core.users import models as _user_models  # noqa: F401
    from skilltrack.domains.planner.models import plan_models  # noqa: F401
    from skilltrack.domains.progress.models import progress_models  # noqa: F401
    from skilltrack.domains.skills.models import skill_models  # noqa: F401
    from skilltrack.skilltrack_platform.outbox import models as _outbox_models  # noqa: F401


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from skilltrack.core.auth.controllers import auth_bp  # local import to avoid circulars
    from skilltrack.core.users.controllers import user_api_bp
    from skilltrack.domains.planner.controllers.plan_api import plan_api_bp
    from skilltrack.domains.progress.controllers.progress_api import progress_api_bp
    from skilltrack.domains.skills.controllers.goal_api import goal_api_bp
    from skilltrack.domains.skills.controllers.public_api import public_api_bp
    from skilltrack.domains.skills.controllers.skill_api import skill_api_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(user_api_bp, url_prefix="/api/users")
    app.register_blueprint(skill_api_bp, url_prefix="/api/skills")
    app.register_blueprint(goal_api_bp, url_prefix="/api/goals")
    app.register_blueprint(progress_api_bp, url_prefix="/api/progress")
    app.register_blueprint(plan_api_bp, url_prefix="/api/ai")
    app.register_blueprint(public_api_bp, url_prefix="/api/public")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500


def _register_auth_handlers(app: Flask) -> None:
    """JWT revocation checks."""
    from skilltrack.core.auth.auth_service import is_token_revoked

    @jwt.token_in_blocklist_loader
    def _check_revoked(jwt_header, jwt_payload) -> bool:
        return is_token_revoked(jwt_payload.get("jti", ""))
