"""Helpers shared by controllers for error payloads."""

from __future__ import annotations

from flask import jsonify
from pydantic import ValidationError

ERROR_STATUS = {
    "not_found": 404,
    "validation_error": 400,
    "invalid_reference": 422,
    "duplicate": 409,
}


def jsonable_errors(exc: ValidationError) -> list[dict]:
    """Return pydantic errors with ctx values coerced to strings."""
    errors = exc.errors(include_url=False)
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        if "input" in err and not isinstance(err["input"], (str, int, float, bool, type(None), list, dict)):
            err["input"] = str(err["input"])
    return errors


def validation_response(exc: ValidationError):
    return (
        jsonify({"ok": False, "error": "validation_error", "details": jsonable_errors(exc)}),
        400,
    )


def service_error_response(exc: ValueError):
    """Translate a service ``ValueError`` code into its HTTP response."""
    code = str(exc)
    if code not in ERROR_STATUS:
        code = "validation_error"
    return jsonify({"ok": False, "error": code}), ERROR_STATUS[code]
