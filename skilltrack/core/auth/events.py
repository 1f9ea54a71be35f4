"""Auth domain event catalog."""

from __future__ import annotations

AUTH_USER_REGISTERED = "auth.user.registered"
AUTH_USER_PASSWORD_CHANGED = "auth.user.password_changed"

EVENT_CATALOG = {
    AUTH_USER_REGISTERED: {
        "version": "v1",
        "payload": {
            "user_id": "int",
            "email": "str",
            "first_name": "str",
            "last_name": "str",
        },
    },
    AUTH_USER_PASSWORD_CHANGED: {
        "version": "v1",
        "payload": {"user_id": "int", "changed_at": "datetime"},
    },
}

__all__ = ["AUTH_USER_REGISTERED", "AUTH_USER_PASSWORD_CHANGED", "EVENT_CATALOG"]
