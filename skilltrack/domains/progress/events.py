"""Progress domain event catalog."""

from __future__ import annotations

PROGRESS_LOG_CREATED = "progress.log.created"
PROGRESS_LOG_DELETED = "progress.log.deleted"

EVENT_CATALOG = {
    PROGRESS_LOG_CREATED: {
        "version": "v1",
        "payload": {
            "log_id": "int",
            "user_id": "int",
            "skill_id": "int",
            "goal_id": "int?",
            "hours_logged": "str",
            "log_date": "date",
            "completed_milestone_ids": "list[int]",
        },
    },
    PROGRESS_LOG_DELETED: {
        "version": "v1",
        "payload": {
            "log_id": "int",
            "user_id": "int",
            "skill_id": "int",
            "goal_id": "int?",
            "log_date": "date",
        },
    },
}

__all__ = ["EVENT_CATALOG", "PROGRESS_LOG_CREATED", "PROGRESS_LOG_DELETED"]
