"""Skills domain event catalog."""

from __future__ import annotations

SKILLS_SKILL_CREATED = "skills.skill.created"
SKILLS_SKILL_UPDATED = "skills.skill.updated"
SKILLS_SKILL_DELETED = "skills.skill.deleted"
SKILLS_GOAL_CREATED = "skills.goal.created"
SKILLS_GOAL_UPDATED = "skills.goal.updated"
SKILLS_GOAL_DELETED = "skills.goal.deleted"
SKILLS_GOAL_COMPLETED = "skills.goal.completed"

EVENT_CATALOG = {
    SKILLS_SKILL_CREATED: {
        "version": "v1",
        "payload": {
            "skill_id": "int",
            "user_id": "int",
            "name": "str",
            "category_id": "int?",
            "visibility": "str",
            "goal_count": "int",
            "created_at": "datetime",
        },
    },
    SKILLS_SKILL_UPDATED: {
        "version": "v1",
        "payload": {
            "skill_id": "int",
            "user_id": "int",
            "fields": "dict",
            "updated_at": "datetime",
        },
    },
    SKILLS_SKILL_DELETED: {
        "version": "v1",
        "payload": {"skill_id": "int", "user_id": "int"},
    },
    SKILLS_GOAL_CREATED: {
        "version": "v1",
        "payload": {
            "goal_id": "int",
            "skill_id": "int",
            "user_id": "int",
            "title": "str",
            "milestone_count": "int",
            "is_ai_generated": "bool",
        },
    },
    SKILLS_GOAL_UPDATED: {
        "version": "v1",
        "payload": {"goal_id": "int", "skill_id": "int", "user_id": "int", "fields": "dict"},
    },
    SKILLS_GOAL_DELETED: {
        "version": "v1",
        "payload": {"goal_id": "int", "skill_id": "int", "user_id": "int"},
    },
    SKILLS_GOAL_COMPLETED: {
        "version": "v1",
        "payload": {
            "goal_id": "int",
            "skill_id": "int",
            "user_id": "int",
            "completed_at": "datetime",
        },
    },
}

__all__ = [
    "EVENT_CATALOG",
    "SKILLS_SKILL_CREATED",
    "SKILLS_SKILL_UPDATED",
    "SKILLS_SKILL_DELETED",
    "SKILLS_GOAL_CREATED",
    "SKILLS_GOAL_UPDATED",
    "SKILLS_GOAL_DELETED",
    "SKILLS_GOAL_COMPLETED",
]
