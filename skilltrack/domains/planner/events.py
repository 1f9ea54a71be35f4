"""Planner domain event catalog."""

from __future__ import annotations

PLANNER_PLAN_GENERATED = "planner.plan.generated"
PLANNER_PLAN_APPLIED = "planner.plan.applied"

EVENT_CATALOG = {
    PLANNER_PLAN_GENERATED: {
        "version": "v1",
        "payload": {"plan_id": "int", "user_id": "int", "goal_count": "int"},
    },
    PLANNER_PLAN_APPLIED: {
        "version": "v1",
        "payload": {
            "plan_id": "int?",
            "user_id": "int",
            "skill_id": "int",
            "goal_count": "int",
            "milestone_count": "int",
        },
    },
}

__all__ = ["EVENT_CATALOG", "PLANNER_PLAN_GENERATED", "PLANNER_PLAN_APPLIED"]
