"""Skills and goals API tests.

- GET /api/skills/categories
- POST/GET /api/skills, GET/PATCH/DELETE /api/skills/<id>
- nested /api/skills/<id>/goals
- GET /api/goals/<id>, PATCH /api/goals/<id>/status
"""

from __future__ import annotations

import pytest
from flask_jwt_extended import create_access_token

from skilltrack.domains.skills.models.skill_models import Skill
from skilltrack.extensions import db
from skilltrack.scripts.commands import SYSTEM_CATEGORIES, seed_categories

pytestmark = pytest.mark.integration


def _headers_for(user, base):
    headers = dict(base)
    headers["Authorization"] = f"Bearer {create_access_token(identity=str(user.id))}"
    return headers


def _create(client, headers, **overrides):
    payload = {"name": "Rust", "target_hours": 50}
    payload.update(overrides)
    return client.post("/api/skills", json=payload, headers=headers)


class TestCategories:
    def test_seeded_categories_are_listed_by_name(self, client, auth_headers):
        assert seed_categories() == len(SYSTEM_CATEGORIES)
        assert seed_categories() == 0

        resp = client.get("/api/skills/categories", headers=auth_headers)

        names = [c["name"] for c in resp.get_json()["categories"]]
        assert resp.status_code == 200
        assert names == sorted(names)
        assert len(names) == len(SYSTEM_CATEGORIES)


class TestSkillCrud:
    def test_create_and_fetch(self, client, auth_headers):
        resp = _create(
            client,
            auth_headers,
            goals=[{"title": "Ownership", "milestones": [{"title": "Borrowing"}]}],
            schedule={"frequency": "daily", "hours_per_period": 1, "days": [{"day_of_week": "monday"}]},
        )
        assert resp.status_code == 201
        skill = resp.get_json()["skill"]
        assert skill["status"] == "in_progress"
        assert skill["goals_count"] == 1
        assert skill["goals"][0]["milestones"][0]["title"] == "Borrowing"
        assert skill["schedule"]["frequency"] == "daily"

        fetched = client.get(f"/api/skills/{skill['id']}", headers=auth_headers)
        assert fetched.status_code == 200
        assert fetched.get_json()["skill"]["name"] == "Rust"

    def test_create_validation(self, client, auth_headers):
        resp = _create(client, auth_headers, name="   ")
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["error"] == "validation_error"
        assert body["details"]

    def test_create_with_unknown_category(self, client, auth_headers):
        resp = _create(client, auth_headers, category_id=777)
        assert resp.status_code == 422

    def test_list_filters(self, client, auth_headers):
        _create(client, auth_headers, name="Private")
        _create(client, auth_headers, name="Shared", visibility="public")

        resp = client.get("/api/skills?visibility=public", headers=auth_headers)

        skills = resp.get_json()["skills"]
        assert [s["name"] for s in skills] == ["Shared"]
        assert skills[0]["public_slug"].startswith("shared-")

    def test_patch_with_schedule(self, client, auth_headers):
        skill_id = _create(client, auth_headers).get_json()["skill"]["id"]

        resp = client.patch(
            f"/api/skills/{skill_id}",
            json={"status": "paused", "schedule": {"days": [{"day_of_week": "sunday"}]}},
            headers=auth_headers,
        )

        body = resp.get_json()["skill"]
        assert resp.status_code == 200
        assert body["status"] == "paused"
        assert [d["day_of_week"] for d in body["schedule"]["days"]] == ["sunday"]

    def test_patch_rejects_bad_status(self, client, auth_headers):
        skill_id = _create(client, auth_headers).get_json()["skill"]["id"]
        resp = client.patch(f"/api/skills/{skill_id}", json={"status": "done"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_delete(self, client, auth_headers):
        skill_id = _create(client, auth_headers).get_json()["skill"]["id"]

        assert client.delete(f"/api/skills/{skill_id}", headers=auth_headers).status_code == 200

        db.session.expire_all()
        assert db.session.get(Skill, skill_id) is None
        assert client.get(f"/api/skills/{skill_id}", headers=auth_headers).status_code == 404

    def test_other_user_sees_not_found(self, client, auth_headers, other_user):
        skill_id = _create(client, auth_headers).get_json()["skill"]["id"]
        headers = _headers_for(other_user, auth_headers)

        assert client.get(f"/api/skills/{skill_id}", headers=headers).status_code == 404
        assert client.patch(f"/api/skills/{skill_id}", json={"name": "x"}, headers=headers).status_code == 404
        assert client.delete(f"/api/skills/{skill_id}", headers=headers).status_code == 404


class TestGoalEndpoints:
    def test_nested_goal_lifecycle(self, client, auth_headers):
        skill_id = _create(client, auth_headers, target_hours=None).get_json()["skill"]["id"]

        created = client.post(
            f"/api/skills/{skill_id}/goals",
            json={"title": "Traits", "target_hours": 5, "milestones": [{"title": "Generics"}]},
            headers=auth_headers,
        )
        assert created.status_code == 201
        goal = created.get_json()["goal"]
        assert goal["skill_name"] == "Rust"
        assert goal["milestones_count"] == 1

        listed = client.get(f"/api/skills/{skill_id}/goals", headers=auth_headers).get_json()["goals"]
        assert [g["id"] for g in listed] == [goal["id"]]

        updated = client.put(
            f"/api/skills/{skill_id}/goals/{goal['id']}",
            json={"title": "Traits & generics", "priority": 3},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.get_json()["goal"]["title"] == "Traits & generics"

        deleted = client.delete(f"/api/skills/{skill_id}/goals/{goal['id']}", headers=auth_headers)
        assert deleted.status_code == 200
        missing = client.get(f"/api/skills/{skill_id}/goals/{goal['id']}", headers=auth_headers)
        assert missing.status_code == 404

    def test_goal_status_endpoint(self, client, auth_headers):
        skill = _create(client, auth_headers, target_hours=None, goals=[{"title": "One"}]).get_json()["skill"]
        goal_id = skill["goals"][0]["id"]

        resp = client.patch(f"/api/goals/{goal_id}/status", json={"status": "completed"}, headers=auth_headers)

        goal = resp.get_json()["goal"]
        assert resp.status_code == 200
        assert goal["status"] == "completed"
        assert goal["progress_percentage"] == 100.0
        refreshed = client.get(f"/api/skills/{skill['id']}", headers=auth_headers).get_json()["skill"]
        assert refreshed["mastery_percentage"] == 100.0
        assert refreshed["completed_goals_count"] == 1

    def test_goal_status_validation(self, client, auth_headers):
        skill = _create(client, auth_headers, goals=[{"title": "One"}]).get_json()["skill"]
        goal_id = skill["goals"][0]["id"]
        resp = client.patch(f"/api/goals/{goal_id}/status", json={"status": "archived"}, headers=auth_headers)
        assert resp.status_code == 400

    def test_goal_lookup_by_id(self, client, auth_headers, other_user):
        skill = _create(client, auth_headers, goals=[{"title": "One"}]).get_json()["skill"]
        goal_id = skill["goals"][0]["id"]

        assert client.get(f"/api/goals/{goal_id}", headers=auth_headers).status_code == 200
        headers = _headers_for(other_user, auth_headers)
        assert client.get(f"/api/goals/{goal_id}", headers=headers).status_code == 404
        assert client.get(f"/api/skills/{skill['id']}/goals", headers=headers).status_code == 404

    def test_create_goal_on_missing_skill(self, client, auth_headers):
        resp = client.post("/api/skills/999/goals", json={"title": "X"}, headers=auth_headers)
        assert resp.status_code == 404
