"""Sharing settings, public skills and public profiles."""

from __future__ import annotations

import pytest

from skilltrack.domains.skills.models.skill_models import Skill
from skilltrack.extensions import db

pytestmark = pytest.mark.integration


def _share(client, headers, **overrides):
    payload = {"is_profile_public": True, "public_username": "ada"}
    payload.update(overrides)
    return client.put("/api/users/me/sharing", json=payload, headers=headers)


def _public_skill(client, headers, name="Calculus"):
    resp = client.post(
        "/api/skills",
        json={"name": name, "visibility": "public", "target_hours": 10, "goals": [{"title": "Limits"}]},
        headers=headers,
    )
    return resp.get_json()["skill"]


class TestSharingSettings:
    def test_defaults(self, client, auth_headers):
        sharing = client.get("/api/users/me/sharing", headers=auth_headers).get_json()["sharing"]
        assert sharing["is_profile_public"] is False
        assert sharing["show_skills"] is True
        assert sharing["show_goals"] is False

    def test_update(self, client, auth_headers):
        resp = _share(client, auth_headers, public_username="  Ada_L ")
        assert resp.status_code == 200
        assert resp.get_json()["sharing"]["public_username"] == "ada_l"

    def test_public_profile_needs_username(self, client, auth_headers):
        resp = _share(client, auth_headers, public_username=None)
        assert resp.status_code == 400

    def test_username_taken(self, client, auth_headers, other_user):
        from flask_jwt_extended import create_access_token

        assert _share(client, auth_headers).status_code == 200
        other = dict(auth_headers, Authorization=f"Bearer {create_access_token(identity=str(other_user.id))}")
        resp = _share(client, other)
        assert resp.status_code == 409

    def test_invalid_username(self, client, auth_headers):
        assert _share(client, auth_headers, public_username="a!").status_code == 400


class TestPublicSkills:
    def test_slug_lookup_counts_views(self, client, auth_headers):
        skill = _public_skill(client, auth_headers)

        first = client.get(f"/api/public/skills/{skill['public_slug']}")
        second = client.get(f"/api/public/skills/{skill['public_slug']}")

        assert first.status_code == 200
        assert first.get_json()["skill"]["name"] == "Calculus"
        assert second.get_json()["skill"]["view_count"] == 2
        db.session.expire_all()
        assert db.session.get(Skill, skill["id"]).view_count == 2

    def test_private_skill_is_hidden(self, client, auth_headers):
        skill = _public_skill(client, auth_headers)
        client.patch(f"/api/skills/{skill['id']}", json={"visibility": "private"}, headers=auth_headers)

        assert client.get(f"/api/public/skills/{skill['public_slug']}").status_code == 404
        assert client.get(f"/api/public/skills/{skill['id']}/details").status_code == 404
        owner = client.get(f"/api/public/skills/{skill['id']}/details", headers=auth_headers)
        assert owner.status_code == 200

    def test_details_for_anonymous_viewer(self, client, auth_headers):
        skill = _public_skill(client, auth_headers)
        resp = client.get(f"/api/public/skills/{skill['id']}/details")
        assert resp.status_code == 200
        assert resp.get_json()["skill"]["goals"][0]["title"] == "Limits"


class TestPublicProfile:
    def test_hidden_profile(self, client, auth_headers):
        _share(client, auth_headers, is_profile_public=False)
        assert client.get("/api/public/users/ada").status_code == 404

    def test_profile_sections_follow_switches(self, client, auth_headers):
        _public_skill(client, auth_headers)
        client.post("/api/skills", json={"name": "Secret"}, headers=auth_headers)
        _share(client, auth_headers)

        profile = client.get("/api/public/users/ADA").get_json()["profile"]

        assert profile["full_name"] == "Ada Lovelace"
        assert [s["name"] for s in profile["skills"]] == ["Calculus"]
        assert "goals" not in profile["skills"][0]
        assert "mastery_percentage" in profile["skills"][0]
        assert profile["statistics"]["total_skills"] == 2

    def test_profile_with_goals_and_without_progress(self, client, auth_headers):
        _public_skill(client, auth_headers)
        _share(client, auth_headers, show_goals=True, show_progress=False, show_statistics=False)

        profile = client.get("/api/public/users/ada").get_json()["profile"]

        skill = profile["skills"][0]
        assert skill["goals"][0]["title"] == "Limits"
        assert "mastery_percentage" not in skill
        assert "total_hours_logged" not in skill
        assert "statistics" not in profile

    def test_profile_without_skills(self, client, auth_headers):
        _public_skill(client, auth_headers)
        _share(client, auth_headers, show_skills=False)
        profile = client.get("/api/public/users/ada").get_json()["profile"]
        assert "skills" not in profile
