"""AI planner tests with the Gemini HTTP call mocked out."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from skilltrack.domains.planner.models.plan_models import AiGeneratedPlan
from skilltrack.domains.planner.schemas.plan_schemas import PlanRequest
from skilltrack.domains.planner.services.gemini_client import PlanParseError, extract_json_object
from skilltrack.domains.planner.services.plan_service import needs_clarification
from skilltrack.domains.skills.models.skill_models import Category, Skill
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox.models import OutboxMessage

POST = "skilltrack.domains.planner.services.gemini_client.requests.post"

PLAN = {
    "skillName": "Conversational Spanish",
    "description": "Hold everyday conversations",
    "bigGoal": "Order food and chat on a trip to Madrid",
    "category": "languages",
    "goals": [
        {
            "title": "Week 1: Greetings",
            "description": "Basics",
            "weekNumber": 1,
            "milestones": ["Learn 20 greetings", "Introduce yourself", ""],
        },
        {"title": "Week 2: Food", "weekNumber": 2, "milestones": ["Order a meal"]},
    ],
}

SPECIFIC_GOAL = "Hold a ten minute Spanish conversation about food with a native speaker"


def _gemini(text):
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return resp


@pytest.mark.unit
class TestHeuristics:
    def test_short_goal_needs_clarification(self):
        assert needs_clarification(PlanRequest(goal_description="Spanish"))

    def test_vague_goal_without_answers(self):
        goal = "I want to learn Spanish for my trip next year"
        assert needs_clarification(PlanRequest(goal_description=goal))
        answered = PlanRequest.model_validate(
            {"goal_description": goal, "clarifications": [{"question": "Level?", "answer": "Beginner"}]}
        )
        assert not needs_clarification(answered)

    def test_specific_goal(self):
        assert not needs_clarification(PlanRequest(goal_description=SPECIFIC_GOAL))

    def test_extract_json_ignores_surrounding_prose(self):
        text = "Sure! Here is your plan:\n```json\n" + json.dumps(PLAN) + "\n```\nGood luck."
        assert extract_json_object(text)["skillName"] == "Conversational Spanish"

    @pytest.mark.parametrize("text", [None, "", "no json here", "{not: valid}", "[1, 2]"])
    def test_extract_json_failures(self, text):
        with pytest.raises(PlanParseError):
            extract_json_object(text)


@pytest.mark.integration
class TestGeneratePlanApi:
    def test_vague_goal_gets_a_question(self, client, auth_headers, user):
        with patch(POST, return_value=_gemini("  What is your current level?  ")) as post:
            resp = client.post(
                "/api/ai/generate-plan", json={"goal_description": "learn Spanish"}, headers=auth_headers
            )

        body = resp.get_json()
        assert resp.status_code == 200
        assert body["needs_clarification"] is True
        assert body["clarification_question"] == "What is your current level?"
        assert body["plan"] is None
        assert post.call_count == 1
        _, kwargs = post.call_args
        assert kwargs["params"] == {"key": "test-key"}
        assert "key" not in post.call_args[0][0]

        db.session.expire_all()
        record = db.session.get(AiGeneratedPlan, body["plan_id"])
        assert record.status == "pending"
        assert record.user_id == user.id

    def test_clarification_limit_forces_a_plan(self, client, auth_headers):
        payload = {
            "goal_description": "learn Spanish",
            "clarifications": [
                {"question": "Level?", "answer": "Beginner"},
                {"question": "Why?", "answer": "Travel"},
            ],
        }
        with patch(POST, return_value=_gemini(json.dumps(PLAN))) as post:
            resp = client.post("/api/ai/generate-plan", json=payload, headers=auth_headers)

        body = resp.get_json()
        assert resp.status_code == 200
        assert body["needs_clarification"] is False
        assert body["plan"]["skill_name"] == "Conversational Spanish"
        assert post.call_count == 1

    def test_empty_question_falls_through_to_plan(self, client, auth_headers):
        with patch(POST, side_effect=[_gemini("   "), _gemini(json.dumps(PLAN))]) as post:
            resp = client.post("/api/ai/generate-plan", json={"goal_description": "Spanish"}, headers=auth_headers)

        assert resp.status_code == 200
        assert resp.get_json()["plan"]["big_goal"].startswith("Order food")
        assert post.call_count == 2

    def test_specific_goal_returns_plan(self, client, auth_headers):
        text = "Here you go:\n" + json.dumps(PLAN)
        with patch(POST, return_value=_gemini(text)):
            resp = client.post(
                "/api/ai/generate-plan", json={"goal_description": SPECIFIC_GOAL}, headers=auth_headers
            )

        body = resp.get_json()
        assert resp.status_code == 200
        assert [g["week_number"] for g in body["plan"]["goals"]] == [1, 2]

        db.session.expire_all()
        record = db.session.get(AiGeneratedPlan, body["plan_id"])
        assert record.status == "completed"
        assert record.ai_response["skill_name"] == "Conversational Spanish"
        assert OutboxMessage.query.filter_by(event_type="planner.plan.generated").count() == 1

    def test_unparseable_plan_is_bad_gateway(self, client, auth_headers):
        with patch(POST, return_value=_gemini("I cannot help with that.")):
            resp = client.post(
                "/api/ai/generate-plan", json={"goal_description": SPECIFIC_GOAL}, headers=auth_headers
            )
        assert resp.status_code == 502
        assert resp.get_json()["error"] == "ai_unavailable"
        assert AiGeneratedPlan.query.count() == 0

    def test_network_failure_is_bad_gateway(self, client, auth_headers):
        with patch(POST, side_effect=requests.ConnectionError("down")):
            resp = client.post(
                "/api/ai/generate-plan", json={"goal_description": SPECIFIC_GOAL}, headers=auth_headers
            )
        assert resp.status_code == 502

    def test_http_error_is_bad_gateway(self, client, auth_headers):
        failing = MagicMock()
        failing.raise_for_status.side_effect = requests.HTTPError("500")
        with patch(POST, return_value=failing):
            resp = client.post(
                "/api/ai/generate-plan", json={"goal_description": SPECIFIC_GOAL}, headers=auth_headers
            )
        assert resp.status_code == 502

    def test_missing_key_is_service_unavailable(self, app, client, auth_headers):
        app.config["GEMINI_API_KEY"] = ""
        with patch(POST) as post:
            resp = client.post(
                "/api/ai/generate-plan", json={"goal_description": SPECIFIC_GOAL}, headers=auth_headers
            )
        assert resp.status_code == 503
        assert resp.get_json()["error"] == "ai_not_configured"
        post.assert_not_called()

    def test_blank_goal_is_rejected(self, client, auth_headers):
        resp = client.post("/api/ai/generate-plan", json={"goal_description": "   "}, headers=auth_headers)
        assert resp.status_code == 400


@pytest.mark.integration
class TestRefineAndApplyApi:
    def test_refine_goal(self, client, auth_headers):
        refined = {"title": "Week 1: Greetings, formal", "weekNumber": 1, "milestones": ["Use usted"]}
        with patch(POST, return_value=_gemini(json.dumps(refined))):
            resp = client.post(
                "/api/ai/refine-goal",
                json={"instruction": "make it formal", "goal": PLAN["goals"][0]},
                headers=auth_headers,
            )

        goal = resp.get_json()["goal"]
        assert resp.status_code == 200
        assert goal["title"] == "Week 1: Greetings, formal"
        assert goal["milestones"] == ["Use usted"]

    def test_apply_plan_creates_skill_tree(self, client, auth_headers, user):
        db.session.add(Category(name="Languages", is_system=True))
        record = AiGeneratedPlan(user_id=user.id, goal_description=SPECIFIC_GOAL, status="completed")
        db.session.add(record)
        db.session.commit()

        resp = client.post(
            "/api/ai/apply-plan",
            json={"plan": PLAN, "target_date": "2027-01-31", "plan_id": record.id},
            headers=auth_headers,
        )

        skill = resp.get_json()["skill"]
        assert resp.status_code == 201
        assert skill["name"] == "Conversational Spanish"
        assert skill["category"]["name"] == "Languages"
        assert skill["target_date"] == "2027-01-31"
        assert [g["title"] for g in skill["goals"]] == ["Week 1: Greetings", "Week 2: Food"]
        assert all(g["is_ai_generated"] for g in skill["goals"])
        assert [m["title"] for m in skill["goals"][0]["milestones"]] == ["Learn 20 greetings", "Introduce yourself"]

        db.session.expire_all()
        applied = db.session.get(AiGeneratedPlan, record.id)
        assert applied.status == "applied"
        assert applied.skill_id == skill["id"]
        assert db.session.get(Skill, skill["id"]).user_id == user.id

    def test_apply_plan_with_unknown_category(self, client, auth_headers):
        plan = dict(PLAN, category="Underwater Basket Weaving")
        resp = client.post("/api/ai/apply-plan", json={"plan": plan}, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.get_json()["skill"]["category"] is None
