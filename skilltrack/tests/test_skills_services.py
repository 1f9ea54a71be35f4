"""Skill and goal service tests."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from skilltrack.domains.progress.models.progress_models import DailyStat, ProgressLog
from skilltrack.domains.progress.schemas.progress_schemas import ProgressLogCreate
from skilltrack.domains.progress.services.progress_service import create_log
from skilltrack.domains.skills.models.skill_models import Category, Goal, Milestone, Skill
from skilltrack.domains.skills.schemas.skill_schemas import (
    GoalCreate,
    GoalUpdate,
    ScheduleRequest,
    SkillCreate,
    SkillUpdate,
)
from skilltrack.domains.skills.services import goal_service, skill_service
from skilltrack.extensions import db
from skilltrack.skilltrack_platform.outbox.models import OutboxMessage

pytestmark = pytest.mark.integration


def _skill(user, **overrides):
    payload = {"name": "Guitar"}
    payload.update(overrides)
    return skill_service.create_skill(user.id, SkillCreate.model_validate(payload))


def _log(user, skill, hours="1", **overrides):
    payload = {"skill_id": skill.id, "hours_logged": hours, "log_date": "2026-10-14"}
    payload.update(overrides)
    return create_log(user.id, ProgressLogCreate.model_validate(payload))


def _events():
    return [m.event_type for m in OutboxMessage.query.order_by(OutboxMessage.id).all()]


class TestCreateSkill:
    def test_defaults_and_event(self, user, clock):
        skill = _skill(user)

        assert skill.status == "in_progress"
        assert skill.started_at == clock.now()
        assert skill.visibility == "private"
        assert skill.public_slug is None
        assert skill.mastery_percentage == Decimal("0.00")
        assert _events() == ["skills.skill.created"]

    def test_nested_goals_milestones_and_schedule(self, user):
        skill = _skill(
            user,
            schedule={
                "frequency": "weekly",
                "hours_per_period": "6",
                "days": [{"day_of_week": "Monday"}, {"day_of_week": "thursday", "label": "Lesson"}],
            },
            goals=[
                {"title": "Open chords", "milestones": [{"title": "C"}, {"title": "G"}]},
                {"title": "Barre chords"},
            ],
        )

        assert [g.title for g in skill.goals] == ["Open chords", "Barre chords"]
        assert [g.sort_order for g in skill.goals] == [0, 1]
        assert [m.title for m in skill.goals[0].milestones] == ["C", "G"]
        assert all(m.user_id == user.id for m in skill.goals[0].milestones)
        assert [d.day_of_week for d in skill.schedule.days] == ["monday", "thursday"]
        assert skill.schedule.hours_per_period == Decimal("6.00")

    def test_public_skill_gets_slug(self, user):
        skill = _skill(user, name="Jazz Piano!", visibility="public")
        assert re.fullmatch(r"jazz-piano-\d{4}", skill.public_slug)

    def test_slug_collisions_exhaust_attempts(self, user):
        existing = _skill(user, name="Chess", visibility="public")
        suffix = int(existing.public_slug.rsplit("-", 1)[1])
        with patch("skilltrack.domains.skills.services.skill_service.random.randint", return_value=suffix):
            with pytest.raises(ValueError, match="duplicate"):
                skill_service.generate_public_slug("Chess")

    def test_unknown_category(self, user):
        with pytest.raises(ValueError, match="invalid_reference"):
            _skill(user, category_id=999)
        assert Skill.query.count() == 0

    def test_known_category(self, user):
        category = Category(name="Music", is_system=True)
        db.session.add(category)
        db.session.commit()
        skill = _skill(user, category_id=category.id)
        assert skill.category.name == "Music"


class TestReadSkills:
    def test_list_filters_and_ownership(self, user, other_user):
        _skill(user, name="A")
        public = _skill(user, name="B", visibility="public")
        _skill(other_user, name="C")

        assert {s.name for s in skill_service.list_skills(user.id)} == {"A", "B"}
        assert [s.id for s in skill_service.list_skills(user.id, visibility="public")] == [public.id]
        assert skill_service.get_skill(other_user.id, public.id) is None


class TestUpdateSkill:
    def test_status_completed_stamps_completed_at(self, user, clock):
        skill = _skill(user)
        updated = skill_service.update_skill(user.id, skill.id, SkillUpdate(status="completed"))
        assert updated.status == "completed"
        assert updated.completed_at == clock.now()

    def test_going_public_generates_slug_once(self, user):
        skill = _skill(user)
        skill_service.update_skill(user.id, skill.id, SkillUpdate(visibility="public"))
        slug = skill.public_slug
        assert slug
        skill_service.update_skill(user.id, skill.id, SkillUpdate(name="Guitar II"))
        assert skill.public_slug == slug

    def test_target_change_recalculates_mastery(self, user):
        skill = _skill(user, target_hours="10")
        _log(user, skill, hours="5")
        assert skill.mastery_percentage == Decimal("50.00")

        skill_service.update_skill(user.id, skill.id, SkillUpdate(target_hours=Decimal("20")))

        assert skill.mastery_percentage == Decimal("25.00")

    def test_schedule_is_replaced(self, user):
        skill = _skill(user, schedule={"days": [{"day_of_week": "monday"}]})
        skill_service.update_skill(
            user.id,
            skill.id,
            SkillUpdate(),
            schedule=ScheduleRequest.model_validate({"frequency": "daily", "days": [{"day_of_week": "friday"}]}),
        )
        assert skill.schedule.frequency == "daily"
        assert [d.day_of_week for d in skill.schedule.days] == ["friday"]

    def test_other_user_cannot_update(self, user, other_user):
        skill = _skill(user)
        assert skill_service.update_skill(other_user.id, skill.id, SkillUpdate(name="X")) is None


class TestDeleteSkill:
    def test_delete_removes_logs_and_rebuilds_stats(self, user, clock):
        guitar = _skill(user, goals=[{"title": "G", "milestones": [{"title": "M"}]}])
        piano = _skill(user, name="Piano")
        _log(user, guitar, hours="2")
        _log(user, piano, hours="1")
        guitar_id = guitar.id

        assert skill_service.delete_skill(user.id, guitar_id) is True

        db.session.expire_all()
        assert db.session.get(Skill, guitar_id) is None
        assert Goal.query.count() == 0
        assert Milestone.query.count() == 0
        assert ProgressLog.query.count() == 1
        stat = DailyStat.query.filter_by(user_id=user.id, stat_date=clock.today()).one()
        assert stat.total_hours_logged == Decimal("1.00")
        assert stat.skills_practiced == 1
        assert _events()[-1] == "skills.skill.deleted"

    def test_delete_clears_goal_completion_without_logs(self, user, clock):
        skill = _skill(user, goals=[{"title": "G"}])
        goal_service.update_goal_status(user.id, skill.goals[0].id, "completed")
        assert DailyStat.query.filter_by(user_id=user.id, stat_date=clock.today()).one().goals_completed == 1

        skill_service.delete_skill(user.id, skill.id)

        db.session.expire_all()
        stat = DailyStat.query.filter_by(user_id=user.id, stat_date=clock.today()).one()
        assert stat.goals_completed == 0

    def test_delete_unknown(self, user):
        assert skill_service.delete_skill(user.id, 12345) is False


class TestGoals:
    def test_create_goal_appends_and_updates_mastery(self, user):
        skill = _skill(user, goals=[{"title": "First"}])
        goal_service.update_goal_status(user.id, skill.goals[0].id, "completed")
        assert skill.mastery_percentage == Decimal("100.00")

        goal = goal_service.create_goal(user.id, skill.id, GoalCreate(title="Second"))

        assert goal.sort_order == 1
        assert skill.mastery_percentage == Decimal("50.00")

    def test_create_goal_for_foreign_skill(self, user, other_user):
        skill = _skill(other_user)
        with pytest.raises(ValueError, match="not_found"):
            goal_service.create_goal(user.id, skill.id, GoalCreate(title="Nope"))

    def test_list_goals_requires_ownership(self, user, other_user):
        skill = _skill(user, goals=[{"title": "A"}, {"title": "B"}])
        assert [g.title for g in goal_service.list_goals(user.id, skill.id)] == ["A", "B"]
        assert goal_service.list_goals(other_user.id, skill.id) is None

    def test_manual_completion(self, user, clock):
        skill = _skill(user, goals=[{"title": "A", "milestones": [{"title": "x"}, {"title": "y"}]}])
        goal = skill.goals[0]

        goal_service.update_goal_status(user.id, goal.id, "in_progress")
        assert goal.started_at == clock.now()

        goal_service.update_goal_status(user.id, goal.id, "completed")

        assert goal.status == "completed"
        assert goal.progress_percentage == Decimal("100.00")
        assert goal.completed_at == clock.now()
        stat = DailyStat.query.filter_by(user_id=user.id, stat_date=clock.today()).one()
        assert stat.goals_completed == 1
        assert _events().count("skills.goal.completed") == 1

    def test_manual_reopen_keeps_first_completion_stamp(self, user, clock):
        skill = _skill(user, goals=[{"title": "A"}])
        goal = skill.goals[0]
        goal_service.update_goal_status(user.id, goal.id, "completed")
        first_stamp = goal.completed_at

        goal_service.update_goal_status(user.id, goal.id, "in_progress")

        assert goal.status == "in_progress"
        assert goal.completed_at == first_stamp
        stat = DailyStat.query.filter_by(user_id=user.id, stat_date=clock.today()).one()
        assert stat.goals_completed == 0

        goal_service.update_goal_status(user.id, goal.id, "completed")

        assert goal.status == "completed"
        assert goal.completed_at == first_stamp
        db.session.expire_all()
        stat = DailyStat.query.filter_by(user_id=user.id, stat_date=clock.today()).one()
        assert stat.goals_completed == 1
        assert _events().count("skills.goal.completed") == 1

    def test_target_change_recalculates_goal(self, user):
        skill = _skill(user, goals=[{"title": "A", "target_hours": "10"}])
        goal = skill.goals[0]
        _log(user, skill, hours="4", goal_id=goal.id)
        assert goal.progress_percentage == Decimal("40.00")

        goal_service.update_goal(user.id, skill.id, goal.id, GoalUpdate(target_hours=Decimal("4")))

        assert goal.progress_percentage == Decimal("100.00")
        assert goal.status == "completed"

    def test_delete_goal_keeps_logs(self, user):
        skill = _skill(user, goals=[{"title": "A"}])
        goal_id = skill.goals[0].id
        log = _log(user, skill, hours="2", goal_id=goal_id)

        assert goal_service.delete_goal(user.id, skill.id, goal_id) is True

        db.session.expire_all()
        kept = db.session.get(ProgressLog, log.id)
        assert kept is not None
        assert kept.goal_id is None
        assert db.session.get(Skill, skill.id).total_hours_logged == Decimal("2.00")

    def test_delete_goal_rebuilds_daily_stat(self, user, clock):
        skill = _skill(user, goals=[{"title": "A", "milestones": [{"title": "x"}]}])
        goal = skill.goals[0]
        _log(user, skill, goal_id=goal.id, completed_milestone_ids=[goal.milestones[0].id])
        stat = DailyStat.query.filter_by(user_id=user.id, stat_date=date(2026, 10, 14)).one()
        assert (stat.goals_completed, stat.milestones_completed) == (1, 1)

        goal_service.delete_goal(user.id, skill.id, goal.id)

        assert goal not in skill.goals
        db.session.expire_all()
        stat = DailyStat.query.filter_by(user_id=user.id, stat_date=date(2026, 10, 14)).one()
        assert (stat.goals_completed, stat.milestones_completed) == (0, 0)
        assert stat.logs_count == 1

    def test_goal_scoped_to_skill(self, user):
        guitar = _skill(user, goals=[{"title": "A"}])
        piano = _skill(user, name="Piano")
        assert goal_service.get_goal(user.id, guitar.goals[0].id, skill_id=piano.id) is None
        assert goal_service.get_goal(user.id, guitar.goals[0].id) is not None
