"""Unit tests for the pure progress roll-up rules."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from skilltrack.domains.progress import calculators
from skilltrack.domains.progress.calculators import (
    DayLog,
    GoalSnapshot,
    SkillSnapshot,
    aggregate_dashboard,
    bucket_weekly_activity,
    compute_streak,
    format_week_label,
    recalculate_goal,
    recalculate_skill,
    rollup_daily_stat,
    week_start,
)

pytestmark = pytest.mark.unit

TODAY = date(2026, 10, 14)
NOW = datetime(2026, 10, 14, 12, 0, 0)


class TestStreak:
    def test_no_logs_is_zero(self):
        assert compute_streak([], TODAY) == 0

    def test_only_today_is_one(self):
        assert compute_streak([TODAY], TODAY) == 1

    def test_today_and_yesterday(self):
        assert compute_streak([TODAY, TODAY - timedelta(days=1)], TODAY) == 2

    def test_streak_may_end_yesterday(self):
        days = [TODAY - timedelta(days=1), TODAY - timedelta(days=2), TODAY - timedelta(days=3)]
        assert compute_streak(days, TODAY) == 3

    def test_gap_of_two_days_breaks_streak(self):
        assert compute_streak([TODAY - timedelta(days=2)], TODAY) == 0

    def test_stops_at_first_gap(self):
        days = [TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=3), TODAY - timedelta(days=4)]
        assert compute_streak(days, TODAY) == 2

    def test_duplicates_are_ignored(self):
        assert compute_streak([TODAY, TODAY, TODAY - timedelta(days=1)], TODAY) == 2


def _goal(**overrides) -> GoalSnapshot:
    values = {
        "status": "pending",
        "progress_percentage": Decimal("0"),
        "target_hours": None,
        "completed_at": None,
    }
    values.update(overrides)
    return GoalSnapshot(**values)


class TestGoalRecalculation:
    def test_milestones_win_over_hours(self):
        result = recalculate_goal(
            _goal(
                target_hours=Decimal("10"),
                log_hours=[Decimal("10")],
                milestone_total=4,
                milestone_completed=1,
            ),
            NOW,
        )
        assert result.logged_hours == Decimal("10.00")
        assert result.progress_percentage == Decimal("25.00")
        assert result.status == "pending"
        assert result.completed_at is None

    def test_all_milestones_complete_the_goal(self):
        result = recalculate_goal(_goal(milestone_total=4, milestone_completed=4), NOW)
        assert result.progress_percentage == Decimal("100.00")
        assert result.is_completed
        assert result.completed_at == NOW

    def test_hours_ratio_is_capped(self):
        result = recalculate_goal(
            _goal(target_hours=Decimal("4"), log_hours=[Decimal("3"), Decimal("2.5")]), NOW
        )
        assert result.logged_hours == Decimal("5.50")
        assert result.progress_percentage == Decimal("100.00")
        assert result.status == "completed"

    def test_without_milestones_or_target_percentage_is_kept(self):
        result = recalculate_goal(
            _goal(progress_percentage=Decimal("40"), log_hours=[Decimal("1")]), NOW
        )
        assert result.progress_percentage == Decimal("40.00")
        assert result.logged_hours == Decimal("1.00")

    def test_completion_is_never_reverted(self):
        done_at = NOW - timedelta(days=3)
        result = recalculate_goal(
            _goal(
                status="completed",
                completed_at=done_at,
                target_hours=Decimal("10"),
                log_hours=[Decimal("2")],
            ),
            NOW,
        )
        assert result.progress_percentage == Decimal("20.00")
        assert result.status == "completed"
        assert result.completed_at == done_at


class TestSkillRecalculation:
    def test_hours_against_target(self):
        result = recalculate_skill(
            SkillSnapshot(
                mastery_percentage=Decimal("0"),
                target_hours=Decimal("10"),
                log_hours=[Decimal("4"), Decimal("6")],
            )
        )
        assert result.total_hours_logged == Decimal("10.00")
        assert result.mastery_percentage == Decimal("100.00")

    def test_target_wins_over_goal_ratio(self):
        result = recalculate_skill(
            SkillSnapshot(
                mastery_percentage=Decimal("0"),
                target_hours=Decimal("20"),
                log_hours=[Decimal("5")],
                goal_statuses=["completed", "completed"],
            )
        )
        assert result.mastery_percentage == Decimal("25.00")

    def test_goal_ratio_without_target(self):
        result = recalculate_skill(
            SkillSnapshot(
                mastery_percentage=Decimal("0"),
                target_hours=None,
                goal_statuses=["completed", "pending", "in_progress"],
            )
        )
        assert result.mastery_percentage == Decimal("33.33")

    def test_nothing_to_measure_keeps_mastery(self):
        result = recalculate_skill(
            SkillSnapshot(mastery_percentage=Decimal("12.5"), target_hours=Decimal("0"))
        )
        assert result.mastery_percentage == Decimal("12.50")
        assert result.total_hours_logged == Decimal("0.00")


class TestDailyRollup:
    def test_counts_distinct_skills(self):
        rollup = rollup_daily_stat(
            [
                DayLog(skill_id=1, hours=Decimal("1.5"), milestones_completed=2),
                DayLog(skill_id=1, hours=Decimal("0.5")),
                DayLog(skill_id=2, hours=Decimal("2")),
            ],
            goals_completed=1,
        )
        assert rollup.total_hours_logged == Decimal("4.00")
        assert rollup.skills_practiced == 2
        assert rollup.logs_count == 3
        assert rollup.milestones_completed == 2
        assert rollup.goals_completed == 1

    def test_empty_day_is_all_zeros(self):
        rollup = rollup_daily_stat([])
        assert rollup.total_hours_logged == Decimal("0.00")
        assert (rollup.skills_practiced, rollup.logs_count, rollup.milestones_completed) == (0, 0, 0)


class TestDashboard:
    def test_no_skills_means_zero_progress(self):
        stats = aggregate_dashboard([], [], [], [], TODAY)
        assert stats.total_skills == 0
        assert stats.overall_progress == Decimal("0.00")
        assert stats.current_streak == 0

    def test_overall_progress_is_mean_mastery(self):
        stats = aggregate_dashboard(
            [("in_progress", Decimal("50")), ("completed", Decimal("100")), ("paused", Decimal("0"))],
            ["completed", "pending"],
            [],
            [],
            TODAY,
        )
        assert stats.total_skills == 3
        assert stats.active_skills == 1
        assert stats.completed_goals == 1
        assert stats.total_goals == 2
        assert stats.overall_progress == Decimal("50.00")

    def test_week_starts_on_monday(self):
        monday = date(2026, 10, 12)
        points = [
            (monday, Decimal("1")),
            (date(2026, 10, 18), Decimal("2")),
            (monday - timedelta(days=1), Decimal("4")),
        ]
        stats = aggregate_dashboard([], [], points, [], TODAY)
        assert week_start(TODAY) == monday
        assert stats.total_hours_this_week == Decimal("3.00")
        assert stats.total_hours_all_time == Decimal("7.00")


class TestWeeklyActivity:
    def test_single_week(self):
        buckets = bucket_weekly_activity([(TODAY, Decimal("2.5"))], TODAY, 1)
        assert len(buckets) == 1
        assert buckets[0].hours_logged == Decimal("2.50")
        assert buckets[0].week_start == date(2026, 10, 12)
        assert buckets[0].week_end == date(2026, 10, 18)
        assert buckets[0].week_label == "Oct 12 - Oct 18"

    def test_buckets_are_oldest_first(self):
        points = [(date(2026, 9, 30), Decimal("1")), (date(2026, 10, 13), Decimal("2"))]
        buckets = bucket_weekly_activity(points, TODAY, 3)
        assert [b.week_number for b in buckets] == [1, 2, 3]
        assert [b.hours_logged for b in buckets] == [Decimal("1.00"), Decimal("0.00"), Decimal("2.00")]
        assert buckets[-1].week_start <= TODAY <= buckets[-1].week_end

    def test_label_across_year_boundary(self):
        assert format_week_label(date(2025, 12, 29), date(2026, 1, 4)) == "Dec 29 - Jan 4, 2026"

    def test_weeks_must_be_positive(self):
        with pytest.raises(ValueError, match="validation_error"):
            calculators.week_windows(TODAY, 0)
