"""Tests for savings goal analytics and goal helpers."""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from analytics.goals import (
    GOAL_TYPES,
    calculate_goal_analytics,
    calculate_next_contribution_date,
    calculate_total_savings,
    get_active_goals,
    get_all_goal_types,
    get_completed_goals,
    get_goal_type_info,
    get_goals_by_type,
    is_auto_contribution_due,
    monthly_equivalent,
    sort_by_priority,
    suggest_goals,
)
from core.models import GoalContribution, GoalMilestone, SavingsGoal

TODAY = date(2024, 4, 1)


def _goal(**overrides) -> SavingsGoal:
    values = {"id": "g1", "name": "Vacation", "target_amount": 1000.0, "current_amount": 0.0}
    values.update(overrides)
    return SavingsGoal(**values)


def _contribution(day: date, amount: float = 100.0, contribution_id: str = "c") -> GoalContribution:
    return GoalContribution(id=contribution_id, goal_id="g1", amount=amount, contribution_date=day)


def test_completed_goal_is_excellent():
    analytics = calculate_goal_analytics(_goal(current_amount=1000.0), today=TODAY)

    assert analytics.progress_percentage == pytest.approx(100)
    assert analytics.remaining_amount == 0
    assert analytics.health == "excellent"
    assert analytics.recommendation.startswith("Congratulations! You've reached your Vacation goal!")


def test_goal_without_deadline_or_contributions():
    analytics = calculate_goal_analytics(_goal(current_amount=500.0), today=TODAY)

    assert analytics.required_monthly_savings == 0
    assert analytics.required_weekly_savings == 0
    assert analytics.required_daily_savings == 0
    assert analytics.is_on_track is True
    assert analytics.projected_completion_date is None
    assert analytics.estimated_months_to_complete is None
    assert analytics.days_until_deadline is None
    assert analytics.months_until_deadline is None


def test_auto_contribution_drives_projection_without_history():
    goal = _goal(current_amount=500.0, auto_contribute=True, auto_contribute_amount=100.0)

    analytics = calculate_goal_analytics(goal, today=TODAY)

    assert analytics.estimated_months_to_complete == 5
    assert analytics.projected_completion_date == date(2024, 9, 1)


def test_weekly_auto_contribution_is_scaled_to_monthly():
    goal = _goal(
        current_amount=0.0,
        auto_contribute=True,
        auto_contribute_amount=50.0,
        auto_contribute_frequency="weekly",
    )

    analytics = calculate_goal_analytics(goal, today=TODAY)

    # 50 * 4.33 = 216.5 a month against 1000 remaining
    assert analytics.estimated_months_to_complete == 5


def test_next_milestone_follows_order_index():
    milestones = [
        GoalMilestone(id="m2", goal_id="g1", title="Third", target_amount=750, is_completed=True, order_index=2),
        GoalMilestone(id="m0", goal_id="g1", title="First", target_amount=250, is_completed=True, order_index=0),
        GoalMilestone(id="m1", goal_id="g1", title="Second", target_amount=500, is_completed=False, order_index=1),
    ]

    analytics = calculate_goal_analytics(_goal(current_amount=300.0), milestones, today=TODAY)

    assert analytics.next_milestone is not None
    assert analytics.next_milestone.order_index == 1
    assert analytics.completed_milestones == 2
    assert [milestone.order_index for milestone in analytics.milestones] == [0, 1, 2]


def test_all_milestones_complete_has_no_next():
    milestones = [GoalMilestone(id="m", goal_id="g1", title="Only", target_amount=10, is_completed=True)]

    analytics = calculate_goal_analytics(_goal(), milestones, today=TODAY)

    assert analytics.next_milestone is None


def test_deadline_sets_required_pace_and_flags_behind():
    goal = _goal(target_amount=1200.0, deadline=date(2024, 10, 1))

    analytics = calculate_goal_analytics(goal, today=TODAY)

    assert analytics.months_until_deadline == 6
    assert analytics.days_until_deadline == 183
    assert analytics.required_monthly_savings == pytest.approx(200)
    assert analytics.required_weekly_savings == pytest.approx(1200 / (6 * 4.33))
    assert analytics.required_daily_savings == pytest.approx(1200 / 183)
    assert analytics.is_on_track is False
    assert analytics.health == "behind"
    assert analytics.recommendation.startswith("Behind schedule: Increase monthly savings by $200.00")


def test_deadline_close_with_little_progress_is_critical():
    goal = _goal(current_amount=200.0, deadline=date(2024, 4, 20))

    analytics = calculate_goal_analytics(goal, today=TODAY)

    assert analytics.health == "critical"
    assert analytics.recommendation.startswith("Critical:")


def test_average_contribution_uses_earliest_contribution():
    contributions = [
        _contribution(date(2024, 3, 1), contribution_id="late"),
        _contribution(date(2024, 1, 1), contribution_id="early"),
    ]

    analytics = calculate_goal_analytics(_goal(current_amount=600.0), contributions=contributions, today=TODAY)

    assert analytics.average_monthly_contribution == pytest.approx(200)
    assert analytics.contribution_count == 2
    assert analytics.total_contributions == pytest.approx(600)
    assert analytics.estimated_months_to_complete == 2
    assert analytics.projected_completion_date == date(2024, 6, 1)
    assert analytics.health == "good"
    assert analytics.recommendation.startswith("Great progress! Keep contributing $200.00/month")


def test_recent_contribution_counts_as_at_least_one_month():
    analytics = calculate_goal_analytics(
        _goal(current_amount=150.0), contributions=[_contribution(date(2024, 3, 20))], today=TODAY
    )

    assert analytics.average_monthly_contribution == pytest.approx(150)


def test_contributions_keep_pace_with_deadline():
    goal = _goal(current_amount=600.0, target_amount=1200.0, deadline=date(2024, 7, 1))
    contributions = [_contribution(date(2024, 1, 1))]

    analytics = calculate_goal_analytics(goal, contributions=contributions, today=TODAY)

    assert analytics.required_monthly_savings == pytest.approx(200)
    assert analytics.average_monthly_contribution == pytest.approx(200)
    assert analytics.is_on_track is True


@pytest.mark.parametrize(
    ("current", "prefix"),
    [
        (50.0, "Just getting started!"),
        (150.0, "Keep going! You're 15% of the way there."),
    ],
)
def test_early_stage_recommendations(current, prefix):
    analytics = calculate_goal_analytics(_goal(current_amount=current), today=TODAY)

    assert analytics.recommendation.startswith(prefix)


def test_zero_target_reports_no_progress():
    analytics = calculate_goal_analytics(_goal(target_amount=0.0), today=TODAY)

    assert analytics.progress_percentage == 0
    assert analytics.remaining_amount == 0


@pytest.mark.parametrize(
    ("last", "frequency", "expected"),
    [
        (date(2024, 1, 1), "weekly", date(2024, 1, 8)),
        (date(2024, 1, 1), "bi-weekly", date(2024, 1, 15)),
        (date(2024, 1, 31), "monthly", date(2024, 2, 29)),
        (date(2024, 11, 30), "quarterly", date(2025, 2, 28)),
        (date(2024, 1, 10), "fortnightly-ish", date(2024, 2, 10)),
        (None, "monthly", date(2024, 5, 1)),
    ],
)
def test_next_contribution_date(last, frequency, expected):
    assert calculate_next_contribution_date(last, frequency, today=TODAY) == expected


def test_auto_contribution_due():
    assert is_auto_contribution_due(date(2024, 3, 1), "monthly", today=TODAY) is True
    assert is_auto_contribution_due(date(2024, 3, 15), "monthly", today=TODAY) is False
    assert is_auto_contribution_due(None, "weekly", today=TODAY) is False


def test_monthly_equivalent():
    assert monthly_equivalent(100, "weekly") == pytest.approx(433)
    assert monthly_equivalent(100, "bi-weekly") == pytest.approx(217)
    assert monthly_equivalent(300, "quarterly") == pytest.approx(100)
    assert monthly_equivalent(100, "yearly") == pytest.approx(100)


def test_goal_type_catalogue():
    assert len(get_all_goal_types()) == 10
    assert GOAL_TYPES["emergency_fund"].recommended_amount == 10000
    assert get_goal_type_info("house_down_payment").label == "House Down Payment"
    assert get_goal_type_info("something-new") is GOAL_TYPES["general"]


def test_goal_filters_and_ordering():
    base = _goal()
    goals = [
        replace(base, id="a", priority=2, goal_type="vacation"),
        replace(base, id="b", priority=0, goal_type="emergency_fund", is_completed=True),
        replace(base, id="c", priority=1, goal_type="vacation"),
    ]

    assert [goal.id for goal in sort_by_priority(goals)] == ["b", "c", "a"]
    assert [goal.id for goal in get_goals_by_type(goals, "vacation")] == ["a", "c"]
    assert [goal.id for goal in get_active_goals(goals)] == ["a", "c"]
    assert [goal.id for goal in get_completed_goals(goals)] == ["b"]


def test_total_savings():
    goals = [_goal(current_amount=250.0), _goal(id="g2", target_amount=3000.0, current_amount=750.0)]

    totals = calculate_total_savings(goals)

    assert totals.current_amount == pytest.approx(1000)
    assert totals.target_amount == pytest.approx(4000)
    assert totals.progress_percentage == pytest.approx(25)
    assert calculate_total_savings([]).progress_percentage == 0


def test_suggest_goals_skips_existing_types():
    suggestions = suggest_goals(4000, [_goal(goal_type="emergency_fund")])

    assert [item["type"] for item in suggestions] == ["debt_free", "retirement"]
    assert suggestions[1]["recommended_amount"] == pytest.approx(2_000_000)


def test_suggest_goals_without_income():
    suggestions = suggest_goals(None)

    assert [item["type"] for item in suggestions] == ["emergency_fund", "debt_free"]
    assert suggestions[0]["recommended_amount"] == pytest.approx(10000)
