"""Tests for automatic contribution planning."""

from __future__ import annotations

from datetime import date

import pytest

from analytics.contributions import (
    build_contribution_schedule,
    plan_auto_contribution,
    plan_auto_contributions,
    should_make_contribution,
)
from core.models import SavingsGoal

TODAY = date(2024, 4, 1)


def _auto_goal(goal_id: str = "g1", **overrides) -> SavingsGoal:
    values = {
        "id": goal_id,
        "name": f"Goal {goal_id}",
        "target_amount": 1000.0,
        "current_amount": 100.0,
        "auto_contribute": True,
        "auto_contribute_amount": 200.0,
        "auto_contribute_frequency": "monthly",
    }
    values.update(overrides)
    return SavingsGoal(**values)


@pytest.mark.parametrize(
    ("frequency", "last", "expected"),
    [
        ("weekly", date(2024, 3, 25), True),
        ("weekly", date(2024, 3, 26), False),
        ("bi-weekly", date(2024, 3, 18), True),
        ("monthly", date(2024, 3, 2), True),
        ("monthly", date(2024, 3, 3), False),
        ("quarterly", date(2024, 1, 1), True),
        ("quarterly", date(2024, 1, 5), False),
        ("yearly", date(2020, 1, 1), False),
        ("monthly", None, True),
    ],
)
def test_should_make_contribution(frequency, last, expected):
    assert should_make_contribution(frequency, last, TODAY) is expected


def test_plan_caps_amount_at_remaining():
    result = plan_auto_contribution(_auto_goal(current_amount=900.0), None, TODAY)

    assert result.success is True
    assert result.amount == pytest.approx(100)
    assert result.reason is None


@pytest.mark.parametrize(
    ("goal", "last", "reason"),
    [
        (_auto_goal(auto_contribute=False), None, "Auto-contribution disabled"),
        (_auto_goal(auto_contribute_amount=0.0), None, "Auto-contribution disabled"),
        (_auto_goal(), date(2024, 3, 20), "Not time for contribution yet"),
        (_auto_goal(current_amount=1000.0), None, "Goal already completed"),
    ],
)
def test_plan_skips_with_reason(goal, last, reason):
    result = plan_auto_contribution(goal, last, TODAY)

    assert result.success is False
    assert result.reason == reason


def test_batch_counts_only_enabled_goals():
    goals = [
        _auto_goal("due"),
        _auto_goal("waiting"),
        _auto_goal("manual", auto_contribute=False),
        _auto_goal("nearly", current_amount=950.0),
    ]
    last = {"waiting": date(2024, 3, 25)}

    batch = plan_auto_contributions(goals, last, TODAY)

    assert batch.processed == 3
    assert batch.successful == 2
    assert batch.failed == 1
    assert batch.total_amount == pytest.approx(250)
    assert [result.goal_id for result in batch.results] == ["due", "waiting", "nearly"]


def test_schedule_is_sorted_by_next_date():
    goals = [
        _auto_goal("monthly"),
        _auto_goal("weekly", auto_contribute_frequency="weekly"),
        _auto_goal("manual", auto_contribute=False),
    ]
    last = {"monthly": date(2024, 3, 10), "weekly": date(2024, 3, 30)}

    schedule = build_contribution_schedule(goals, last, TODAY)

    assert [row["goal_id"] for row in schedule] == ["weekly", "monthly"]
    assert schedule[0]["next_contribution"] == date(2024, 4, 6)
    assert schedule[1]["next_contribution"] == date(2024, 4, 10)
    assert schedule[1]["progress"] == pytest.approx(10)
