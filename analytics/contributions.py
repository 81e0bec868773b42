"""Auto-contribution planning for savings goals."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Optional, TypedDict

from analytics.goals import calculate_next_contribution_date
from core.models import SavingsGoal
from core.periods import resolve_today

logger = logging.getLogger(__name__)

__all__ = [
    "AutoContributionBatch",
    "AutoContributionResult",
    "ContributionScheduleRow",
    "build_contribution_schedule",
    "plan_auto_contribution",
    "plan_auto_contributions",
    "should_make_contribution",
]

_MIN_DAYS_BETWEEN: dict[str, int] = {
    "weekly": 7,
    "bi-weekly": 14,
    "monthly": 30,
    "quarterly": 90,
}


@dataclass(frozen=True)
class AutoContributionResult:
    goal_id: str
    success: bool
    amount: float
    reason: Optional[str] = None


@dataclass(frozen=True)
class AutoContributionBatch:
    processed: int
    successful: int
    failed: int
    total_amount: float
    results: list[AutoContributionResult] = field(default_factory=list)


class ContributionScheduleRow(TypedDict):
    goal_id: str
    goal_name: str
    amount: float
    frequency: str
    progress: float
    last_contribution: date | None
    next_contribution: date


def should_make_contribution(
    frequency: str,
    last_auto_contribution: date | None,
    today: date | None = None,
) -> bool:
    """Return ``True`` when enough days have passed since the last automatic contribution."""

    if last_auto_contribution is None:
        return True

    min_days = _MIN_DAYS_BETWEEN.get(frequency)
    if min_days is None:
        return False
    return (resolve_today(today) - last_auto_contribution).days >= min_days


def plan_auto_contribution(
    goal: SavingsGoal,
    last_auto_contribution: date | None,
    today: date | None = None,
) -> AutoContributionResult:
    """Decide whether ``goal`` gets an automatic contribution today and how much.

    The amount never exceeds what is left to reach the target. Recording the
    contribution is left to the caller's data layer.
    """

    if not goal.auto_contribute or goal.auto_contribute_amount <= 0:
        return AutoContributionResult(goal.id, False, 0.0, "Auto-contribution disabled")

    if not should_make_contribution(goal.auto_contribute_frequency, last_auto_contribution, today):
        return AutoContributionResult(goal.id, False, goal.auto_contribute_amount, "Not time for contribution yet")

    if goal.current_amount >= goal.target_amount:
        return AutoContributionResult(goal.id, False, goal.auto_contribute_amount, "Goal already completed")

    remaining = goal.target_amount - goal.current_amount
    return AutoContributionResult(goal.id, True, min(goal.auto_contribute_amount, remaining))


def plan_auto_contributions(
    goals: Iterable[SavingsGoal],
    last_auto_contributions: Mapping[str, date],
    today: date | None = None,
) -> AutoContributionBatch:
    """Plan contributions for every goal with auto-contribute enabled."""

    results = [
        plan_auto_contribution(goal, last_auto_contributions.get(goal.id), today)
        for goal in goals
        if goal.auto_contribute and goal.auto_contribute_amount > 0
    ]
    successful = [result for result in results if result.success]
    total = sum(result.amount for result in successful)
    logger.info(
        "Planned %d auto-contributions (%d due, total %.2f)",
        len(results),
        len(successful),
        total,
    )
    return AutoContributionBatch(
        processed=len(results),
        successful=len(successful),
        failed=len(results) - len(successful),
        total_amount=total,
        results=results,
    )


def build_contribution_schedule(
    goals: Iterable[SavingsGoal],
    last_auto_contributions: Mapping[str, date],
    today: date | None = None,
) -> list[ContributionScheduleRow]:
    rows: list[ContributionScheduleRow] = []
    for goal in goals:
        if not goal.auto_contribute:
            continue
        last = last_auto_contributions.get(goal.id)
        progress = goal.current_amount / goal.target_amount * 100 if goal.target_amount > 0 else 0.0
        rows.append(
            {
                "goal_id": goal.id,
                "goal_name": goal.name,
                "amount": goal.auto_contribute_amount,
                "frequency": goal.auto_contribute_frequency,
                "progress": progress,
                "last_contribution": last,
                "next_contribution": calculate_next_contribution_date(
                    last, goal.auto_contribute_frequency, today=today
                ),
            }
        )
    rows.sort(key=lambda row: row["next_contribution"])
    return rows
