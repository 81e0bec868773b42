"""Synthetic household ledger generator for the finance tracker.

Produces a realistic month-by-month household: salary and freelance income,
fixed bills, day-to-day spending, transfers into savings and two savings
goals with milestones and contribution history. Used for development and as
the dashboard's fallback data source.
"""

from __future__ import annotations

import calendar
import itertools
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

from core.models import (
    Category,
    GoalContribution,
    GoalMilestone,
    HouseholdData,
    SavingsGoal,
    Transaction,
)
from core.periods import add_months, resolve_today

T = TypeVar("T")

__all__ = ["CategoryProfile", "CATEGORY_PROFILES", "generate_household_data", "write_household_csvs"]


@dataclass(frozen=True)
class CategoryProfile:
    """How often and how much a household spends (or earns) in one category."""

    category: Category
    monthly_count: Tuple[int, int]
    amount_mean: float
    amount_sd: float
    fixed_day: Optional[int] = None


CATEGORY_PROFILES: Sequence[CategoryProfile] = (
    CategoryProfile(Category("cat_salary", "Salary", "income", "#22c55e"), (1, 1), 5200.0, 120.0, fixed_day=1),
    CategoryProfile(Category("cat_freelance", "Freelance", "income", "#84cc16"), (0, 2), 450.0, 150.0),
    CategoryProfile(Category("cat_rent", "Rent", "expense", "#ef4444"), (1, 1), 1650.0, 0.0, fixed_day=1),
    CategoryProfile(Category("cat_utilities", "Utilities", "expense", "#f97316"), (1, 1), 185.0, 25.0, fixed_day=12),
    CategoryProfile(Category("cat_groceries", "Groceries", "expense", "#eab308"), (6, 9), 78.0, 22.0),
    CategoryProfile(Category("cat_transport", "Transportation", "expense", "#0ea5e9"), (8, 14), 18.0, 9.0),
    CategoryProfile(Category("cat_dining", "Dining Out", "expense", "#ec4899"), (3, 7), 42.0, 15.0),
    CategoryProfile(Category("cat_entertainment", "Entertainment", "expense", "#a855f7"), (1, 4), 55.0, 25.0),
    CategoryProfile(Category("cat_shopping", "Shopping", "expense", "#6366f1"), (1, 4), 90.0, 40.0),
    CategoryProfile(Category("cat_subscriptions", "Subscriptions", "expense", "#14b8a6"), (2, 2), 14.0, 1.5, fixed_day=8),
    CategoryProfile(
        Category("cat_emergency", "Emergency Fund Transfer", "expense", "#10b981"), (1, 1), 400.0, 0.0, fixed_day=3
    ),
    CategoryProfile(
        Category("cat_investment", "Investment Deposit", "expense", "#3b82f6"), (1, 1), 250.0, 50.0, fixed_day=20
    ),
)

EMERGENCY_GOAL_ID = "goal_emergency"
VACATION_GOAL_ID = "goal_vacation"


def generate_household_data(
    months: int = 6,
    seed: Optional[int] = None,
    end_date: date | None = None,
) -> HouseholdData:
    """Generate ``months`` of household history ending on ``end_date``.

    The final month is partial, stopping at ``end_date`` (today by default).
    The same ``seed`` and ``end_date`` always give the same household.
    """

    if months <= 0:
        raise ValueError("months must be a positive integer")

    rng = np.random.default_rng(seed)
    end = resolve_today(end_date)
    period_start = add_months(end.replace(day=1), -(months - 1))
    month_starts = [add_months(period_start, offset) for offset in range(months)]

    transactions: List[Transaction] = []
    txn_counter = itertools.count(1)

    def append(txn_date: date, profile: CategoryProfile, amount: float, description: str) -> None:
        if txn_date > end:
            return
        transactions.append(
            Transaction(
                id=f"txn_{next(txn_counter):06d}",
                type=profile.category.type,
                category_id=profile.category.id,
                amount=round(max(amount, 1.0), 2),
                date=txn_date,
                description=description,
            )
        )

    for month_anchor in month_starts:
        year, month = month_anchor.year, month_anchor.month
        month_days = _month_dates(year, month)

        for profile in CATEGORY_PROFILES:
            low, high = profile.monthly_count
            count = int(rng.integers(low, high + 1))
            for index in range(count):
                if profile.fixed_day is not None:
                    txn_date = _clamp_day(year, month, profile.fixed_day + index * 7)
                else:
                    txn_date = _rng_choice(month_days, rng)
                amount = abs(rng.normal(profile.amount_mean, profile.amount_sd))
                append(txn_date, profile, amount, profile.category.name)

    transactions.sort(key=lambda txn: (txn.date, txn.id))

    goals, milestones, contributions = _build_goals(month_starts, end, rng)
    return HouseholdData(
        categories=[profile.category for profile in CATEGORY_PROFILES],
        transactions=transactions,
        goals=goals,
        milestones=milestones,
        contributions=contributions,
    )


def write_household_csvs(
    directory: str | Path,
    *,
    months: int = 6,
    seed: Optional[int] = None,
    end_date: date | None = None,
) -> HouseholdData:
    """Generate a household and persist it as the CSV set read by the data loader."""

    data = generate_household_data(months=months, seed=seed, end_date=end_date)
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)

    pd.DataFrame([vars(category) for category in data.categories]).to_csv(target / "categories.csv", index=False)
    pd.DataFrame([vars(txn) for txn in data.transactions]).to_csv(target / "transactions.csv", index=False)
    pd.DataFrame([vars(goal) for goal in data.goals]).to_csv(target / "goals.csv", index=False)
    pd.DataFrame([vars(milestone) for milestone in data.milestones]).to_csv(target / "milestones.csv", index=False)
    pd.DataFrame([vars(contribution) for contribution in data.contributions]).to_csv(
        target / "contributions.csv", index=False
    )
    return data


def _build_goals(
    month_starts: Sequence[date],
    end: date,
    rng: np.random.Generator,
) -> Tuple[List[SavingsGoal], List[GoalMilestone], List[GoalContribution]]:
    contributions: List[GoalContribution] = []
    contribution_counter = itertools.count(1)

    def contribute(goal_id: str, amount: float, when: date, *, is_auto: bool) -> None:
        if when > end:
            return
        contributions.append(
            GoalContribution(
                id=f"contrib_{next(contribution_counter):05d}",
                goal_id=goal_id,
                amount=round(amount, 2),
                contribution_date=when,
                is_auto=is_auto,
            )
        )

    for month_anchor in month_starts:
        contribute(EMERGENCY_GOAL_ID, 400.0, _clamp_day(month_anchor.year, month_anchor.month, 3), is_auto=True)
        if rng.random() < 0.75:
            amount = float(rng.uniform(120.0, 260.0))
            contribute(VACATION_GOAL_ID, amount, _clamp_day(month_anchor.year, month_anchor.month, 15), is_auto=False)

    def saved(goal_id: str, opening: float) -> float:
        return round(opening + sum(c.amount for c in contributions if c.goal_id == goal_id), 2)

    def last_auto(goal_id: str) -> Optional[date]:
        dates = [c.contribution_date for c in contributions if c.goal_id == goal_id and c.is_auto]
        return max(dates) if dates else None

    emergency_saved = saved(EMERGENCY_GOAL_ID, 2500.0)
    vacation_saved = saved(VACATION_GOAL_ID, 0.0)

    goals = [
        SavingsGoal(
            id=EMERGENCY_GOAL_ID,
            name="Emergency Fund",
            target_amount=10000.0,
            current_amount=emergency_saved,
            deadline=add_months(end, 12),
            goal_type="emergency_fund",
            priority=0,
            auto_contribute=True,
            auto_contribute_amount=400.0,
            auto_contribute_frequency="monthly",
            last_contribution_date=last_auto(EMERGENCY_GOAL_ID),
            description="Six months of essential expenses",
            color="#ef4444",
            icon="Shield",
        ),
        SavingsGoal(
            id=VACATION_GOAL_ID,
            name="Summer Vacation",
            target_amount=3000.0,
            current_amount=vacation_saved,
            deadline=add_months(end, 5),
            goal_type="vacation",
            priority=1,
            description="Two weeks by the coast",
            color="#06b6d4",
            icon="Plane",
        ),
    ]

    milestones: List[GoalMilestone] = []
    for goal in goals:
        for order_index, fraction in enumerate((0.25, 0.5, 0.75, 1.0)):
            target = round(goal.target_amount * fraction, 2)
            milestones.append(
                GoalMilestone(
                    id=f"{goal.id}_m{order_index + 1}",
                    goal_id=goal.id,
                    title=f"{fraction:.0%} of {goal.name}",
                    target_amount=target,
                    is_completed=goal.current_amount >= target,
                    order_index=order_index,
                )
            )

    return goals, milestones, contributions


def _clamp_day(year: int, month: int, day: int) -> date:
    _, max_day = calendar.monthrange(year, month)
    return date(year, month, max(1, min(day, max_day)))


def _month_dates(year: int, month: int) -> List[date]:
    start = date(year, month, 1)
    end = add_months(start, 1) - timedelta(days=1)
    return [moment.date() for moment in pd.date_range(start=start, end=end, freq="D")]


def _rng_choice(options: Sequence[T], rng: np.random.Generator) -> T:
    if not options:
        raise ValueError("Cannot choose from an empty sequence")
    return options[int(rng.integers(0, len(options)))]
