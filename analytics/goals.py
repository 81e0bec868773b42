"""Savings goal analytics: progress, required pace, projections and health."""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Iterable, Sequence, TypedDict

from core.formatting import format_currency
from core.models import (
    ContributionFrequency,
    GoalAnalytics,
    GoalContribution,
    GoalHealth,
    GoalMilestone,
    GoalTypeInfo,
    SavingsGoal,
    TotalSavings,
)
from core.periods import add_months, days_between, months_between, resolve_today

logger = logging.getLogger(__name__)

__all__ = [
    "GOAL_TYPES",
    "GoalSuggestion",
    "calculate_goal_analytics",
    "calculate_next_contribution_date",
    "calculate_total_savings",
    "get_active_goals",
    "get_all_goal_types",
    "get_completed_goals",
    "get_goal_type_info",
    "get_goals_by_type",
    "is_auto_contribution_due",
    "monthly_equivalent",
    "sort_by_priority",
    "suggest_goals",
]

WEEKS_PER_MONTH = 4.33

_MONTHLY_FACTORS: dict[str, float] = {
    "weekly": WEEKS_PER_MONTH,
    "bi-weekly": 2.17,
    "monthly": 1.0,
    "quarterly": 1 / 3,
}

GOAL_TYPES: dict[str, GoalTypeInfo] = {
    info.type: info
    for info in (
        GoalTypeInfo(
            type="general",
            label="General Savings",
            icon="PiggyBank",
            color="#3b82f6",
            description="Flexible savings for any purpose",
            tips=("Set specific targets", "Review monthly", "Stay consistent"),
        ),
        GoalTypeInfo(
            type="emergency_fund",
            label="Emergency Fund",
            icon="Shield",
            color="#ef4444",
            description="Financial safety net for unexpected expenses",
            recommended_amount=10000.0,
            tips=(
                "Aim for 3-6 months of expenses",
                "Keep in easily accessible account",
                "Highest priority goal",
                "Replenish immediately after use",
            ),
        ),
        GoalTypeInfo(
            type="vacation",
            label="Vacation Fund",
            icon="Plane",
            color="#06b6d4",
            description="Save for your dream vacation or travel plans",
            tips=("Research trip costs", "Include spending money", "Book in advance for deals"),
        ),
        GoalTypeInfo(
            type="house_down_payment",
            label="House Down Payment",
            icon="Home",
            color="#8b5cf6",
            description="Save for your first home or next property",
            tips=(
                "Aim for 20% to avoid PMI",
                "Consider closing costs",
                "Factor in moving expenses",
                "Research first-time buyer programs",
            ),
        ),
        GoalTypeInfo(
            type="retirement",
            label="Retirement Savings",
            icon="TrendingUp",
            color="#10b981",
            description="Long-term savings for retirement security",
            tips=(
                "Start early for compound growth",
                "Maximize employer 401(k) match",
                "Consider Roth IRA",
                "Increase contributions with raises",
            ),
        ),
        GoalTypeInfo(
            type="debt_free",
            label="Debt-Free Goal",
            icon="Target",
            color="#f59e0b",
            description="Pay off debt and achieve financial freedom",
            tips=(
                "Prioritize high-interest debt",
                "Consider debt avalanche method",
                "Negotiate lower interest rates",
                "Avoid new debt",
            ),
        ),
        GoalTypeInfo(
            type="car_purchase",
            label="Car Purchase",
            icon="Car",
            color="#6366f1",
            description="Save for your next vehicle",
            tips=(
                "Aim for 20% down payment",
                "Research insurance costs",
                "Consider maintenance budget",
                "Compare new vs. used options",
            ),
        ),
        GoalTypeInfo(
            type="education",
            label="Education Fund",
            icon="GraduationCap",
            color="#ec4899",
            description="Save for education expenses or student loan payoff",
            tips=(
                "Research 529 plans",
                "Apply for scholarships",
                "Consider community college",
                "Look into tax benefits",
            ),
        ),
        GoalTypeInfo(
            type="wedding",
            label="Wedding Fund",
            icon="Heart",
            color="#f43f5e",
            description="Save for your special day",
            tips=(
                "Set realistic budget",
                "Prioritize must-haves",
                "DIY where possible",
                "Consider off-season dates",
            ),
        ),
        GoalTypeInfo(
            type="investment",
            label="Investment Fund",
            icon="LineChart",
            color="#14b8a6",
            description="Build wealth through investments",
            tips=(
                "Diversify portfolio",
                "Dollar-cost averaging",
                "Long-term perspective",
                "Rebalance regularly",
            ),
        ),
    )
}


def get_goal_type_info(goal_type: str) -> GoalTypeInfo:
    """Return catalogue details for ``goal_type``; unknown types map to ``general``."""

    return GOAL_TYPES.get(goal_type, GOAL_TYPES["general"])


def get_all_goal_types() -> list[GoalTypeInfo]:
    return list(GOAL_TYPES.values())


def monthly_equivalent(amount: float, frequency: str) -> float:
    """Convert a recurring contribution into its approximate monthly amount.

    Unrecognised frequencies are treated as monthly.
    """

    return amount * _MONTHLY_FACTORS.get(frequency, 1.0)


def calculate_goal_analytics(
    goal: SavingsGoal,
    milestones: Sequence[GoalMilestone] = (),
    contributions: Sequence[GoalContribution] = (),
    *,
    today: date | None = None,
    currency_symbol: str = "$",
) -> GoalAnalytics:
    """Derive progress, pace, projected completion and health for ``goal``.

    Parameters
    ----------
    goal:
        The savings goal being analysed.
    milestones:
        Milestones of the goal in any order; they are sorted by ``order_index``.
    contributions:
        Contributions made towards the goal. Only the earliest date and the
        count are used; the monthly average divides ``goal.current_amount``
        by the months elapsed since the earliest contribution (at least one).
    today:
        Reference date, defaults to the current date.
    """

    today = resolve_today(today)
    deadline = goal.deadline

    progress = goal.current_amount / goal.target_amount * 100 if goal.target_amount > 0 else 0.0
    remaining = max(0.0, goal.target_amount - goal.current_amount)

    days_left = days_between(deadline, today) if deadline is not None else None
    months_left = months_between(deadline, today) if deadline is not None else None

    required_monthly = 0.0
    required_weekly = 0.0
    required_daily = 0.0
    if days_left is not None and months_left is not None and months_left > 0 and days_left > 0:
        required_monthly = remaining / months_left
        required_weekly = remaining / (months_left * WEEKS_PER_MONTH)
        required_daily = remaining / days_left

    average_monthly = 0.0
    if contributions:
        first_contribution = min(contribution.contribution_date for contribution in contributions)
        months_since_start = max(1, months_between(today, first_contribution))
        average_monthly = goal.current_amount / months_since_start

    estimated_months: int | None = None
    projected_completion: date | None = None
    if average_monthly > 0:
        estimated_months = math.ceil(remaining / average_monthly)
    elif goal.auto_contribute and goal.auto_contribute_amount > 0:
        auto_monthly = monthly_equivalent(goal.auto_contribute_amount, goal.auto_contribute_frequency)
        if auto_monthly > 0:
            estimated_months = math.ceil(remaining / auto_monthly)
    if estimated_months is not None:
        projected_completion = add_months(today, estimated_months)

    is_on_track = True
    if deadline is not None and required_monthly > 0:
        is_on_track = average_monthly >= required_monthly

    sorted_milestones = sorted(milestones, key=lambda milestone: milestone.order_index)
    completed_milestones = sum(1 for milestone in sorted_milestones if milestone.is_completed)
    next_milestone = next((milestone for milestone in sorted_milestones if not milestone.is_completed), None)

    health = _assess_health(progress, days_left, is_on_track)
    recommendation = _build_recommendation(
        goal_name=goal.name,
        progress=progress,
        health=health,
        is_on_track=is_on_track,
        required_monthly=required_monthly,
        average_monthly=average_monthly,
        currency_symbol=currency_symbol,
    )
    logger.debug("Goal %s: progress %.1f%%, health %s", goal.id, progress, health)

    return GoalAnalytics(
        goal=goal,
        progress_percentage=progress,
        remaining_amount=remaining,
        days_until_deadline=days_left,
        months_until_deadline=months_left,
        required_monthly_savings=required_monthly,
        required_weekly_savings=required_weekly,
        required_daily_savings=required_daily,
        is_on_track=is_on_track,
        projected_completion_date=projected_completion,
        estimated_months_to_complete=estimated_months,
        average_monthly_contribution=average_monthly,
        total_contributions=goal.current_amount,
        contribution_count=len(contributions),
        milestones=sorted_milestones,
        next_milestone=next_milestone,
        completed_milestones=completed_milestones,
        health=health,
        recommendation=recommendation,
    )


def _assess_health(progress: float, days_left: int | None, is_on_track: bool) -> GoalHealth:
    if progress >= 90:
        return "excellent"
    if days_left is not None and days_left < 30 and progress < 50:
        return "critical"
    if not is_on_track:
        return "behind"
    return "good"


def _build_recommendation(
    *,
    goal_name: str,
    progress: float,
    health: GoalHealth,
    is_on_track: bool,
    required_monthly: float,
    average_monthly: float,
    currency_symbol: str,
) -> str:
    # Order matters: a goal can be both behind and under 10% complete.
    if progress >= 100:
        return (
            f"Congratulations! You've reached your {goal_name} goal! "
            "Consider setting a new goal or increasing this target."
        )
    if health == "critical":
        return (
            f"Critical: You need to save {format_currency(required_monthly, currency_symbol)}/month to meet "
            "your deadline. Consider extending the deadline or increasing contributions."
        )
    if health == "behind":
        shortfall = required_monthly - average_monthly
        return (
            f"Behind schedule: Increase monthly savings by {format_currency(shortfall, currency_symbol)} "
            "to stay on track, or adjust your deadline."
        )
    if is_on_track and progress > 25:
        return (
            f"Great progress! Keep contributing {format_currency(average_monthly, currency_symbol)}/month "
            "and you'll reach your goal on time."
        )
    if progress < 10:
        return (
            "Just getting started! Set up auto-contributions of "
            f"{format_currency(required_monthly, currency_symbol)}/month to reach your goal."
        )
    return (
        f"Keep going! You're {progress:.0f}% of the way there. "
        "Stay consistent with your contributions."
    )


def calculate_next_contribution_date(
    last_contribution_date: date | None,
    frequency: ContributionFrequency | str,
    *,
    today: date | None = None,
) -> date:
    """Add one contribution period to the last contribution (or today)."""

    base = last_contribution_date if last_contribution_date is not None else resolve_today(today)
    if frequency == "weekly":
        return base + timedelta(weeks=1)
    if frequency == "bi-weekly":
        return base + timedelta(weeks=2)
    if frequency == "quarterly":
        return add_months(base, 3)
    return add_months(base, 1)


def is_auto_contribution_due(
    last_contribution_date: date | None,
    frequency: ContributionFrequency | str,
    *,
    today: date | None = None,
) -> bool:
    today = resolve_today(today)
    return today >= calculate_next_contribution_date(last_contribution_date, frequency, today=today)


def sort_by_priority(goals: Iterable[SavingsGoal]) -> list[SavingsGoal]:
    return sorted(goals, key=lambda goal: goal.priority)


def get_goals_by_type(goals: Iterable[SavingsGoal], goal_type: str) -> list[SavingsGoal]:
    return [goal for goal in goals if goal.goal_type == goal_type]


def get_active_goals(goals: Iterable[SavingsGoal]) -> list[SavingsGoal]:
    return [goal for goal in goals if not goal.is_completed]


def get_completed_goals(goals: Iterable[SavingsGoal]) -> list[SavingsGoal]:
    return [goal for goal in goals if goal.is_completed]


def calculate_total_savings(goals: Iterable[SavingsGoal]) -> TotalSavings:
    goals = list(goals)
    current = sum(goal.current_amount for goal in goals)
    target = sum(goal.target_amount for goal in goals)
    progress = current / target * 100 if target > 0 else 0.0
    return TotalSavings(current_amount=current, target_amount=target, progress_percentage=progress)


class GoalSuggestion(TypedDict):
    type: str
    reason: str
    recommended_amount: float
    timeframe_months: int


def suggest_goals(
    monthly_income: float | None,
    existing_goals: Iterable[SavingsGoal] = (),
) -> list[GoalSuggestion]:
    """Suggest foundational goals the household does not have yet.

    An emergency fund (six months of income, or 10,000 without an income
    figure) and a debt-free goal are always candidates; retirement is only
    suggested when income is known.
    """

    existing_types = {goal.goal_type for goal in existing_goals}
    suggestions: list[GoalSuggestion] = []

    if "emergency_fund" not in existing_types:
        suggestions.append(
            {
                "type": "emergency_fund",
                "reason": "Essential safety net for unexpected expenses",
                "recommended_amount": monthly_income * 6 if monthly_income else 10000.0,
                "timeframe_months": 12,
            }
        )
    if "debt_free" not in existing_types:
        suggestions.append(
            {
                "type": "debt_free",
                "reason": "Eliminate high-interest consumer debt",
                "recommended_amount": 15000.0,
                "timeframe_months": 18,
            }
        )
    if "retirement" not in existing_types and monthly_income:
        suggestions.append(
            {
                "type": "retirement",
                "reason": "Start building long-term retirement savings",
                "recommended_amount": monthly_income * 500,
                "timeframe_months": 360,
            }
        )
    return suggestions
