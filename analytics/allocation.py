"""Needs/wants/savings budget allocation and 50/30/20 recommendations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Iterable, Sequence

from config.settings import DEFAULT_NEEDS_KEYWORDS, DEFAULT_SAVINGS_KEYWORDS
from core.formatting import format_currency, format_percentage
from core.models import (
    AllocationBucket,
    BudgetAllocation,
    BudgetSummary,
    Category,
    CategoryAllocation,
    PlannedExpense,
    Transaction,
    ZeroBasedBudget,
)

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from config.settings import Settings

logger = logging.getLogger(__name__)

__all__ = [
    "CategoryKeywords",
    "DEFAULT_KEYWORDS",
    "InvalidAllocationError",
    "calculate_503020_allocation",
    "calculate_custom_allocation",
    "calculate_zero_based_budget",
    "classify_category",
    "generate_budget_summary",
]

PERCENTAGE_TOLERANCE = 0.01
BALANCE_TOLERANCE = 10.0


class InvalidAllocationError(ValueError):
    """Raised when custom allocation percentages do not add up to 100."""


@dataclass(frozen=True)
class CategoryKeywords:
    """Keyword vocabularies used to place a category name into a bucket.

    Needs keywords are tested before savings keywords; a name matching
    neither list is a want.
    """

    needs: tuple[str, ...] = DEFAULT_NEEDS_KEYWORDS
    savings: tuple[str, ...] = DEFAULT_SAVINGS_KEYWORDS

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CategoryKeywords":
        return cls(
            needs=tuple(settings.needs_keywords),
            savings=tuple(settings.savings_keywords),
        )


DEFAULT_KEYWORDS = CategoryKeywords()


def calculate_503020_allocation(total_income: float) -> BudgetAllocation:
    """Split income 50% needs, 30% wants and 20% savings."""

    return BudgetAllocation(
        needs=total_income * 0.5,
        wants=total_income * 0.3,
        savings=total_income * 0.2,
    )


def calculate_custom_allocation(
    total_income: float,
    needs_percentage: float,
    wants_percentage: float,
    savings_percentage: float,
) -> BudgetAllocation:
    """Split income using caller supplied percentages (0-100 scale).

    Raises
    ------
    InvalidAllocationError
        When the three percentages do not sum to 100 within 0.01.
    """

    total = needs_percentage + wants_percentage + savings_percentage
    if abs(total - 100) > PERCENTAGE_TOLERANCE:
        logger.warning(
            "Rejected custom allocation %s/%s/%s (sum %.4f)",
            needs_percentage,
            wants_percentage,
            savings_percentage,
            total,
        )
        raise InvalidAllocationError(f"Percentages must add up to 100% (got {total:g}%)")

    return BudgetAllocation(
        needs=total_income * (needs_percentage / 100),
        wants=total_income * (wants_percentage / 100),
        savings=total_income * (savings_percentage / 100),
    )


def classify_category(
    category: Category,
    keywords: CategoryKeywords = DEFAULT_KEYWORDS,
) -> AllocationBucket:
    """Return the bucket a category belongs to based on its name."""

    name = category.name.lower()
    if any(keyword in name for keyword in keywords.needs):
        return "needs"
    if any(keyword in name for keyword in keywords.savings):
        return "savings"
    return "wants"


def generate_budget_summary(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    total_income: float,
    start_date: date,
    end_date: date,
    *,
    keywords: CategoryKeywords = DEFAULT_KEYWORDS,
    currency_symbol: str = "$",
) -> BudgetSummary:
    """Compare spend in ``[start_date, end_date]`` against the 50/30/20 split."""

    allocation = calculate_503020_allocation(total_income)
    category_map = {category.id: category for category in categories}

    spend_by_category: dict[str, float] = {}
    bucket_by_category: dict[str, AllocationBucket] = {}
    bucket_spend: dict[AllocationBucket, float] = {"needs": 0.0, "wants": 0.0, "savings": 0.0}

    for transaction in transactions:
        if not start_date <= transaction.date <= end_date:
            continue
        if transaction.type != "expense":
            continue

        category = category_map.get(transaction.category_id) if transaction.category_id else None
        if category is None:
            logger.debug(
                "Skipping transaction %s with unknown category %r",
                transaction.id,
                transaction.category_id,
            )
            continue

        bucket = bucket_by_category.get(category.id)
        if bucket is None:
            bucket = classify_category(category, keywords)
            bucket_by_category[category.id] = bucket

        spend_by_category[category.id] = spend_by_category.get(category.id, 0.0) + transaction.amount
        bucket_spend[bucket] += transaction.amount

    utilization = {
        bucket: _utilization(bucket_spend[bucket], allocation.for_bucket(bucket))
        for bucket in bucket_spend
    }

    breakdown: list[CategoryAllocation] = []
    for category_id, spending in spend_by_category.items():
        bucket = bucket_by_category[category_id]
        allocated = allocation.for_bucket(bucket)
        breakdown.append(
            CategoryAllocation(
                category_id=category_id,
                category_name=category_map[category_id].name,
                type=bucket,
                current_spending=spending,
                allocated_budget=allocated,
                utilization_percentage=_utilization(spending, allocated),
            )
        )

    is_balanced = all(abs(value - 100) <= BALANCE_TOLERANCE for value in utilization.values())

    recommendations = _build_recommendations(
        utilization=utilization,
        allocation=allocation,
        bucket_spend=bucket_spend,
        currency_symbol=currency_symbol,
    )

    return BudgetSummary(
        total_income=total_income,
        allocation=allocation,
        category_breakdown=breakdown,
        needs_utilization=utilization["needs"],
        wants_utilization=utilization["wants"],
        savings_utilization=utilization["savings"],
        is_balanced=is_balanced,
        recommendations=recommendations,
    )


def calculate_zero_based_budget(
    total_income: float,
    planned_expenses: Sequence[PlannedExpense],
) -> ZeroBasedBudget:
    """Allocate every dollar: report what is planned and what is left over."""

    allocated = sum(expense.amount for expense in planned_expenses)
    return ZeroBasedBudget(
        allocated=allocated,
        unallocated=total_income - allocated,
        categories=list(planned_expenses),
    )


def _utilization(spending: float, allocated: float) -> float:
    if allocated <= 0:
        return 0.0
    return spending / allocated * 100


def _build_recommendations(
    *,
    utilization: dict[AllocationBucket, float],
    allocation: BudgetAllocation,
    bucket_spend: dict[AllocationBucket, float],
    currency_symbol: str,
) -> list[str]:
    recommendations: list[str] = []

    needs = utilization["needs"]
    if needs > 110:
        excess = bucket_spend["needs"] - allocation.needs
        recommendations.append(
            f"Needs spending is {format_percentage(needs)} of budget. Consider reducing by "
            f"{format_currency(excess, currency_symbol)} or increasing income."
        )
    elif needs < 40:
        recommendations.append(f"Needs spending is well under control at {format_percentage(needs)}.")

    wants = utilization["wants"]
    if wants > 120:
        excess = bucket_spend["wants"] - allocation.wants
        recommendations.append(
            f"Wants spending is {format_percentage(wants)} of budget. Cut back by "
            f"{format_currency(excess, currency_symbol)} on discretionary expenses."
        )
    elif wants > 100:
        recommendations.append(
            "Wants spending is slightly over. Consider reducing entertainment, dining out, or shopping."
        )
    elif wants < 50:
        recommendations.append(
            "You have room in your wants budget. Consider treating yourself or reallocating to savings."
        )

    savings = utilization["savings"]
    if savings < 50:
        shortfall = allocation.savings - bucket_spend["savings"]
        recommendations.append(
            "You're saving less than recommended. Try to save an additional "
            f"{format_currency(shortfall, currency_symbol)} per month."
        )
    elif savings > 100:
        recommendations.append("Excellent! You're exceeding your savings goal. Consider increasing your target.")
    else:
        recommendations.append(f"Savings on track at {format_percentage(savings)} of target.")

    total_budget = allocation.total
    if total_budget > 0:
        overall = sum(bucket_spend.values()) / total_budget * 100
        if overall > 100:
            recommendations.append(
                f"Overall spending is {format_percentage(overall)} of budget. "
                "You're overspending, review all categories."
            )
        elif overall < 80:
            recommendations.append(
                f"You're spending only {format_percentage(overall)} of budget. "
                "Great job! Consider increasing savings goals."
            )

    return recommendations
