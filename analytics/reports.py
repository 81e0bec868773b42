"""Period reports: income statement, cash-flow statement and category comparisons."""

from __future__ import annotations

import logging
from typing import Iterable, Literal, Sequence, TypedDict

import pandas as pd

from core.models import Category, Transaction

logger = logging.getLogger(__name__)

__all__ = [
    "CashFlowStatement",
    "CategoryComparison",
    "IncomeStatement",
    "OPERATING_CATEGORIES",
    "calculate_cash_flow",
    "calculate_category_comparisons",
    "calculate_income_statement",
]

UNCATEGORIZED = "Uncategorized"
OPERATING_CATEGORIES: tuple[str, ...] = (
    "Housing",
    "Transportation",
    "Food",
    "Utilities",
    "Healthcare",
    "Insurance",
)
TREND_THRESHOLD = 5.0

Trend = Literal["up", "down", "stable"]


class RevenueSection(TypedDict):
    total: float
    by_category: dict[str, float]
    growth: float


class ExpenseSection(TypedDict):
    total: float
    by_category: dict[str, float]
    operating: float
    non_operating: float
    growth: float


class NetIncomeSection(TypedDict):
    gross: float
    operating: float
    net: float
    margin: float


class PeriodComparison(TypedDict):
    previous_revenue: float
    previous_expenses: float
    previous_net: float


class IncomeStatement(TypedDict):
    """Profit and loss for one period, compared with the period before."""

    revenue: RevenueSection
    expenses: ExpenseSection
    net_income: NetIncomeSection
    comparison: PeriodComparison


class OperatingActivities(TypedDict):
    net_income: float
    adjustments: float
    total: float


class CashFlowStatement(TypedDict):
    operating: OperatingActivities
    net_cash_flow: float
    beginning_balance: float
    ending_balance: float


class CategoryComparison(TypedDict):
    category: str
    current_amount: float
    previous_amount: float
    change: float
    change_percent: float
    trend: Trend


def calculate_income_statement(
    transactions: Sequence[Transaction],
    previous_transactions: Sequence[Transaction] = (),
    categories: Iterable[Category] = (),
    *,
    operating_categories: Iterable[str] = OPERATING_CATEGORIES,
) -> IncomeStatement:
    """Summarise revenue and expenses by category with growth against ``previous_transactions``.

    Parameters
    ----------
    transactions:
        Income and expense records for the reported period.
    previous_transactions:
        Records for the comparison period; growth is 0 when it has no totals.
    categories:
        Category records used to resolve names; unknown ids group as ``Uncategorized``.
    operating_categories:
        Category names counted as operating expenses.

    Returns
    -------
    IncomeStatement
        Totals, per-category breakdowns, operating split and net margin.
    """

    names = _category_names(categories)
    frame = _report_frame(transactions, names)
    previous = _report_frame(previous_transactions, names)

    revenue_by_category = _by_category(frame, "income")
    expenses_by_category = _by_category(frame, "expense")
    total_revenue = sum(revenue_by_category.values())
    total_expenses = sum(expenses_by_category.values())

    operating_names = set(operating_categories)
    operating_expenses = sum(
        amount for category, amount in expenses_by_category.items() if category in operating_names
    )

    previous_revenue = _total(previous, "income")
    previous_expenses = _total(previous, "expense")

    gross_income = total_revenue - total_expenses
    net_margin = gross_income / total_revenue * 100 if total_revenue > 0 else 0.0

    return {
        "revenue": {
            "total": total_revenue,
            "by_category": revenue_by_category,
            "growth": _growth(total_revenue, previous_revenue),
        },
        "expenses": {
            "total": total_expenses,
            "by_category": expenses_by_category,
            "operating": operating_expenses,
            "non_operating": total_expenses - operating_expenses,
            "growth": _growth(total_expenses, previous_expenses),
        },
        "net_income": {
            "gross": gross_income,
            "operating": total_revenue - operating_expenses,
            "net": gross_income,
            "margin": net_margin,
        },
        "comparison": {
            "previous_revenue": previous_revenue,
            "previous_expenses": previous_expenses,
            "previous_net": previous_revenue - previous_expenses,
        },
    }


def calculate_cash_flow(
    transactions: Sequence[Transaction],
    beginning_balance: float = 0.0,
) -> CashFlowStatement:
    """Operating cash flow for the period and the resulting ending balance."""

    frame = _report_frame(transactions, {})
    net_income = _total(frame, "income") - _total(frame, "expense")
    adjustments = 0.0
    operating_total = net_income + adjustments

    return {
        "operating": {"net_income": net_income, "adjustments": adjustments, "total": operating_total},
        "net_cash_flow": operating_total,
        "beginning_balance": beginning_balance,
        "ending_balance": beginning_balance + operating_total,
    }


def calculate_category_comparisons(
    current_transactions: Sequence[Transaction],
    previous_transactions: Sequence[Transaction],
    categories: Iterable[Category] = (),
) -> list[CategoryComparison]:
    """Compare per-category totals across two periods, largest current amount first.

    Income and expenses are pooled per category name. A move of more than
    five percent either way is reported as an ``up`` or ``down`` trend.
    """

    names = _category_names(categories)
    current = _by_category(_report_frame(current_transactions, names))
    previous = _by_category(_report_frame(previous_transactions, names))

    comparisons: list[CategoryComparison] = []
    for category in [*current, *(name for name in previous if name not in current)]:
        current_amount = current.get(category, 0.0)
        previous_amount = previous.get(category, 0.0)
        change = current_amount - previous_amount
        change_percent = change / previous_amount * 100 if previous_amount > 0 else 0.0

        trend: Trend = "stable"
        if abs(change_percent) > TREND_THRESHOLD:
            trend = "up" if change_percent > 0 else "down"

        comparisons.append(
            {
                "category": category,
                "current_amount": current_amount,
                "previous_amount": previous_amount,
                "change": change,
                "change_percent": change_percent,
                "trend": trend,
            }
        )

    comparisons.sort(key=lambda row: row["current_amount"], reverse=True)
    logger.debug("Compared %d categories across periods", len(comparisons))
    return comparisons


def _growth(current: float, previous: float) -> float:
    return (current - previous) / previous * 100 if previous > 0 else 0.0


def _category_names(categories: Iterable[Category]) -> dict[str, str]:
    return {category.id: category.name for category in categories}


def _report_frame(transactions: Iterable[Transaction], names: dict[str, str]) -> pd.DataFrame:
    records = [
        {
            "type": txn.type,
            "category": names.get(txn.category_id or "", UNCATEGORIZED),
            "amount": float(txn.amount),
        }
        for txn in transactions
    ]
    return pd.DataFrame.from_records(records, columns=["type", "category", "amount"])


def _total(frame: pd.DataFrame, kind: str) -> float:
    return float(frame.loc[frame["type"] == kind, "amount"].sum())


def _by_category(frame: pd.DataFrame, kind: str | None = None) -> dict[str, float]:
    if kind is not None:
        frame = frame[frame["type"] == kind]
    if frame.empty:
        return {}
    totals = frame.groupby("category", sort=False)["amount"].sum()
    return {str(category): float(amount) for category, amount in totals.items()}
