"""Statistical spending analysis: patterns, anomalies, budget risk and insights."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Literal, Optional, Sequence, TypedDict

import numpy as np
import pandas as pd

from core.formatting import format_currency
from core.models import Category, Transaction
from core.periods import resolve_today

logger = logging.getLogger(__name__)

__all__ = [
    "BudgetLimit",
    "BudgetPrediction",
    "LowBalanceWarning",
    "SpendingAnomaly",
    "SpendingInsight",
    "SpendingPattern",
    "calculate_confidence_score",
    "calculate_spending_patterns",
    "detect_anomalies",
    "detect_low_balance_warning",
    "generate_insights",
    "predict_budget_status",
]

UNCATEGORIZED = "Uncategorized"
NEW_CATEGORY_THRESHOLD = 100.0
NEW_CATEGORY_HIGH_SEVERITY = 500.0
TREND_CHANGE_THRESHOLD = 30.0
FREQUENCY_CHANGE_THRESHOLD = 50.0

Sensitivity = Literal["low", "medium", "high"]
_Z_THRESHOLDS: dict[str, float] = {"low": 3.0, "medium": 2.5, "high": 2.0}
_ALL_DAYS = list(range(7))


class SpendingPattern(TypedDict):
    """Historical spend profile for one category."""

    category: str
    avg_amount: float
    std_deviation: float
    min_amount: float
    max_amount: float
    frequency: int
    typical_days: list[int]


class SpendingAnomaly(TypedDict):
    transaction: Transaction
    anomaly_score: float
    anomaly_type: str
    confidence: float
    reason: str
    severity: str
    recommendation: str


@dataclass(frozen=True)
class BudgetLimit:
    category_id: str
    amount: float
    category_name: Optional[str] = None


class BudgetPrediction(TypedDict):
    category: str
    current_spending: float
    budget_limit: float
    projected_spending: float
    days_remaining: int
    probability: float
    recommended_daily_limit: float
    alert: bool
    severity: str


class SpendingInsight(TypedDict):
    type: str
    title: str
    description: str
    impact: str
    confidence: float
    actionable: bool
    recommendation: str | None
    data: dict[str, Any]


class LowBalanceWarning(TypedDict):
    warning: bool
    severity: str
    days_left: int
    message: str


def calculate_spending_patterns(
    transactions: Iterable[Transaction],
    categories: Iterable[Category] = (),
) -> dict[str, SpendingPattern]:
    """Return per-category spend profiles for categories with two or more expenses."""

    frame = _expense_frame(transactions, _category_names(categories))
    patterns: dict[str, SpendingPattern] = {}
    if frame.empty:
        return patterns

    for category, group in frame.groupby("category"):
        if len(group) < 2:
            continue

        amounts = group["amount"].to_numpy(dtype=float)
        day_counts = np.bincount(group["weekday"].to_numpy(dtype=int), minlength=7)
        average_day_count = day_counts.sum() / 7
        typical_days = [int(day) for day in np.flatnonzero(day_counts > average_day_count)]

        patterns[str(category)] = {
            "category": str(category),
            "avg_amount": float(amounts.mean()),
            "std_deviation": float(amounts.std()),
            "min_amount": float(amounts.min()),
            "max_amount": float(amounts.max()),
            "frequency": int(len(amounts)),
            "typical_days": typical_days or list(_ALL_DAYS),
        }

    return patterns


def detect_anomalies(
    recent_transactions: Iterable[Transaction],
    historical_transactions: Iterable[Transaction],
    categories: Iterable[Category] = (),
    sensitivity: Sensitivity = "medium",
    *,
    currency_symbol: str = "$",
) -> list[SpendingAnomaly]:
    """Flag recent expenses that deviate from historical category behaviour.

    Parameters
    ----------
    recent_transactions:
        Transactions to inspect; income is ignored.
    historical_transactions:
        Baseline used to build per-category spending patterns.
    categories:
        Category records used to resolve names for both sets.
    sensitivity:
        ``low``, ``medium`` or ``high``; maps to z-score thresholds 3, 2.5 and 2.

    Returns
    -------
    list[SpendingAnomaly]
        Anomalies sorted by score, highest first.
    """

    names = _category_names(categories)
    patterns = calculate_spending_patterns(historical_transactions, categories)
    threshold = _Z_THRESHOLDS.get(sensitivity, _Z_THRESHOLDS["medium"])

    anomalies: list[SpendingAnomaly] = []
    for txn in recent_transactions:
        if txn.type != "expense":
            continue

        category = names.get(txn.category_id or "", UNCATEGORIZED)
        pattern = patterns.get(category)

        if pattern is None:
            if txn.amount > NEW_CATEGORY_THRESHOLD:
                anomalies.append(
                    {
                        "transaction": txn,
                        "anomaly_score": 70.0,
                        "anomaly_type": "category",
                        "confidence": 0.8,
                        "reason": f"First time spending in {category}",
                        "severity": "high" if txn.amount > NEW_CATEGORY_HIGH_SEVERITY else "medium",
                        "recommendation": "Review this new expense category and set a budget if recurring.",
                    }
                )
            continue

        std = pattern["std_deviation"]
        avg = pattern["avg_amount"]
        if std > 0:
            z_score = (txn.amount - avg) / std
            magnitude = abs(z_score)
            if magnitude > threshold:
                is_higher = txn.amount > avg
                anomalies.append(
                    {
                        "transaction": txn,
                        "anomaly_score": min(100.0, magnitude * 33.33),
                        "anomaly_type": "amount",
                        "confidence": min(0.95, magnitude / 5),
                        "reason": (
                            f"{'Much higher' if is_higher else 'Much lower'} than usual {category} spending "
                            f"(avg: {format_currency(avg, currency_symbol)}, z: {magnitude:.1f})"
                        ),
                        "severity": _z_severity(magnitude),
                        "recommendation": (
                            f"This {category} expense is {magnitude:.1f} standard deviations above your average. "
                            "Verify it's legitimate."
                            if is_higher
                            else f"Unusually low spending in {category}. This could be a data entry error."
                        ),
                    }
                )

        if txn.date.weekday() not in pattern["typical_days"]:
            anomalies.append(
                {
                    "transaction": txn,
                    "anomaly_score": 50.0,
                    "anomaly_type": "timing",
                    "confidence": 0.6,
                    "reason": f"Unusual day for {category} spending",
                    "severity": "low",
                    "recommendation": f"You typically don't spend on {category} on {txn.date:%A}s.",
                }
            )

    anomalies.sort(key=lambda anomaly: anomaly["anomaly_score"], reverse=True)
    logger.debug("Detected %d spending anomalies at %s sensitivity", len(anomalies), sensitivity)
    return anomalies


def predict_budget_status(
    current_month_transactions: Iterable[Transaction],
    budgets: Sequence[BudgetLimit],
    *,
    today: date | None = None,
) -> list[BudgetPrediction]:
    """Project month-end spend per budget and estimate the chance of overrunning it."""

    today = resolve_today(today)
    total_days = pd.Period(today, freq="M").days_in_month
    days_passed = today.day
    days_remaining = total_days - days_passed

    frame = _expense_frame(current_month_transactions, {})
    spend_by_category = frame.groupby("category_id")["amount"].sum() if not frame.empty else pd.Series(dtype=float)

    predictions: list[BudgetPrediction] = []
    for budget in budgets:
        current = float(spend_by_category.get(budget.category_id, 0.0))
        projected = current / days_passed * total_days

        if budget.amount > 0:
            excess_ratio = (projected - budget.amount) / budget.amount
            utilization = current / budget.amount * 100
        else:
            excess_ratio = math.inf if projected > 0 else 0.0
            utilization = math.inf if current > 0 else 0.0
        probability = 1 / (1 + math.exp(-5 * excess_ratio))

        remaining_budget = max(0.0, budget.amount - current)
        daily_limit = remaining_budget / days_remaining if days_remaining > 0 else 0.0

        if utilization > 100:
            severity = "critical"
        elif probability > 0.8:
            severity = "danger"
        elif probability > 0.5:
            severity = "warning"
        else:
            severity = "safe"

        predictions.append(
            {
                "category": budget.category_name or "Unknown",
                "current_spending": current,
                "budget_limit": budget.amount,
                "projected_spending": projected,
                "days_remaining": days_remaining,
                "probability": probability,
                "recommended_daily_limit": daily_limit,
                "alert": probability > 0.5,
                "severity": severity,
            }
        )

    predictions.sort(key=lambda prediction: prediction["probability"], reverse=True)
    return predictions


def generate_insights(
    current_transactions: Sequence[Transaction],
    previous_transactions: Sequence[Transaction],
    budget_predictions: Sequence[BudgetPrediction] = (),
    categories: Iterable[Category] = (),
    *,
    currency_symbol: str = "$",
) -> list[SpendingInsight]:
    """Summarise budget risk, month-over-month shifts and new spending categories."""

    names = _category_names(categories)
    insights: list[SpendingInsight] = []

    for prediction in budget_predictions:
        if not prediction["alert"]:
            continue
        insights.append(
            {
                "type": "budget_risk",
                "title": f"{prediction['category']} Budget at Risk",
                "description": (
                    f"You're projected to spend {format_currency(prediction['projected_spending'], currency_symbol)} "
                    f"this month against a {format_currency(prediction['budget_limit'], currency_symbol)} budget "
                    f"({prediction['probability'] * 100:.0f}% overrun risk)."
                ),
                "impact": "negative",
                "confidence": prediction["probability"],
                "actionable": True,
                "recommendation": (
                    f"Limit daily spending to {format_currency(prediction['recommended_daily_limit'], currency_symbol)} "
                    f"for the remaining {prediction['days_remaining']} days."
                ),
                "data": dict(prediction),
            }
        )

    current_totals = _totals_by_category(current_transactions, names)
    previous_totals = _totals_by_category(previous_transactions, names)

    for category, current_amount in current_totals.items():
        previous_amount = previous_totals.get(category, 0.0)
        if previous_amount <= 0:
            continue
        change = current_amount - previous_amount
        change_pct = change / previous_amount * 100
        if abs(change_pct) <= TREND_CHANGE_THRESHOLD:
            continue

        increased = change_pct > 0
        insights.append(
            {
                "type": "trend_change",
                "title": f"{'Increased' if increased else 'Decreased'} {category} Spending",
                "description": (
                    f"Your {category} spending is {abs(change_pct):.0f}% {'higher' if increased else 'lower'} "
                    f"than last month ({format_currency(current_amount, currency_symbol)} vs "
                    f"{format_currency(previous_amount, currency_symbol)})."
                ),
                "impact": "negative" if increased else "positive",
                "confidence": min(0.9, abs(change_pct) / 100),
                "actionable": increased,
                "recommendation": (
                    f"Review recent {category} expenses to identify the cause of increase." if increased else None
                ),
                "data": {
                    "category": category,
                    "current_amount": current_amount,
                    "previous_amount": previous_amount,
                    "change": change,
                    "change_percent": change_pct,
                },
            }
        )

    for category, amount in current_totals.items():
        if category in previous_totals or amount <= NEW_CATEGORY_THRESHOLD:
            continue
        insights.append(
            {
                "type": "unusual_category",
                "title": f"New Spending Category: {category}",
                "description": (
                    f"You've spent {format_currency(amount, currency_symbol)} in {category}, "
                    "which is a new category for you."
                ),
                "impact": "neutral",
                "confidence": 0.7,
                "actionable": True,
                "recommendation": f"Consider setting a budget for {category} if this will be a recurring expense.",
                "data": {"category": category, "amount": amount},
            }
        )

    current_count = sum(1 for txn in current_transactions if txn.type == "expense")
    previous_count = sum(1 for txn in previous_transactions if txn.type == "expense")
    if previous_count > 0:
        frequency_change = (current_count - previous_count) / previous_count * 100
        if abs(frequency_change) > FREQUENCY_CHANGE_THRESHOLD:
            more = frequency_change > 0
            insights.append(
                {
                    "type": "unusual_frequency",
                    "title": f"{'More' if more else 'Fewer'} Transactions",
                    "description": (
                        f"You've made {current_count} transactions this month compared to {previous_count} "
                        f"last month ({abs(frequency_change):.0f}% {'increase' if more else 'decrease'})."
                    ),
                    "impact": "neutral",
                    "confidence": 0.6,
                    "actionable": False,
                    "recommendation": None,
                    "data": {
                        "current_frequency": current_count,
                        "previous_frequency": previous_count,
                        "frequency_change": frequency_change,
                    },
                }
            )

    insights.sort(key=lambda insight: (insight["impact"] != "negative", -insight["confidence"]))
    return insights


def detect_low_balance_warning(
    balance: float,
    average_monthly_expenses: float,
    threshold_days: int = 7,
    *,
    currency_symbol: str = "$",
) -> LowBalanceWarning | None:
    """Warn when ``balance`` covers ``threshold_days`` or fewer days of typical spend."""

    if average_monthly_expenses == 0:
        return None

    daily_expense = average_monthly_expenses / 30
    days_left = math.floor(balance / daily_expense)
    if days_left > threshold_days:
        return None

    if days_left <= 2:
        severity = "high"
    elif days_left <= 5:
        severity = "medium"
    else:
        severity = "low"

    return {
        "warning": True,
        "severity": severity,
        "days_left": days_left,
        "message": (
            f"Your current balance ({format_currency(balance, currency_symbol)}) will last approximately "
            f"{days_left} days based on your spending pattern."
        ),
    }


def calculate_confidence_score(historical_data_points: int, z_score: float, consistency_score: float) -> float:
    """Blend data volume, anomaly strength and consistency into a 0-1 confidence."""

    data_confidence = min(1.0, historical_data_points / 100)
    anomaly_confidence = min(1.0, abs(z_score) / 5)
    return data_confidence * 0.3 + anomaly_confidence * 0.5 + consistency_score * 0.2


def _z_severity(magnitude: float) -> str:
    if magnitude > 4:
        return "critical"
    if magnitude > 3:
        return "high"
    if magnitude > 2.5:
        return "medium"
    return "low"


def _category_names(categories: Iterable[Category]) -> dict[str, str]:
    return {category.id: category.name for category in categories}


def _expense_frame(transactions: Iterable[Transaction], names: dict[str, str]) -> pd.DataFrame:
    records = [
        {
            "category_id": txn.category_id,
            "category": names.get(txn.category_id or "", UNCATEGORIZED),
            "amount": float(txn.amount),
            "weekday": txn.date.weekday(),
        }
        for txn in transactions
        if txn.type == "expense"
    ]
    return pd.DataFrame.from_records(records, columns=["category_id", "category", "amount", "weekday"])


def _totals_by_category(transactions: Iterable[Transaction], names: dict[str, str]) -> dict[str, float]:
    frame = _expense_frame(transactions, names)
    if frame.empty:
        return {}
    totals = frame.groupby("category", sort=False)["amount"].sum()
    return {str(category): float(amount) for category, amount in totals.items()}
