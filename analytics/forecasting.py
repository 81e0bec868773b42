"""Cash-flow projections, burn rate and what-if scenario analytics."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np
import pandas as pd

from core.formatting import format_currency
from core.models import CashFlowProjection, CashFlowTrend, MonthlyData, ScenarioComparison, Transaction, WhatIfScenario
from core.periods import MONTH_LABEL_FORMAT, add_months, month_label, resolve_today

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from config.settings import Settings

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_ASSUMPTIONS",
    "ForecastAssumptions",
    "build_monthly_history",
    "calculate_burn_rate",
    "calculate_growth_trend",
    "calculate_historical_averages",
    "compare_scenarios",
    "generate_cash_flow_projection",
    "scenario_emergency_fund",
    "scenario_expense_reduction",
    "scenario_loan_payoff",
    "scenario_new_expense",
    "scenario_salary_increase",
    "transactions_frame",
]

_FRAME_COLUMNS = ["id", "type", "category_id", "amount", "date"]


@dataclass(frozen=True)
class ForecastAssumptions:
    """Growth assumptions applied linearly per projected month."""

    income_growth_rate: float = 0.02
    expense_inflation_rate: float = 0.01
    history_months: int = 6

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ForecastAssumptions":
        return cls(
            income_growth_rate=settings.income_growth_rate,
            expense_inflation_rate=settings.expense_inflation_rate,
            history_months=settings.history_months,
        )


DEFAULT_ASSUMPTIONS = ForecastAssumptions()


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Return a DataFrame view of ``transactions`` with a datetime ``date`` column."""

    records = [
        {
            "id": txn.id,
            "type": txn.type,
            "category_id": txn.category_id,
            "amount": float(txn.amount),
            "date": txn.date,
        }
        for txn in transactions
    ]
    frame = pd.DataFrame.from_records(records, columns=_FRAME_COLUMNS)
    frame["date"] = pd.to_datetime(frame["date"])
    frame["amount"] = frame["amount"].astype(float)
    return frame


def calculate_historical_averages(
    transactions: Iterable[Transaction] | pd.DataFrame,
    months: int,
    *,
    today: date | None = None,
) -> tuple[float, float]:
    """Return average monthly ``(income, expenses)`` over the trailing ``months``.

    The window runs from ``today`` shifted back ``months`` calendar months up
    to and including ``today``; totals are divided by ``months``.
    """

    if months <= 0:
        return 0.0, 0.0

    frame = _as_frame(transactions)
    end = pd.Timestamp(resolve_today(today))
    start = pd.Timestamp(add_months(end.date(), -months))

    window = frame[(frame["date"] >= start) & (frame["date"] <= end)]
    total_income = float(window.loc[window["type"] == "income", "amount"].sum())
    total_expenses = float(window.loc[window["type"] == "expense", "amount"].sum())
    return total_income / months, total_expenses / months


def build_monthly_history(
    transactions: Iterable[Transaction] | pd.DataFrame,
    months: int,
    *,
    today: date | None = None,
) -> list[MonthlyData]:
    """Return per-calendar-month actuals for the ``months`` ending with today's month.

    ``balance`` is left at zero; history points are only used for trend fitting.
    """

    if months <= 0:
        return []

    frame = _as_frame(transactions)
    current = pd.Period(resolve_today(today), freq="M")
    periods = pd.period_range(end=current, periods=months, freq="M")

    month_keys = frame["date"].dt.to_period("M")

    history: list[MonthlyData] = []
    for period in periods:
        month_rows = frame[month_keys == period]
        income = float(month_rows.loc[month_rows["type"] == "income", "amount"].sum())
        expenses = float(month_rows.loc[month_rows["type"] == "expense", "amount"].sum())
        history.append(
            MonthlyData(
                month=period.strftime(MONTH_LABEL_FORMAT),
                income=income,
                expenses=expenses,
                net_cash_flow=income - expenses,
                balance=0.0,
            )
        )
    return history


def calculate_growth_trend(monthly_data: Sequence[MonthlyData]) -> float:
    """Least-squares slope of net cash flow against the month index."""

    if len(monthly_data) < 2:
        return 0.0

    y = np.array([point.net_cash_flow for point in monthly_data], dtype=float)
    x = np.arange(len(y), dtype=float)
    n = float(len(y))

    denominator = n * float(np.sum(x * x)) - float(np.sum(x)) ** 2
    if denominator == 0:
        return 0.0
    return (n * float(np.sum(x * y)) - float(np.sum(x)) * float(np.sum(y))) / denominator


def calculate_burn_rate(current_balance: float, monthly_expenses: float, monthly_income: float) -> float:
    """Months until ``current_balance`` is exhausted; ``inf`` when not burning cash."""

    net_cash_flow = monthly_income - monthly_expenses
    if net_cash_flow >= 0:
        return math.inf
    return abs(current_balance / net_cash_flow)


def generate_cash_flow_projection(
    transactions: Iterable[Transaction],
    current_balance: float,
    months_to_project: int = 6,
    *,
    today: date | None = None,
    assumptions: ForecastAssumptions = DEFAULT_ASSUMPTIONS,
) -> CashFlowProjection:
    """Project income, expenses and balance for the next ``months_to_project`` months.

    Month ``i`` uses ``avg_income * (1 + growth * i)`` and
    ``avg_expenses * (1 + inflation * i)``; the fitted history slope times
    ``i`` is added to net cash flow before it is accumulated into the
    running balance.
    """

    today = resolve_today(today)
    frame = transactions_frame(transactions)

    history_months = min(assumptions.history_months, months_to_project)
    avg_income, avg_expenses = calculate_historical_averages(frame, history_months, today=today)
    history = build_monthly_history(frame, history_months, today=today)
    growth_trend = calculate_growth_trend(history)
    logger.debug(
        "Projection inputs: avg income %.2f, avg expenses %.2f, slope %.4f over %d months",
        avg_income,
        avg_expenses,
        growth_trend,
        history_months,
    )

    projections: list[MonthlyData] = []
    running_balance = current_balance
    for i in range(1, months_to_project + 1):
        projected_income = avg_income + avg_income * assumptions.income_growth_rate * i
        projected_expenses = avg_expenses + avg_expenses * assumptions.expense_inflation_rate * i
        net_cash_flow = projected_income - projected_expenses + growth_trend * i
        running_balance += net_cash_flow

        projections.append(
            MonthlyData(
                month=month_label(add_months(today, i)),
                income=projected_income,
                expenses=projected_expenses,
                net_cash_flow=net_cash_flow,
                balance=running_balance,
            )
        )

    avg_net_cash_flow = avg_income - avg_expenses
    burn_rate = math.inf
    if avg_net_cash_flow < 0:
        burn_rate = abs(current_balance / avg_net_cash_flow)

    trend: CashFlowTrend = "stable"
    if avg_net_cash_flow > avg_income * 0.1:
        trend = "improving"
    elif avg_net_cash_flow < 0:
        trend = "declining"

    return CashFlowProjection(
        projections=projections,
        average_income=avg_income,
        average_expenses=avg_expenses,
        average_net_cash_flow=avg_net_cash_flow,
        projected_balance=running_balance,
        burn_rate=burn_rate,
        trend=trend,
    )


# What-if scenarios ---------------------------------------------------------
#
# Each scenario shifts the base balance by ``delta * months_elapsed``. The base
# balance is already a running sum, so for a constant monthly delta this is
# the same as re-accumulating the adjusted net cash flow month by month.


def scenario_salary_increase(
    base: CashFlowProjection,
    increase_amount: float,
    start_month: int = 0,
    *,
    currency_symbol: str = "$",
) -> WhatIfScenario:
    projections = [
        replace(
            month,
            income=month.income + increase_amount,
            net_cash_flow=month.net_cash_flow + increase_amount,
            balance=month.balance + increase_amount * (index - start_month + 1),
        )
        if index >= start_month
        else month
        for index, month in enumerate(base.projections)
    ]

    total_impact = increase_amount * (len(projections) - start_month)
    if total_impact > 0:
        recommendation = (
            f"This would improve your financial position by {format_currency(total_impact, currency_symbol)} "
            "over the projection period."
        )
    else:
        recommendation = "Consider negotiating for a raise or exploring additional income sources."

    return WhatIfScenario(
        name="Salary Increase",
        description=f"Impact of {format_currency(increase_amount, currency_symbol)} monthly income increase",
        projections=projections,
        total_impact=total_impact,
        recommendation=recommendation,
    )


def scenario_loan_payoff(
    base: CashFlowProjection,
    loan_payment: float,
    remaining_months: int,
    *,
    currency_symbol: str = "$",
) -> WhatIfScenario:
    """Free up ``loan_payment`` from month index ``remaining_months`` onwards."""

    projections = [
        month
        if index < remaining_months
        else replace(
            month,
            expenses=month.expenses - loan_payment,
            net_cash_flow=month.net_cash_flow + loan_payment,
            balance=month.balance + loan_payment * (index - remaining_months + 1),
        )
        for index, month in enumerate(base.projections)
    ]

    if 0 <= remaining_months < len(projections):
        payoff_month = projections[remaining_months].month
    else:
        payoff_month = "beyond projection period"

    total_impact = max(0.0, loan_payment * (len(projections) - remaining_months))

    return WhatIfScenario(
        name="Loan Payoff",
        description=f"Impact of completing loan payments by {payoff_month}",
        projections=projections,
        total_impact=total_impact,
        recommendation=(
            f"After paying off your loan, you'll free up {format_currency(loan_payment, currency_symbol)}/month, "
            f"improving your position by {format_currency(total_impact, currency_symbol)}."
        ),
    )


def scenario_expense_reduction(
    base: CashFlowProjection,
    reduction_amount: float,
    category: str,
    *,
    currency_symbol: str = "$",
) -> WhatIfScenario:
    projections = [
        replace(
            month,
            expenses=month.expenses - reduction_amount,
            net_cash_flow=month.net_cash_flow + reduction_amount,
            balance=month.balance + reduction_amount * (index + 1),
        )
        for index, month in enumerate(base.projections)
    ]

    total_impact = reduction_amount * len(projections)

    return WhatIfScenario(
        name="Expense Reduction",
        description=f"Impact of reducing {category} by {format_currency(reduction_amount, currency_symbol)}/month",
        projections=projections,
        total_impact=total_impact,
        recommendation=(
            f"Cutting {category} expenses would save you {format_currency(total_impact, currency_symbol)} "
            "over the projection period. Consider alternatives or optimizations."
        ),
    )


def scenario_new_expense(
    base: CashFlowProjection,
    new_expense_amount: float,
    expense_name: str,
    *,
    currency_symbol: str = "$",
) -> WhatIfScenario:
    projections = [
        replace(
            month,
            expenses=month.expenses + new_expense_amount,
            net_cash_flow=month.net_cash_flow - new_expense_amount,
            balance=month.balance - new_expense_amount * (index + 1),
        )
        for index, month in enumerate(base.projections)
    ]

    total_impact = -new_expense_amount * len(projections)
    if total_impact < 0:
        recommendation = (
            f"This expense would reduce your savings by {format_currency(abs(total_impact), currency_symbol)}. "
            "Ensure it fits your budget."
        )
    else:
        recommendation = "Review if this expense aligns with your financial goals."

    return WhatIfScenario(
        name="New Expense",
        description=(
            f"Impact of adding {expense_name} at {format_currency(new_expense_amount, currency_symbol)}/month"
        ),
        projections=projections,
        total_impact=total_impact,
        recommendation=recommendation,
    )


def scenario_emergency_fund(
    base: CashFlowProjection,
    monthly_savings: float,
    target_amount: float,
    *,
    currency_symbol: str = "$",
) -> WhatIfScenario:
    """Set aside ``monthly_savings`` each month until ``target_amount`` is reached."""

    projections: list[MonthlyData] = []
    accumulated = 0.0
    for month in base.projections:
        accumulated += monthly_savings
        contribution = 0.0 if accumulated >= target_amount else monthly_savings
        projections.append(
            replace(
                month,
                expenses=month.expenses + contribution,
                net_cash_flow=month.net_cash_flow - contribution,
                balance=month.balance - min(accumulated, target_amount),
            )
        )

    months_to_target = math.ceil(target_amount / monthly_savings) if monthly_savings > 0 else None
    total_impact = -min(target_amount, monthly_savings * len(projections))

    if months_to_target is None:
        recommendation = "Set a monthly contribution above zero to start building your emergency fund."
    elif months_to_target <= len(projections):
        recommendation = (
            f"You can reach your emergency fund goal in {months_to_target} months. "
            "This provides crucial financial security."
        )
    else:
        recommendation = (
            f"At this rate, it will take {months_to_target} months to reach your goal. "
            "Consider increasing monthly contributions if possible."
        )

    return WhatIfScenario(
        name="Emergency Fund",
        description=(
            f"Building {format_currency(target_amount, currency_symbol)} emergency fund at "
            f"{format_currency(monthly_savings, currency_symbol)}/month"
        ),
        projections=projections,
        total_impact=total_impact,
        recommendation=recommendation,
    )


def compare_scenarios(
    scenarios: Sequence[WhatIfScenario],
    *,
    currency_symbol: str = "$",
) -> ScenarioComparison:
    """Pick the scenarios with the highest and lowest total impact."""

    if not scenarios:
        return ScenarioComparison(best_case=None, worst_case=None, summary="No scenarios to compare.")

    # First occurrence wins ties.
    best = scenarios[0]
    worst = scenarios[0]
    for scenario in scenarios[1:]:
        if scenario.total_impact > best.total_impact:
            best = scenario
        if scenario.total_impact < worst.total_impact:
            worst = scenario

    sign = "+" if best.total_impact >= 0 else ""
    summary = (
        f"Best scenario: {best.name} ({sign}{format_currency(best.total_impact, currency_symbol)}). "
        f"Worst scenario: {worst.name} ({format_currency(worst.total_impact, currency_symbol)})."
    )
    return ScenarioComparison(best_case=best, worst_case=worst, summary=summary)


def _as_frame(transactions: Iterable[Transaction] | pd.DataFrame) -> pd.DataFrame:
    if isinstance(transactions, pd.DataFrame):
        return transactions
    return transactions_frame(transactions)
