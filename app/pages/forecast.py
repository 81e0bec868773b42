"""Forecast page: cash-flow projection, burn rate and what-if scenarios."""

from __future__ import annotations

from datetime import date

import streamlit as st

from analytics.forecasting import (
    ForecastAssumptions,
    compare_scenarios,
    generate_cash_flow_projection,
    scenario_emergency_fund,
    scenario_expense_reduction,
    scenario_loan_payoff,
    scenario_new_expense,
    scenario_salary_increase,
)
from analytics.spending import detect_low_balance_warning
from app.layout import SidebarSelection, card, render_bullets
from config import Settings
from core.formatting import format_currency, format_months
from core.models import CashFlowProjection, HouseholdData, SummaryContext, WhatIfScenario
from core.periods import month_label
from visualization import build_projection_chart, build_scenario_chart


def _scenario_inputs(projection: CashFlowProjection, symbol: str) -> list[WhatIfScenario]:
    with st.sidebar.expander("What-if inputs", expanded=False):
        raise_amount = st.number_input("Monthly raise", value=round(projection.average_income * 0.1, -1), step=50.0)
        cut_amount = st.number_input("Monthly spending cut", value=200.0, step=25.0)
        new_expense = st.number_input("New monthly expense", value=450.0, step=25.0)
        loan_payment = st.number_input("Loan payment", value=300.0, step=25.0)
        loan_months = int(st.number_input("Loan months remaining", value=3, min_value=0, step=1))
        fund_savings = st.number_input("Emergency fund saving", value=250.0, step=25.0)

    fund_target = max(projection.average_expenses * 3, 1.0)
    return [
        scenario_salary_increase(projection, raise_amount, currency_symbol=symbol),
        scenario_expense_reduction(projection, cut_amount, "discretionary spending", currency_symbol=symbol),
        scenario_new_expense(projection, new_expense, "Car payment", currency_symbol=symbol),
        scenario_loan_payoff(projection, loan_payment, loan_months, currency_symbol=symbol),
        scenario_emergency_fund(projection, fund_savings, fund_target, currency_symbol=symbol),
    ]


def build_context(
    data: HouseholdData,
    selection: SidebarSelection,
    settings: Settings,
    *,
    start: date,
    end: date,
    today: date,
) -> SummaryContext:
    projection = generate_cash_flow_projection(
        data.transactions,
        selection.current_balance,
        selection.projection_months,
        today=today,
        assumptions=ForecastAssumptions.from_settings(settings),
    )
    return {
        "period_label": month_label(today),
        "currency_symbol": settings.currency_symbol,
        "current_balance": selection.current_balance,
        "projection": projection,
        "scenarios": _scenario_inputs(projection, settings.currency_symbol),
    }


def fallback_insights(context: SummaryContext) -> list[str]:
    bullets = [scenario.recommendation for scenario in context.get("scenarios", [])]
    comparison = compare_scenarios(context.get("scenarios", []), currency_symbol=context.get("currency_symbol", "$"))
    return [comparison.summary, *bullets]


def render_page(
    data: HouseholdData,
    context: SummaryContext,
    ai_insights: list[str],
    settings: Settings,
    *,
    today: date,
) -> None:
    symbol = settings.currency_symbol
    projection = context["projection"]
    scenarios = context.get("scenarios", [])

    left, right = st.columns([1, 2], gap="medium")
    with left:
        with card("Cash flow", suffix=projection.trend.title()):
            st.metric("Average income", format_currency(projection.average_income, symbol))
            st.metric("Average expenses", format_currency(projection.average_expenses, symbol))
            st.metric(
                "Projected balance",
                format_currency(projection.projected_balance, symbol),
                format_currency(projection.average_net_cash_flow, symbol),
            )
            st.caption(f"Burn rate: {format_months(projection.burn_rate)}")

            warning = detect_low_balance_warning(
                context.get("current_balance", 0.0),
                projection.average_expenses,
                currency_symbol=symbol,
            )
            if warning is not None:
                st.warning(warning["message"])
    with right:
        with card("Projection", suffix=f"{len(projection.projections)} months"):
            st.plotly_chart(build_projection_chart(projection, symbol), use_container_width=True)

    left, right = st.columns([3, 2], gap="medium")
    with left:
        with card("What if", suffix="Scenarios"):
            st.plotly_chart(build_scenario_chart(projection, scenarios, symbol), use_container_width=True)
            st.caption(compare_scenarios(scenarios, currency_symbol=symbol).summary)
    with right:
        with card("Coaching", suffix="AI"):
            render_bullets(ai_insights)
