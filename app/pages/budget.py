"""Budget page: 50/30/20 allocation, category spend, spending alerts and the period report."""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from analytics.allocation import CategoryKeywords, generate_budget_summary
from analytics.reports import calculate_category_comparisons, calculate_income_statement
from analytics.spending import detect_anomalies, generate_insights
from app.layout import SidebarSelection, card, render_bullets
from config import Settings
from core.formatting import format_currency, format_percentage
from core.models import HouseholdData, SummaryContext
from core.periods import add_months, month_label
from visualization import build_allocation_chart, build_category_spend_chart


def build_context(
    data: HouseholdData,
    selection: SidebarSelection,
    settings: Settings,
    *,
    start: date,
    end: date,
    today: date,
) -> SummaryContext:
    total_income = sum(
        txn.amount for txn in data.transactions if txn.type == "income" and start <= txn.date <= end
    )
    summary = generate_budget_summary(
        data.transactions,
        data.categories,
        total_income,
        start,
        end,
        keywords=CategoryKeywords.from_settings(settings),
        currency_symbol=settings.currency_symbol,
    )

    current = [txn for txn in data.transactions if start <= txn.date <= end]
    previous_start = add_months(start, -1)
    previous = [txn for txn in data.transactions if previous_start <= txn.date < start]
    return {
        "period_label": month_label(start),
        "currency_symbol": settings.currency_symbol,
        "budget_summary": summary,
        "income_statement": calculate_income_statement(current, previous, data.categories),
        "category_comparisons": calculate_category_comparisons(current, previous, data.categories),
    }


def fallback_insights(context: SummaryContext) -> list[str]:
    summary = context.get("budget_summary")
    return list(summary.recommendations) if summary is not None else []


def _render_utilization(context: SummaryContext, symbol: str) -> None:
    summary = context["budget_summary"]
    st.metric("Income this month", format_currency(summary.total_income, symbol))
    cols = st.columns(3)
    cols[0].metric("Needs", format_percentage(summary.needs_utilization), format_currency(summary.allocation.needs, symbol))
    cols[1].metric("Wants", format_percentage(summary.wants_utilization), format_currency(summary.allocation.wants, symbol))
    cols[2].metric(
        "Savings", format_percentage(summary.savings_utilization), format_currency(summary.allocation.savings, symbol)
    )
    st.caption("Balanced" if summary.is_balanced else "Outside the 50/30/20 guideline")


def _render_alerts(data: HouseholdData, symbol: str, today: date) -> None:
    period_start = today.replace(day=1)
    previous_start = add_months(period_start, -1)
    current = [txn for txn in data.transactions if period_start <= txn.date <= today]
    previous = [txn for txn in data.transactions if previous_start <= txn.date < period_start]
    history = [txn for txn in data.transactions if txn.date < period_start]

    anomalies = detect_anomalies(current, history, data.categories, currency_symbol=symbol)
    insights = generate_insights(current, previous, categories=data.categories, currency_symbol=symbol)

    if not anomalies and not insights:
        st.info("Nothing unusual this month.")
        return

    for anomaly in anomalies[:5]:
        txn = anomaly["transaction"]
        st.markdown(
            f"**{anomaly['severity'].title()}** {txn.date:%d %b} {format_currency(txn.amount, symbol)}: "
            f"{anomaly['reason']}"
        )
    render_bullets(f"<strong>{insight['title']}</strong> {insight['description']}" for insight in insights[:5])


def _render_report(context: SummaryContext, symbol: str) -> None:
    statement = context.get("income_statement")
    comparisons = context.get("category_comparisons", [])
    if statement is None:
        st.info("No report for this period.")
        return

    cols = st.columns(3)
    cols[0].metric(
        "Income", format_currency(statement["revenue"]["total"], symbol), f"{statement['revenue']['growth']:+.1f}%"
    )
    cols[1].metric(
        "Expenses",
        format_currency(statement["expenses"]["total"], symbol),
        f"{statement['expenses']['growth']:+.1f}%",
        delta_color="inverse",
    )
    cols[2].metric("Net margin", format_percentage(statement["net_income"]["margin"]))

    if comparisons:
        frame = pd.DataFrame(comparisons).rename(
            columns={
                "category": "Category",
                "current_amount": "This period",
                "previous_amount": "Previous",
                "change": "Change",
                "change_percent": "Change %",
                "trend": "Trend",
            }
        )
        st.dataframe(frame, hide_index=True, use_container_width=True)


def render_page(
    data: HouseholdData,
    context: SummaryContext,
    ai_insights: list[str],
    settings: Settings,
    *,
    today: date,
) -> None:
    symbol = settings.currency_symbol
    summary = context["budget_summary"]

    left, right = st.columns([1, 2], gap="medium")
    with left:
        with card(context["period_label"], suffix="50/30/20"):
            _render_utilization(context, symbol)
    with right:
        with card("Allocated vs spent"):
            st.plotly_chart(build_allocation_chart(summary, symbol), use_container_width=True)

    left, right = st.columns([3, 2], gap="medium")
    with left:
        with card("Spend by category"):
            st.plotly_chart(build_category_spend_chart(summary, symbol), use_container_width=True)
    with right:
        with card("Coaching", suffix="AI"):
            render_bullets(ai_insights)

    with card("Spending alerts", suffix="This month"):
        _render_alerts(data, symbol, today)

    with card("Month over month", suffix="Report"):
        _render_report(context, symbol)