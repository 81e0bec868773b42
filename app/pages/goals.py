"""Goals page: progress, pace and auto-contribution schedule per savings goal."""

from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from analytics.contributions import build_contribution_schedule
from analytics.forecasting import calculate_historical_averages
from analytics.goals import (
    calculate_goal_analytics,
    calculate_total_savings,
    get_active_goals,
    get_goal_type_info,
    sort_by_priority,
    suggest_goals,
)
from app.layout import SidebarSelection, card, render_bullets
from config import Settings
from core.formatting import format_currency
from core.models import GoalAnalytics, HouseholdData, SummaryContext
from core.periods import month_label
from visualization import build_goal_progress_chart


def build_context(
    data: HouseholdData,
    selection: SidebarSelection,
    settings: Settings,
    *,
    start: date,
    end: date,
    today: date,
) -> SummaryContext:
    analytics = [
        calculate_goal_analytics(
            goal,
            data.milestones_for(goal.id),
            data.contributions_for(goal.id),
            today=today,
            currency_symbol=settings.currency_symbol,
        )
        for goal in sort_by_priority(data.goals)
    ]
    return {
        "period_label": month_label(today),
        "currency_symbol": settings.currency_symbol,
        "goal_analytics": analytics,
    }


def fallback_insights(context: SummaryContext) -> list[str]:
    return [entry.recommendation for entry in context.get("goal_analytics", [])]


def _average_monthly_income(data: HouseholdData, today: date) -> float:
    income, _ = calculate_historical_averages(data.transactions, 3, today=today)
    return income


def _render_goal(entry: GoalAnalytics, symbol: str) -> None:
    goal = entry.goal
    info = get_goal_type_info(goal.goal_type)
    with card(goal.name, suffix=entry.health.title()):
        st.progress(min(entry.progress_percentage, 100.0) / 100)
        cols = st.columns(3)
        cols[0].metric("Saved", format_currency(goal.current_amount, symbol))
        cols[1].metric("Remaining", format_currency(entry.remaining_amount, symbol))
        cols[2].metric("Needed / month", format_currency(entry.required_monthly_savings, symbol))

        details = [info.label]
        if goal.deadline is not None:
            details.append(f"due {goal.deadline:%d %b %Y}")
        if entry.projected_completion_date is not None:
            details.append(f"on pace for {entry.projected_completion_date:%b %Y}")
        if entry.next_milestone is not None:
            details.append(f"next milestone: {entry.next_milestone.title}")
        st.caption(" · ".join(details))
        st.write(entry.recommendation)
        if info.tips:
            with st.expander("Tips"):
                render_bullets(info.tips)


def render_page(
    data: HouseholdData,
    context: SummaryContext,
    ai_insights: list[str],
    settings: Settings,
    *,
    today: date,
) -> None:
    symbol = settings.currency_symbol
    analytics = context.get("goal_analytics", [])
    totals = calculate_total_savings(get_active_goals(data.goals))

    left, right = st.columns([1, 2], gap="medium")
    with left:
        with card("All goals", suffix=f"{totals.progress_percentage:.0f}%"):
            st.metric("Saved", format_currency(totals.current_amount, symbol))
            st.metric("Target", format_currency(totals.target_amount, symbol))
    with right:
        with card("Progress"):
            st.plotly_chart(build_goal_progress_chart(analytics), use_container_width=True)

    for entry in analytics:
        _render_goal(entry, symbol)

    last_auto = {goal.id: goal.last_contribution_date for goal in data.goals if goal.last_contribution_date}
    schedule = build_contribution_schedule(data.goals, last_auto, today=today)
    with card("Auto-contributions", suffix="Upcoming"):
        if schedule:
            st.dataframe(pd.DataFrame(schedule), hide_index=True, use_container_width=True)
        else:
            st.info("No goals have auto-contribute enabled.")

    monthly_income = _average_monthly_income(data, today)
    suggestions = suggest_goals(monthly_income or None, data.goals)
    if suggestions:
        with card("Suggested goals"):
            render_bullets(
                f"<strong>{get_goal_type_info(item['type']).label}</strong> "
                f"{format_currency(item['recommended_amount'], symbol)} over {item['timeframe_months']} months. "
                f"{item['reason']}"
                for item in suggestions
            )

    with card("Coaching", suffix="AI"):
        render_bullets(ai_insights)
