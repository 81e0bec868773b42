"""Household finance dashboard: budget, forecast and goal pages."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable

import pandas as pd
import streamlit as st

from app.layout import (
    NAV_LINKS,
    determine_active_page,
    inject_css,
    render_navbar,
    render_sidebar_filters,
)
from app.pages import budget, forecast, goals
from config import Settings, get_settings
from core import (
    AISummaryError,
    DataLoadError,
    HouseholdData,
    SummaryContext,
    build_ai_summary_request,
    configure_logging,
    generate_ai_summary,
    load_household_data,
)
from core.periods import add_months
from data.synth import generate_household_data

logger = logging.getLogger(__name__)

SYNTH_SEED = 7

PAGES = {
    "budget": budget,
    "forecast": forecast,
    "goals": goals,
}


@st.cache_data(show_spinner=False)
def _load_household(data_dir: str | None, today: date) -> HouseholdData:
    """Load the household from ``data_dir`` or fall back to the synthetic one."""

    if data_dir:
        try:
            return load_household_data(data_dir)
        except (FileNotFoundError, DataLoadError) as exc:
            logger.warning("Falling back to synthetic data: %s", exc)
    return generate_household_data(months=9, seed=SYNTH_SEED, end_date=today)


def _month_options(data: HouseholdData) -> list[str]:
    if not data.transactions:
        return []
    periods = pd.PeriodIndex([txn.date for txn in data.transactions], freq="M").unique().sort_values()
    return [str(period) for period in periods]


def _period_bounds(month_key: str | None, today: date) -> tuple[date, date]:
    if month_key is None:
        start = today.replace(day=1)
    else:
        start = pd.Period(month_key, freq="M").start_time.date()
    end = add_months(start, 1) - timedelta(days=1)
    return start, min(end, today)


def _estimate_balance(data: HouseholdData) -> float:
    income = sum(txn.amount for txn in data.transactions if txn.type == "income")
    expenses = sum(txn.amount for txn in data.transactions if txn.type == "expense")
    return max(0.0, income - expenses)


def main() -> None:
    """Application entrypoint for the household finance dashboard."""

    st.set_page_config(
        page_title="Household Finance",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    settings = get_settings()
    configure_logging(settings.log_level)
    inject_css()

    today = date.today()
    active_page = determine_active_page(link.slug for link in NAV_LINKS if link.enabled)
    data = _load_household(str(settings.data_dir) if settings.data_dir else None, today)

    selection = render_sidebar_filters(
        _month_options(data),
        st.session_state.get("month_selector"),
        default_projection_months=settings.projection_months,
        default_balance=_estimate_balance(data),
    )
    render_navbar(active_page, selection.month_key)

    start, end = _period_bounds(selection.month_key, today)
    page = PAGES[active_page]
    context = page.build_context(data, selection, settings, start=start, end=end, today=today)
    insights = _resolve_ai_summary(context, active_page, settings, fallback=lambda: page.fallback_insights(context))
    page.render_page(data, context, insights, settings, today=today)


def _resolve_ai_summary(
    context: SummaryContext,
    mode: str,
    settings: Settings,
    *,
    fallback: Callable[[], list[str]],
) -> list[str]:
    cache_key = build_ai_summary_request(context, mode, settings=settings).cache_key
    if cache_key in st.session_state:
        return st.session_state[cache_key]

    with st.spinner("Generating AI summary…"):
        try:
            insights = generate_ai_summary(context, mode=mode, settings=settings)
        except AISummaryError as exc:
            st.info(f"AI summary unavailable: {exc}")
            return fallback()

    st.session_state[cache_key] = insights
    return insights


__all__ = ["main"]


if __name__ == "__main__":
    main()
