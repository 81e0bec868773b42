"""Shared layout primitives for the household finance Streamlit app."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable

import pandas as pd
import streamlit as st


@dataclass(frozen=True)
class NavigationLink:
    slug: str
    label: str
    enabled: bool = True


NAV_LINKS: tuple[NavigationLink, ...] = (
    NavigationLink("budget", "Budget", True),
    NavigationLink("forecast", "Forecast", True),
    NavigationLink("goals", "Goals", True),
)
DEFAULT_PAGE = "budget"


@dataclass(frozen=True)
class SidebarSelection:
    month_key: str | None
    projection_months: int
    current_balance: float


def inject_css() -> None:
    """Inject card and navigation styling into the Streamlit app."""

    st.markdown(
        """
        <style>
          :root {
            --gap: 16px;
            --radius: 12px;
            --card-bg: #FFFFFF;
            --border: #E6EAF2;
            --shadow: 0 1px 2px rgba(16, 24, 40, 0.05), 0 1px 3px rgba(16, 24, 40, 0.06);
          }

          body, [data-testid="stAppViewContainer"] > .main {
            background: #F4F6FB;
          }

          .block-container {
            max-width: 1200px;
            padding-top: 2.5rem;
            padding-bottom: 4rem;
          }

          .ft-nav {
            display: flex;
            align-items: center;
            justify-content: space-between;
            gap: 2rem;
            padding: 0.9rem 0;
          }

          .ft-nav__brand {
            font-size: 1.5rem;
            font-weight: 700;
            color: #0B3FD6;
          }

          .ft-nav__links {
            display: flex;
            gap: 1.8rem;
          }

          .ft-nav__link,
          .ft-nav__link:visited {
            font-weight: 600;
            color: #5C6478;
            text-decoration: none;
          }

          .ft-nav__link.is-active {
            color: #1D4ED8;
            border-bottom: 3px solid #1D4ED8;
          }

          .ft-card-anchor {
            display: none;
          }

          [data-testid="stVerticalBlock"]:has(> .ft-card-anchor) {
            background: var(--card-bg);
            border: 1px solid var(--border);
            border-radius: var(--radius);
            box-shadow: var(--shadow);
            padding: 16px;
            margin-bottom: var(--gap);
          }

          .ft-card__head {
            display: flex;
            align-items: center;
            justify-content: space-between;
            font-weight: 600;
            color: #111827;
          }

          .ft-chip {
            font-size: 12px;
            padding: 2px 8px;
            border-radius: 999px;
            border: 1px solid #D6DEFF;
            background: #F0F4FF;
            color: #3346FF;
          }

          .ft-insights {
            margin: 0;
            padding-left: 1.1rem;
            color: #4B5563;
          }
        </style>
        """,
        unsafe_allow_html=True,
    )


@contextmanager
def card(title: str, suffix: str | None = None):
    """Render content inside a bordered dashboard card."""

    chip_html = f'<span class="ft-chip">{suffix}</span>' if suffix else ""
    with st.container():
        st.markdown('<div class="ft-card-anchor"></div>', unsafe_allow_html=True)
        st.markdown(
            f'<div class="ft-card__head"><span>{title}</span>{chip_html}</div>',
            unsafe_allow_html=True,
        )
        yield


def render_bullets(items: Iterable[str]) -> None:
    markup = "".join(f"<li>{item}</li>" for item in items)
    st.markdown(f"<ul class='ft-insights'>{markup}</ul>", unsafe_allow_html=True)


def render_navbar(active_page: str, month_key: str | None) -> None:
    link_markup: list[str] = []
    for link in NAV_LINKS:
        if not link.enabled:
            continue
        css_class = "ft-nav__link" + (" is-active" if link.slug == active_page else "")
        href = f"?page={link.slug}"
        if month_key:
            href += f"&month={month_key}"
        link_markup.append(f'<a class="{css_class}" href="{href}" target="_self">{link.label}</a>')

    st.markdown(
        f"""
        <nav class="ft-nav">
            <div class="ft-nav__brand">Household Finance</div>
            <div class="ft-nav__links">{''.join(link_markup)}</div>
        </nav>
        """,
        unsafe_allow_html=True,
    )


def render_sidebar_filters(
    month_options: list[str],
    selected_month: str | None,
    *,
    default_projection_months: int,
    default_balance: float,
) -> SidebarSelection:
    """Render month, horizon and balance inputs and return the chosen values."""

    with st.sidebar:
        st.markdown("### Filters")
        chosen_month: str | None = None
        if month_options:
            candidate = selected_month if selected_month in month_options else month_options[-1]
            chosen_month = st.selectbox(
                "Month",
                month_options,
                index=month_options.index(candidate),
                key="month_selector",
                format_func=lambda key: pd.Period(key, freq="M").strftime("%B %Y"),
            )
        else:
            st.info("No transactions available yet.")

        projection_months = int(
            st.slider("Months to project", min_value=1, max_value=24, value=default_projection_months)
        )
        current_balance = float(
            st.number_input("Current balance", value=float(round(default_balance, 2)), step=100.0)
        )

    return SidebarSelection(
        month_key=chosen_month,
        projection_months=projection_months,
        current_balance=current_balance,
    )


def determine_active_page(valid_pages: Iterable[str]) -> str:
    """Resolve the active page from the query params, keeping the URL in sync."""

    raw_page = st.query_params.get("page", st.session_state.get("active_page", DEFAULT_PAGE))
    if isinstance(raw_page, list):
        raw_page = raw_page[0] if raw_page else DEFAULT_PAGE

    page = raw_page if raw_page in set(valid_pages) else DEFAULT_PAGE
    st.session_state["active_page"] = page
    if st.query_params.get("page") != page:
        st.query_params["page"] = page
    return page


__all__ = [
    "DEFAULT_PAGE",
    "NAV_LINKS",
    "NavigationLink",
    "SidebarSelection",
    "card",
    "determine_active_page",
    "inject_css",
    "render_bullets",
    "render_navbar",
    "render_sidebar_filters",
]
