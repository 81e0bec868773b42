"""Plotly chart builders for the budget, forecast and goals pages."""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.graph_objects as go

from core.models import BudgetSummary, CashFlowProjection, GoalAnalytics, WhatIfScenario

from .theme import theme_tokens

TOKENS = theme_tokens()

__all__ = [
    "build_allocation_chart",
    "build_category_spend_chart",
    "build_goal_progress_chart",
    "build_projection_chart",
    "build_scenario_chart",
]


def _empty_plotly_figure(message: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(
        annotations=[
            dict(
                text=message,
                x=0.5,
                y=0.5,
                xref="paper",
                yref="paper",
                showarrow=False,
                font=dict(color=TOKENS.neutral_grey, size=14, family=TOKENS.label_font),
            )
        ],
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        margin=dict(l=0, r=0, t=20, b=0),
        plot_bgcolor="rgba(0,0,0,0)",
        paper_bgcolor="rgba(0,0,0,0)",
    )
    return fig


def _apply_layout(fig: go.Figure, *, yaxis_title: str, currency_symbol: str | None = None) -> go.Figure:
    fig.update_layout(
        title="",
        yaxis_title=yaxis_title,
        margin=dict(l=0, r=0, t=20, b=0),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1.0),
        xaxis=dict(showgrid=False),
        yaxis=dict(
            showgrid=True,
            gridcolor=TOKENS.neutral_background,
            zeroline=False,
            tickprefix=currency_symbol or "",
        ),
        font=dict(family=TOKENS.label_font, size=TOKENS.label_size, color=TOKENS.label_color),
        plot_bgcolor="rgba(0,0,0,0)",
        paper_bgcolor="rgba(0,0,0,0)",
    )
    return fig


def build_allocation_chart(summary: BudgetSummary, currency_symbol: str = "$") -> go.Figure:
    """Grouped bars of allocated budget against actual spend per bucket."""

    if summary.total_income <= 0:
        return _empty_plotly_figure("Add income to see your 50/30/20 allocation.")

    spent: dict[str, float] = {"needs": 0.0, "wants": 0.0, "savings": 0.0}
    for row in summary.category_breakdown:
        spent[row.type] += row.current_spending

    buckets = list(spent)
    hover = f"%{{x}}<br>{currency_symbol}%{{y:,.2f}}<extra></extra>"

    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=[bucket.title() for bucket in buckets],
            y=[summary.allocation.for_bucket(bucket) for bucket in buckets],
            name="Allocated",
            marker=dict(color=TOKENS.neutral_background),
            hovertemplate=hover,
        )
    )
    fig.add_trace(
        go.Bar(
            x=[bucket.title() for bucket in buckets],
            y=[spent[bucket] for bucket in buckets],
            name="Spent",
            marker=dict(color=[TOKENS.bucket_color(bucket) for bucket in buckets]),
            hovertemplate=hover,
        )
    )
    fig.update_layout(barmode="group")
    return _apply_layout(fig, yaxis_title="Amount", currency_symbol=currency_symbol)


def build_category_spend_chart(summary: BudgetSummary, currency_symbol: str = "$") -> go.Figure:
    if not summary.category_breakdown:
        return _empty_plotly_figure("No expenses recorded for this period.")

    df = pd.DataFrame(
        {
            "category": [row.category_name for row in summary.category_breakdown],
            "bucket": [row.type for row in summary.category_breakdown],
            "spend": [row.current_spending for row in summary.category_breakdown],
        }
    ).sort_values("spend")

    fig = go.Figure(
        go.Bar(
            x=df["spend"],
            y=df["category"],
            orientation="h",
            marker=dict(color=[TOKENS.bucket_color(bucket) for bucket in df["bucket"]]),
            customdata=df["bucket"],
            hovertemplate=f"%{{y}} (%{{customdata}})<br>{currency_symbol}%{{x:,.2f}}<extra></extra>",
        )
    )
    fig.update_layout(xaxis=dict(tickprefix=currency_symbol))
    return _apply_layout(fig, yaxis_title="")


def build_projection_chart(projection: CashFlowProjection, currency_symbol: str = "$") -> go.Figure:
    """Income and expense bars with the running balance as a line."""

    if not projection.projections:
        return _empty_plotly_figure("No projection available.")

    months = [row.month for row in projection.projections]
    hover = f"%{{x}}<br>{currency_symbol}%{{y:,.2f}}<extra></extra>"

    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=months,
            y=[row.income for row in projection.projections],
            name="Income",
            marker=dict(color=TOKENS.positive_green),
            hovertemplate=hover,
        )
    )
    fig.add_trace(
        go.Bar(
            x=months,
            y=[row.expenses for row in projection.projections],
            name="Expenses",
            marker=dict(color=TOKENS.negative_red),
            hovertemplate=hover,
        )
    )
    fig.add_trace(
        go.Scatter(
            x=months,
            y=[row.balance for row in projection.projections],
            mode="lines+markers",
            name="Balance",
            line=dict(color=TOKENS.brand_blue, width=3, shape="spline", smoothing=0.4),
            marker=dict(size=7, color=TOKENS.brand_blue, line=dict(color=TOKENS.neutral_white, width=1.5)),
            hovertemplate=hover,
        )
    )
    fig.update_layout(barmode="group", hovermode="x unified")
    return _apply_layout(fig, yaxis_title="Amount", currency_symbol=currency_symbol)


def build_scenario_chart(
    base: CashFlowProjection,
    scenarios: Sequence[WhatIfScenario],
    currency_symbol: str = "$",
) -> go.Figure:
    """Projected balance under the base case and each what-if scenario."""

    if not base.projections:
        return _empty_plotly_figure("No projection available.")

    hover = f"%{{fullData.name}}<br>%{{x}}<br>{currency_symbol}%{{y:,.2f}}<extra></extra>"
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=[row.month for row in base.projections],
            y=[row.balance for row in base.projections],
            mode="lines",
            name="Current path",
            line=dict(color=TOKENS.neutral_grey, width=2, dash="dash"),
            hovertemplate=hover,
        )
    )
    for scenario in scenarios:
        color = TOKENS.positive_green if scenario.total_impact >= 0 else TOKENS.negative_red
        fig.add_trace(
            go.Scatter(
                x=[row.month for row in scenario.projections],
                y=[row.balance for row in scenario.projections],
                mode="lines+markers",
                name=scenario.name,
                line=dict(color=color, width=2),
                hovertemplate=hover,
            )
        )
    fig.update_layout(hovermode="x unified")
    return _apply_layout(fig, yaxis_title="Balance", currency_symbol=currency_symbol)


def build_goal_progress_chart(analytics: Sequence[GoalAnalytics]) -> go.Figure:
    if not analytics:
        return _empty_plotly_figure("No savings goals yet.")

    names = [entry.goal.name for entry in analytics]
    progress = [min(entry.progress_percentage, 100.0) for entry in analytics]

    fig = go.Figure()
    fig.add_trace(
        go.Bar(
            x=[100.0] * len(names),
            y=names,
            orientation="h",
            marker=dict(color=TOKENS.neutral_background),
            hoverinfo="skip",
            showlegend=False,
        )
    )
    fig.add_trace(
        go.Bar(
            x=progress,
            y=names,
            orientation="h",
            marker=dict(color=[TOKENS.health_color(entry.health) for entry in analytics]),
            text=[f"{entry.progress_percentage:.0f}%" for entry in analytics],
            textposition="inside",
            customdata=[entry.health for entry in analytics],
            hovertemplate="%{y}<br>%{x:.1f}% (%{customdata})<extra></extra>",
            showlegend=False,
        )
    )
    fig.update_layout(barmode="overlay", xaxis=dict(range=[0, 100], ticksuffix="%"))
    return _apply_layout(fig, yaxis_title="")
