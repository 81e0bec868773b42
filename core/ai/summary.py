"""AI coaching summaries layered over the budget, forecast and goal engines."""

from __future__ import annotations

import hashlib
import json
import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Mapping

from openai import APIError, OpenAI

from config.settings import Settings, get_settings
from core.models import (
    BudgetSummary,
    CashFlowProjection,
    GoalAnalytics,
    MonthlyData,
    SummaryContext,
    WhatIfScenario,
)
from prompts import get_prompt_text

logger = logging.getLogger(__name__)

SUMMARY_MODES = ("budget", "forecast", "goals")
DEFAULT_MODE = "budget"
MAX_OUTPUT_TOKENS = 400

__all__ = [
    "AISummaryError",
    "AISummaryRequest",
    "SUMMARY_MODES",
    "build_ai_summary_request",
    "generate_ai_summary",
]


class AISummaryError(RuntimeError):
    """Raised when the AI summary cannot be generated."""


@dataclass(frozen=True, slots=True)
class AISummaryRequest:
    payload: Mapping[str, Any]
    period_label: str
    model: str
    mode: str

    @property
    def cache_key(self) -> str:
        """Stable key for the request; changes whenever the payload does."""

        digest = hashlib.sha256(json.dumps(self.payload, sort_keys=True).encode("utf-8")).hexdigest()
        return f"ai_summary::{self.mode}::{self.model}::{digest[:16]}"


def _json_number(value: float) -> float | None:
    # JSON has no infinity; an infinite burn rate means "never runs out".
    if value is None or math.isinf(value) or math.isnan(value):
        return None
    return round(float(value), 2)


def _format_date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _summarise_months(rows: Iterable[MonthlyData]) -> list[dict[str, Any]]:
    return [
        {
            "month": row.month,
            "income": _json_number(row.income),
            "expenses": _json_number(row.expenses),
            "net_cash_flow": _json_number(row.net_cash_flow),
            "balance": _json_number(row.balance),
        }
        for row in rows
    ]


def _summarise_budget(summary: BudgetSummary | None) -> dict[str, Any]:
    if summary is None:
        return {}

    categories = sorted(summary.category_breakdown, key=lambda row: row.current_spending, reverse=True)
    return {
        "total_income": _json_number(summary.total_income),
        "allocation": {
            "needs": _json_number(summary.allocation.needs),
            "wants": _json_number(summary.allocation.wants),
            "savings": _json_number(summary.allocation.savings),
        },
        "utilization": {
            "needs": _json_number(summary.needs_utilization),
            "wants": _json_number(summary.wants_utilization),
            "savings": _json_number(summary.savings_utilization),
        },
        "is_balanced": summary.is_balanced,
        "top_categories": [
            {
                "category": row.category_name,
                "bucket": row.type,
                "spending": _json_number(row.current_spending),
                "utilization": _json_number(row.utilization_percentage),
            }
            for row in categories[:8]
        ],
        "rule_based_recommendations": list(summary.recommendations),
    }


def _summarise_projection(projection: CashFlowProjection | None) -> dict[str, Any]:
    if projection is None:
        return {}

    return {
        "average_income": _json_number(projection.average_income),
        "average_expenses": _json_number(projection.average_expenses),
        "average_net_cash_flow": _json_number(projection.average_net_cash_flow),
        "projected_balance": _json_number(projection.projected_balance),
        "burn_rate_months": _json_number(projection.burn_rate),
        "trend": projection.trend,
        "months": _summarise_months(projection.projections),
    }


def _summarise_scenarios(scenarios: Iterable[WhatIfScenario]) -> list[dict[str, Any]]:
    return [
        {
            "name": scenario.name,
            "description": scenario.description,
            "total_impact": _json_number(scenario.total_impact),
            "recommendation": scenario.recommendation,
        }
        for scenario in scenarios
    ][:5]


def _summarise_comparisons(rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "category": row["category"],
            "current_amount": _json_number(row["current_amount"]),
            "previous_amount": _json_number(row["previous_amount"]),
            "change_percent": _json_number(row["change_percent"]),
            "trend": row["trend"],
        }
        for row in rows
    ][:8]


def _summarise_goals(analytics: Iterable[GoalAnalytics]) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for entry in analytics:
        goal = entry.goal
        items.append(
            {
                "name": goal.name,
                "goal_type": goal.goal_type,
                "target_amount": _json_number(goal.target_amount),
                "current_amount": _json_number(goal.current_amount),
                "progress_percentage": _json_number(entry.progress_percentage),
                "deadline": _format_date(goal.deadline),
                "required_monthly_savings": _json_number(entry.required_monthly_savings),
                "average_monthly_contribution": _json_number(entry.average_monthly_contribution),
                "is_on_track": entry.is_on_track,
                "health": entry.health,
                "projected_completion_date": _format_date(entry.projected_completion_date),
                "next_milestone": entry.next_milestone.title if entry.next_milestone else None,
            }
        )
    return items


def build_ai_summary_request(
    context: SummaryContext,
    mode: str = DEFAULT_MODE,
    *,
    settings: Settings | None = None,
) -> AISummaryRequest:
    """Turn engine results into the JSON payload sent to the model.

    Unknown modes fall back to ``budget``.
    """

    safe_mode = mode if mode in SUMMARY_MODES else DEFAULT_MODE
    settings = settings or get_settings()
    period_label = context.get("period_label", "")

    payload: dict[str, Any] = {
        "period": period_label,
        "currency": context.get("currency_symbol", settings.currency_symbol),
    }
    if safe_mode == "forecast":
        payload["current_balance"] = _json_number(context.get("current_balance", 0.0))
        payload["projection"] = _summarise_projection(context.get("projection"))
        payload["scenarios"] = _summarise_scenarios(context.get("scenarios", []))
    elif safe_mode == "goals":
        payload["goals"] = _summarise_goals(context.get("goal_analytics", []))
    else:
        payload["budget"] = _summarise_budget(context.get("budget_summary"))
        payload["category_changes"] = _summarise_comparisons(context.get("category_comparisons", []))

    return AISummaryRequest(
        payload=payload,
        period_label=period_label,
        model=settings.openai_model,
        mode=safe_mode,
    )


def _default_client_factory(settings: Settings) -> Callable[[], OpenAI]:
    def factory() -> OpenAI:
        if not settings.openai_api_key:
            raise AISummaryError(
                "Missing OpenAI API key. Set OPENAI_API_KEY or add it to .streamlit/secrets.toml under [openai]."
            )
        return OpenAI(**settings.openai_client_kwargs)

    return factory


def generate_ai_summary(
    context: SummaryContext,
    mode: str = DEFAULT_MODE,
    *,
    client_factory: Callable[[], OpenAI] | None = None,
    settings: Settings | None = None,
) -> list[str]:
    """Ask the model for coaching bullets about ``context``.

    Raises
    ------
    AISummaryError
        When no API key is configured, the API call fails or the reply is empty.
    """

    settings = settings or get_settings()
    request = build_ai_summary_request(context, mode=mode, settings=settings)
    client = (client_factory or _default_client_factory(settings))()

    system_prompt = get_prompt_text(request.mode)
    user_message = (
        f"Review the household {request.mode} data for {request.period_label or 'the current period'}.\n"
        "Guidance: Summarise the key takeaways from the JSON.\n\n"
        "Data (JSON):\n"
        f"{json.dumps(request.payload, ensure_ascii=False, indent=2)}"
    )

    try:
        response = client.chat.completions.create(
            model=request.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=0.2,
        )
    except APIError as exc:
        logger.error("OpenAI request for %s summary failed: %s", request.mode, exc)
        raise AISummaryError(f"OpenAI API error: {exc}") from exc

    try:
        text = response.choices[0].message.content or ""
    except (AttributeError, IndexError) as exc:  # pragma: no cover - unexpected SDK output
        raise AISummaryError("Unexpected response format from OpenAI API") from exc

    bullets = _normalise_output(text)
    if not bullets:
        raise AISummaryError("OpenAI response was empty")

    logger.info("Generated %d %s summary bullets", len(bullets), request.mode)
    return bullets


def _normalise_output(response_text: str) -> list[str]:
    normalized: list[str] = []
    for line in response_text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(("- ", "* ", "• ")):
            stripped = stripped[2:].strip()
        normalized.append(stripped)
    return normalized
