"""Tests for the AI coaching summary request builder and client wiring."""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import date
from types import SimpleNamespace
from typing import cast

import httpx
import pytest
import streamlit as st
from openai import APIError, OpenAI

from analytics.goals import calculate_goal_analytics
from analytics.reports import calculate_category_comparisons
from config import Settings
from config.settings import get_settings
from core.ai.summary import AISummaryError, build_ai_summary_request, generate_ai_summary
from core.models import CashFlowProjection, MonthlyData, SavingsGoal, SummaryContext, Transaction


@pytest.fixture(autouse=True)
def clear_streamlit_secrets(monkeypatch):
    """Provide an empty secrets mapping so tests don't rely on Streamlit runtime."""

    monkeypatch.setattr(st, "secrets", {}, raising=False)
    for name in ("OPENAI_API_KEY", "FINTRACK_OPENAI_API_KEY", "FINTRACK_OPENAI_MODEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings() -> Settings:
    return Settings(openai_api_key="sk-test", openai_model="test-model")


@pytest.fixture()
def forecast_context() -> SummaryContext:
    projection = CashFlowProjection(
        projections=[MonthlyData("Jul 2024", 3000, 2000, 1000, 2000)],
        average_income=3000,
        average_expenses=2000,
        average_net_cash_flow=1000,
        projected_balance=2000,
        burn_rate=math.inf,
        trend="improving",
    )
    return {
        "period_label": "June 2024",
        "currency_symbol": "$",
        "current_balance": 1000.0,
        "projection": projection,
        "scenarios": [],
    }


class DummyClient:
    """Minimal stand-in for ``OpenAI`` exposing ``chat.completions.create``."""

    def __init__(self, content: str | None = "- Bullet", error: Exception | None = None):
        self.calls: list[dict[str, object]] = []
        self._content = content
        self._error = error
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs: object):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self._content))])


def test_forecast_request_replaces_infinite_burn_rate(forecast_context, settings):
    request = build_ai_summary_request(forecast_context, "forecast", settings=settings)

    assert request.mode == "forecast"
    assert request.model == "test-model"
    assert request.period_label == "June 2024"
    assert request.payload["current_balance"] == 1000.0
    assert request.payload["projection"]["burn_rate_months"] is None
    assert request.payload["projection"]["months"][0]["month"] == "Jul 2024"
    assert request.payload["scenarios"] == []
    assert "budget" not in request.payload


def test_goals_request_summarises_each_goal(settings):
    goal = SavingsGoal(id="g", name="Car", target_amount=5000, current_amount=1250, deadline=date(2025, 1, 1))
    context: SummaryContext = {
        "period_label": "June 2024",
        "goal_analytics": [calculate_goal_analytics(goal, today=date(2024, 6, 1))],
    }

    request = build_ai_summary_request(context, "goals", settings=settings)

    (entry,) = request.payload["goals"]
    assert entry["name"] == "Car"
    assert entry["progress_percentage"] == 25.0
    assert entry["deadline"] == "2025-01-01"


def test_unknown_mode_falls_back_to_budget(settings):
    request = build_ai_summary_request({"period_label": "June 2024"}, "horoscope", settings=settings)

    assert request.mode == "budget"
    assert request.payload["budget"] == {}


def test_cache_key_tracks_forecast_inputs(forecast_context, settings):
    key = build_ai_summary_request(forecast_context, "forecast", settings=settings).cache_key

    assert build_ai_summary_request(dict(forecast_context), "forecast", settings=settings).cache_key == key

    richer: SummaryContext = {**forecast_context, "current_balance": 2500.0}
    assert build_ai_summary_request(richer, "forecast", settings=settings).cache_key != key

    projection = forecast_context["projection"]
    longer = replace(
        projection,
        projections=[*projection.projections, MonthlyData("Aug 2024", 3000, 2000, 1000, 3000)],
    )
    extended: SummaryContext = {**forecast_context, "projection": longer}
    assert build_ai_summary_request(extended, "forecast", settings=settings).cache_key != key


def test_budget_request_lists_category_changes(settings):
    current = [Transaction(id="c", type="expense", category_id=None, amount=150, date=date(2024, 6, 3))]
    previous = [Transaction(id="p", type="expense", category_id=None, amount=100, date=date(2024, 5, 3))]
    context: SummaryContext = {
        "period_label": "June 2024",
        "category_comparisons": calculate_category_comparisons(current, previous),
    }

    request = build_ai_summary_request(context, "budget", settings=settings)

    assert request.payload["category_changes"] == [
        {
            "category": "Uncategorized",
            "current_amount": 150.0,
            "previous_amount": 100.0,
            "change_percent": 50.0,
            "trend": "up",
        }
    ]


def test_generate_ai_summary_uses_injected_client(forecast_context, settings):
    client = DummyClient(content="- First\n\n* Second\n• Third")

    result = generate_ai_summary(
        forecast_context,
        "forecast",
        client_factory=lambda: cast(OpenAI, client),
        settings=settings,
    )

    assert result == ["First", "Second", "Third"]
    (call,) = client.calls
    assert call["model"] == "test-model"
    messages = call["messages"]
    assert "June 2024" in messages[1]["content"]  # type: ignore[index]


def test_empty_reply_raises(forecast_context, settings):
    client = DummyClient(content="   ")

    with pytest.raises(AISummaryError, match="empty"):
        generate_ai_summary(forecast_context, "forecast", client_factory=lambda: cast(OpenAI, client), settings=settings)


def test_api_error_is_wrapped(forecast_context, settings):
    error = APIError("boom", request=httpx.Request("POST", "https://api.openai.test/v1"), body=None)
    client = DummyClient(error=error)

    with pytest.raises(AISummaryError, match="OpenAI API error"):
        generate_ai_summary(forecast_context, "forecast", client_factory=lambda: cast(OpenAI, client), settings=settings)


def test_missing_api_key_raises(forecast_context):
    with pytest.raises(AISummaryError, match="Missing OpenAI API key"):
        generate_ai_summary(forecast_context, "forecast", settings=Settings(openai_api_key=None))


def test_settings_read_openai_secrets(monkeypatch):
    monkeypatch.setattr(st, "secrets", {"openai": {"api_key": "sk-secret", "model": "gpt-test"}}, raising=False)

    settings = get_settings()

    assert settings.openai_api_key == "sk-secret"
    assert settings.openai_model == "gpt-test"
