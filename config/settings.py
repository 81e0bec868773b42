"""Centralised configuration handling for the household finance tracker."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import streamlit as st
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"

DEFAULT_NEEDS_KEYWORDS: tuple[str, ...] = (
    "rent",
    "mortgage",
    "utilities",
    "groceries",
    "food",
    "health",
    "insurance",
    "transportation",
    "gas",
    "fuel",
    "medicine",
    "medical",
    "electricity",
    "water",
    "internet",
    "phone",
    "childcare",
    "education",
    "debt",
    "loan",
    "emi",
)

DEFAULT_SAVINGS_KEYWORDS: tuple[str, ...] = (
    "savings",
    "investment",
    "retirement",
    "emergency",
    "fund",
    "stock",
    "mutual",
    "bond",
    "crypto",
    "deposit",
)


def _streamlit_section(name: str) -> Mapping[str, Any] | None:
    """Return a mapping from Streamlit secrets for the given section."""

    try:
        if hasattr(st, "secrets") and name in st.secrets:
            section = st.secrets[name]
            if isinstance(section, Mapping):
                return section
            return dict(section)
    except Exception:  # pragma: no cover - accessing secrets may fail in tests
        return None
    return None


class Settings(BaseSettings):
    """Application settings sourced from env vars and Streamlit secrets."""

    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FINTRACK_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FINTRACK_OPENAI_BASE_URL", "OPENAI_BASE_URL"),
    )
    openai_model: str = DEFAULT_OPENAI_MODEL

    needs_keywords: tuple[str, ...] = DEFAULT_NEEDS_KEYWORDS
    savings_keywords: tuple[str, ...] = DEFAULT_SAVINGS_KEYWORDS

    income_growth_rate: float = 0.02
    expense_inflation_rate: float = 0.01
    history_months: int = 6
    projection_months: int = 6

    currency_symbol: str = "$"
    data_dir: Path | None = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def openai_client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.openai_api_key:
            kwargs["api_key"] = self.openai_api_key
        if self.openai_base_url:
            kwargs["base_url"] = self.openai_base_url
        return kwargs


@lru_cache
def get_settings() -> Settings:
    """Load and cache application settings."""

    overrides: dict[str, Any] = {}
    secrets_section = _streamlit_section("openai")
    if secrets_section:
        overrides = {
            "openai_api_key": secrets_section.get("api_key")
            or secrets_section.get("OPENAI_API_KEY"),
            "openai_base_url": secrets_section.get("api_base"),
            "openai_model": secrets_section.get("model"),
        }

    return Settings(**{k: v for k, v in overrides.items() if v is not None})
