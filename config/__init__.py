"""Application configuration utilities."""

from .settings import (
    DEFAULT_NEEDS_KEYWORDS,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_SAVINGS_KEYWORDS,
    Settings,
    get_settings,
)

__all__ = [
    "DEFAULT_NEEDS_KEYWORDS",
    "DEFAULT_OPENAI_MODEL",
    "DEFAULT_SAVINGS_KEYWORDS",
    "Settings",
    "get_settings",
]
