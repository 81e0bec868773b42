"""Formatting helpers for recommendation and summary text."""

from __future__ import annotations

import math

__all__ = ["format_currency", "format_months", "format_percentage"]


def format_currency(amount: float, symbol: str = "$") -> str:
    """Render ``amount`` with two decimals and the currency symbol in front."""

    if amount < 0:
        return f"-{symbol}{abs(amount):,.2f}"
    return f"{symbol}{amount:,.2f}"


def format_percentage(value: float) -> str:
    return f"{value:.0f}%"


def format_months(value: float) -> str:
    if math.isinf(value):
        return "No burn"
    return f"{value:.1f} months"
