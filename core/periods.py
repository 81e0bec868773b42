"""Calendar helpers shared by the forecasting and goal engines."""

from __future__ import annotations

from datetime import date, datetime

import pandas as pd

__all__ = [
    "add_months",
    "as_date",
    "days_between",
    "month_label",
    "months_between",
    "resolve_today",
]

MONTH_LABEL_FORMAT = "%b %Y"


def resolve_today(today: date | None) -> date:
    """Return ``today`` or the current local date when it is not supplied."""

    return today if today is not None else date.today()


def as_date(value: date | datetime | str | pd.Timestamp) -> date:
    """Coerce a date-like value (ISO string, datetime, Timestamp) into a ``date``."""

    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()


def add_months(anchor: date, months: int) -> date:
    """Shift ``anchor`` by whole calendar months, clamping to the month end."""

    return (pd.Timestamp(anchor) + pd.DateOffset(months=months)).date()


def months_between(later: date, earlier: date) -> int:
    """Return the number of full calendar months from ``earlier`` to ``later``.

    Partial months are truncated towards zero, so 15 Jan -> 14 Mar is one
    month and 15 Jan -> 15 Mar is two. Month ends are clamped, which makes
    31 Jan -> 28 Feb a full month.
    """

    sign = 1
    if later < earlier:
        later, earlier = earlier, later
        sign = -1

    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if months > 0 and add_months(earlier, months) > later:
        months -= 1
    return sign * months


def days_between(later: date, earlier: date) -> int:
    return (later - earlier).days


def month_label(moment: date) -> str:
    return pd.Timestamp(moment).strftime(MONTH_LABEL_FORMAT)
