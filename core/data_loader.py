"""CSV loading for household records: categories, transactions and goals."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Final, Iterable

import pandas as pd

from core.models import (
    Category,
    GoalContribution,
    GoalMilestone,
    HouseholdData,
    SavingsGoal,
    Transaction,
)

logger = logging.getLogger(__name__)

__all__ = ["DataLoadError", "load_household_data", "read_records"]

_CACHE_SIZE: Final[int] = 8

REQUIRED_COLUMNS: Final[dict[str, tuple[str, ...]]] = {
    "categories": ("id", "name"),
    "transactions": ("id", "type", "amount", "date"),
    "goals": ("id", "name", "target_amount"),
    "milestones": ("id", "goal_id", "title", "target_amount"),
    "contributions": ("id", "goal_id", "amount", "contribution_date"),
}
DATE_COLUMNS: Final[dict[str, tuple[str, ...]]] = {
    "transactions": ("date",),
    "goals": ("deadline", "last_contribution_date", "completed_at"),
    "milestones": ("completed_at",),
    "contributions": ("contribution_date",),
}
OPTIONAL_TABLES: Final[frozenset[str]] = frozenset({"milestones", "contributions"})
# Read as text so numeric ids keep their form when a column has blanks.
ID_COLUMNS: Final[tuple[str, ...]] = ("id", "category_id", "goal_id")


class DataLoadError(RuntimeError):
    """Raised when a household CSV is present but unusable."""


def read_records(path: Path, table: str) -> list[dict[str, Any]]:
    """Read one CSV into plain records with dates parsed and blanks as ``None``."""

    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    header = pd.read_csv(path, nrows=0).columns
    df = pd.read_csv(path, dtype={column: str for column in ID_COLUMNS if column in header})
    missing = [column for column in REQUIRED_COLUMNS[table] if column not in df.columns]
    if missing:
        raise DataLoadError(f"{path.name} is missing required columns: {', '.join(missing)}")

    for column in DATE_COLUMNS.get(table, ()):
        if column in df.columns:
            df[column] = pd.to_datetime(df[column], errors="coerce").dt.date

    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


@lru_cache(maxsize=_CACHE_SIZE)
def load_household_data(data_dir: str | Path) -> HouseholdData:
    """Return the household stored as CSV files under ``data_dir``.

    ``categories.csv``, ``transactions.csv`` and ``goals.csv`` are required;
    ``milestones.csv`` and ``contributions.csv`` may be absent. Results are
    cached per directory so reruns of the dashboard do not re-read disk.
    """

    directory = Path(data_dir)
    tables: dict[str, list[dict[str, Any]]] = {}
    for table in REQUIRED_COLUMNS:
        path = directory / f"{table}.csv"
        if table in OPTIONAL_TABLES and not path.exists():
            logger.debug("Optional table %s not found in %s", table, directory)
            tables[table] = []
            continue
        tables[table] = read_records(path, table)

    try:
        data = HouseholdData(
            categories=[_category(row) for row in tables["categories"]],
            transactions=[_transaction(row) for row in tables["transactions"]],
            goals=[_goal(row) for row in tables["goals"]],
            milestones=[_milestone(row) for row in tables["milestones"]],
            contributions=[_contribution(row) for row in tables["contributions"]],
        )
    except (TypeError, ValueError) as exc:
        raise DataLoadError(f"Invalid household data in {directory}: {exc}") from exc

    logger.info(
        "Loaded %d transactions and %d goals from %s",
        len(data.transactions),
        len(data.goals),
        directory,
    )
    return data


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value) if value is not None else False


def _require_date(row: dict[str, Any], column: str) -> Any:
    value = row.get(column)
    if value is None:
        raise ValueError(f"row {row.get('id')!r} has no valid {column}")
    return value


def _with_defaults(row: dict[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    return {name: row[name] for name in fields if row.get(name) is not None}


def _category(row: dict[str, Any]) -> Category:
    return Category(
        id=str(row["id"]),
        name=str(row["name"]),
        **_with_defaults(row, ("type", "color")),
    )


def _transaction(row: dict[str, Any]) -> Transaction:
    kind = str(row["type"]).lower()
    if kind not in {"income", "expense"}:
        raise ValueError(f"transaction {row['id']!r} has unknown type {row['type']!r}")
    return Transaction(
        id=str(row["id"]),
        type=kind,  # type: ignore[arg-type]
        category_id=_text(row.get("category_id")),
        amount=float(row["amount"]),
        date=_require_date(row, "date"),
        description=_text(row.get("description")),
    )


def _goal(row: dict[str, Any]) -> SavingsGoal:
    return SavingsGoal(
        id=str(row["id"]),
        name=str(row["name"]),
        target_amount=float(row["target_amount"]),
        current_amount=float(row.get("current_amount") or 0.0),
        deadline=row.get("deadline"),
        goal_type=str(row.get("goal_type") or "general"),
        priority=int(row.get("priority") or 0),
        auto_contribute=_flag(row.get("auto_contribute")),
        auto_contribute_amount=float(row.get("auto_contribute_amount") or 0.0),
        auto_contribute_frequency=str(row.get("auto_contribute_frequency") or "monthly"),  # type: ignore[arg-type]
        last_contribution_date=row.get("last_contribution_date"),
        description=_text(row.get("description")),
        is_completed=_flag(row.get("is_completed")),
        completed_at=row.get("completed_at"),
        **_with_defaults(row, ("color", "icon")),
    )


def _milestone(row: dict[str, Any]) -> GoalMilestone:
    return GoalMilestone(
        id=str(row["id"]),
        goal_id=str(row["goal_id"]),
        title=str(row["title"]),
        target_amount=float(row["target_amount"]),
        is_completed=_flag(row.get("is_completed")),
        order_index=int(row.get("order_index") or 0),
        completed_at=row.get("completed_at"),
    )


def _contribution(row: dict[str, Any]) -> GoalContribution:
    return GoalContribution(
        id=str(row["id"]),
        goal_id=str(row["goal_id"]),
        amount=float(row["amount"]),
        contribution_date=_require_date(row, "contribution_date"),
        is_auto=_flag(row.get("is_auto")),
        notes=_text(row.get("notes")),
    )
