"""Visualization utilities for the household dashboards."""

from .charts import (
    build_allocation_chart,
    build_category_spend_chart,
    build_goal_progress_chart,
    build_projection_chart,
    build_scenario_chart,
)
from .theme import theme_tokens

__all__ = [
    "build_allocation_chart",
    "build_category_spend_chart",
    "build_goal_progress_chart",
    "build_projection_chart",
    "build_scenario_chart",
    "theme_tokens",
]
