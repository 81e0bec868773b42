"""Core domain package for the household finance tracker."""

from .ai.summary import AISummaryError, AISummaryRequest, build_ai_summary_request, generate_ai_summary
from .data_loader import DataLoadError, load_household_data
from .logging_setup import configure_logging
from .models import (
    BudgetSummary,
    CashFlowProjection,
    Category,
    GoalAnalytics,
    GoalContribution,
    GoalMilestone,
    HouseholdData,
    SavingsGoal,
    SummaryContext,
    Transaction,
    WhatIfScenario,
)

__all__ = [
    "BudgetSummary",
    "CashFlowProjection",
    "Category",
    "GoalAnalytics",
    "GoalContribution",
    "GoalMilestone",
    "HouseholdData",
    "SavingsGoal",
    "SummaryContext",
    "Transaction",
    "WhatIfScenario",
    "AISummaryError",
    "AISummaryRequest",
    "build_ai_summary_request",
    "generate_ai_summary",
    "DataLoadError",
    "load_household_data",
    "configure_logging",
]
