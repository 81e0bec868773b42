"""Shared record and result definitions for the household finance tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Literal, Optional, TypedDict

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from analytics.reports import CategoryComparison, IncomeStatement

TransactionType = Literal["income", "expense"]
AllocationBucket = Literal["needs", "wants", "savings"]
ContributionFrequency = Literal["weekly", "bi-weekly", "monthly", "quarterly"]
CashFlowTrend = Literal["improving", "stable", "declining"]
GoalHealth = Literal["excellent", "good", "behind", "critical"]


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: TransactionType = "expense"
    color: str = "#94A3B8"


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    category_id: Optional[str]
    amount: float
    date: date
    description: Optional[str] = None


@dataclass(frozen=True)
class SavingsGoal:
    """A savings goal together with its auto-contribution preferences."""

    id: str
    name: str
    target_amount: float
    current_amount: float = 0.0
    deadline: Optional[date] = None
    goal_type: str = "general"
    priority: int = 0
    auto_contribute: bool = False
    auto_contribute_amount: float = 0.0
    auto_contribute_frequency: ContributionFrequency = "monthly"
    last_contribution_date: Optional[date] = None
    description: Optional[str] = None
    color: str = "#3b82f6"
    icon: Optional[str] = None
    is_completed: bool = False
    completed_at: Optional[date] = None


@dataclass(frozen=True)
class GoalMilestone:
    id: str
    goal_id: str
    title: str
    target_amount: float
    is_completed: bool = False
    order_index: int = 0
    completed_at: Optional[date] = None


@dataclass(frozen=True)
class GoalContribution:
    id: str
    goal_id: str
    amount: float
    contribution_date: date
    is_auto: bool = False
    notes: Optional[str] = None


@dataclass(frozen=True)
class BudgetAllocation:
    needs: float
    wants: float
    savings: float

    @property
    def total(self) -> float:
        return self.needs + self.wants + self.savings

    def for_bucket(self, bucket: AllocationBucket) -> float:
        return float(getattr(self, bucket))


@dataclass(frozen=True)
class CategoryAllocation:
    category_id: str
    category_name: str
    type: AllocationBucket
    current_spending: float
    allocated_budget: float
    utilization_percentage: float


@dataclass(frozen=True)
class BudgetSummary:
    total_income: float
    allocation: BudgetAllocation
    category_breakdown: list[CategoryAllocation]
    needs_utilization: float
    wants_utilization: float
    savings_utilization: float
    is_balanced: bool
    recommendations: list[str]


@dataclass(frozen=True)
class PlannedExpense:
    category: str
    amount: float


@dataclass(frozen=True)
class ZeroBasedBudget:
    allocated: float
    unallocated: float
    categories: list[PlannedExpense]


@dataclass(frozen=True)
class MonthlyData:
    month: str
    income: float
    expenses: float
    net_cash_flow: float
    balance: float


@dataclass(frozen=True)
class CashFlowProjection:
    projections: list[MonthlyData]
    average_income: float
    average_expenses: float
    average_net_cash_flow: float
    projected_balance: float
    burn_rate: float
    trend: CashFlowTrend


@dataclass(frozen=True)
class WhatIfScenario:
    name: str
    description: str
    projections: list[MonthlyData]
    total_impact: float
    recommendation: str


@dataclass(frozen=True)
class ScenarioComparison:
    best_case: Optional[WhatIfScenario]
    worst_case: Optional[WhatIfScenario]
    summary: str


@dataclass(frozen=True)
class GoalTypeInfo:
    type: str
    label: str
    icon: str
    color: str
    description: str
    tips: tuple[str, ...] = ()
    recommended_amount: Optional[float] = None


@dataclass(frozen=True)
class GoalAnalytics:
    """Derived view of a savings goal. Recomputed on every call, never stored."""

    goal: SavingsGoal
    progress_percentage: float
    remaining_amount: float
    days_until_deadline: Optional[int]
    months_until_deadline: Optional[int]
    required_monthly_savings: float
    required_weekly_savings: float
    required_daily_savings: float
    is_on_track: bool
    projected_completion_date: Optional[date]
    estimated_months_to_complete: Optional[int]
    average_monthly_contribution: float
    total_contributions: float
    contribution_count: int
    milestones: list[GoalMilestone] = field(default_factory=list)
    next_milestone: Optional[GoalMilestone] = None
    completed_milestones: int = 0
    health: GoalHealth = "good"
    recommendation: str = ""


@dataclass(frozen=True)
class TotalSavings:
    current_amount: float
    target_amount: float
    progress_percentage: float


@dataclass(frozen=True)
class HouseholdData:
    """Everything the engines read for one household."""

    categories: list[Category]
    transactions: list[Transaction]
    goals: list[SavingsGoal]
    milestones: list[GoalMilestone] = field(default_factory=list)
    contributions: list[GoalContribution] = field(default_factory=list)

    def milestones_for(self, goal_id: str) -> list[GoalMilestone]:
        return [milestone for milestone in self.milestones if milestone.goal_id == goal_id]

    def contributions_for(self, goal_id: str) -> list[GoalContribution]:
        return [contribution for contribution in self.contributions if contribution.goal_id == goal_id]


class SummaryContext(TypedDict, total=False):
    period_label: str
    currency_symbol: str
    budget_summary: BudgetSummary
    current_balance: float
    projection: CashFlowProjection
    scenarios: list[WhatIfScenario]
    goal_analytics: list[GoalAnalytics]
    income_statement: IncomeStatement
    category_comparisons: list[CategoryComparison]


__all__ = [
    "AllocationBucket",
    "BudgetAllocation",
    "BudgetSummary",
    "CashFlowProjection",
    "CashFlowTrend",
    "Category",
    "CategoryAllocation",
    "ContributionFrequency",
    "GoalAnalytics",
    "GoalContribution",
    "GoalHealth",
    "GoalMilestone",
    "GoalTypeInfo",
    "HouseholdData",
    "MonthlyData",
    "PlannedExpense",
    "SavingsGoal",
    "ScenarioComparison",
    "SummaryContext",
    "TotalSavings",
    "Transaction",
    "TransactionType",
    "WhatIfScenario",
    "ZeroBasedBudget",
]
