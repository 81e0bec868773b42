"""Budget allocation, forecasting and goal analytics for the household tracker."""

from analytics.allocation import (
    CategoryKeywords,
    InvalidAllocationError,
    calculate_503020_allocation,
    calculate_custom_allocation,
    calculate_zero_based_budget,
    classify_category,
    generate_budget_summary,
)
from analytics.contributions import (
    AutoContributionBatch,
    AutoContributionResult,
    build_contribution_schedule,
    plan_auto_contribution,
    plan_auto_contributions,
    should_make_contribution,
)
from analytics.forecasting import (
    ForecastAssumptions,
    build_monthly_history,
    calculate_burn_rate,
    calculate_growth_trend,
    calculate_historical_averages,
    compare_scenarios,
    generate_cash_flow_projection,
    scenario_emergency_fund,
    scenario_expense_reduction,
    scenario_loan_payoff,
    scenario_new_expense,
    scenario_salary_increase,
)
from analytics.goals import (
    GOAL_TYPES,
    calculate_goal_analytics,
    calculate_next_contribution_date,
    calculate_total_savings,
    get_active_goals,
    get_all_goal_types,
    get_completed_goals,
    get_goal_type_info,
    get_goals_by_type,
    is_auto_contribution_due,
    sort_by_priority,
    suggest_goals,
)
from analytics.reports import (
    calculate_cash_flow,
    calculate_category_comparisons,
    calculate_income_statement,
)
from analytics.spending import (
    BudgetLimit,
    calculate_confidence_score,
    calculate_spending_patterns,
    detect_anomalies,
    detect_low_balance_warning,
    generate_insights,
    predict_budget_status,
)

__all__ = [
    "CategoryKeywords",
    "InvalidAllocationError",
    "calculate_503020_allocation",
    "calculate_custom_allocation",
    "calculate_zero_based_budget",
    "classify_category",
    "generate_budget_summary",
    "AutoContributionBatch",
    "AutoContributionResult",
    "build_contribution_schedule",
    "plan_auto_contribution",
    "plan_auto_contributions",
    "should_make_contribution",
    "ForecastAssumptions",
    "build_monthly_history",
    "calculate_burn_rate",
    "calculate_growth_trend",
    "calculate_historical_averages",
    "compare_scenarios",
    "generate_cash_flow_projection",
    "scenario_emergency_fund",
    "scenario_expense_reduction",
    "scenario_loan_payoff",
    "scenario_new_expense",
    "scenario_salary_increase",
    "GOAL_TYPES",
    "calculate_goal_analytics",
    "calculate_next_contribution_date",
    "calculate_total_savings",
    "get_active_goals",
    "get_all_goal_types",
    "get_completed_goals",
    "get_goal_type_info",
    "get_goals_by_type",
    "is_auto_contribution_due",
    "sort_by_priority",
    "suggest_goals",
    "BudgetLimit",
    "calculate_confidence_score",
    "calculate_spending_patterns",
    "detect_anomalies",
    "detect_low_balance_warning",
    "generate_insights",
    "predict_budget_status",
    "calculate_cash_flow",
    "calculate_category_comparisons",
    "calculate_income_statement",
]
