"""Budget analytics: date windows, aggregation, trend/scoring and chart series."""

from budget_tracker.analytics.aggregation import (
    average_daily_spending,
    daily_limit,
    daily_spending,
    monthly_spending,
    projected_monthly_expense,
    remaining_budget,
)
from budget_tracker.analytics.dates import (
    day_of_month,
    days_ago,
    days_between,
    days_in_month,
    end_of_month,
    is_same_calendar_day,
    last_n_days,
    remaining_days_in_month,
    start_of_month,
)
from budget_tracker.analytics.scoring import (
    assess_budget,
    budget_score,
    budget_status,
    expected_ratio,
    monthly_progress,
    spending_trend,
)
from budget_tracker.analytics.series import (
    category_breakdown,
    cumulative_comparison,
    daily_spending_series,
)

__all__ = [
    # Aggregation
    "average_daily_spending",
    "daily_limit",
    "daily_spending",
    "monthly_spending",
    "projected_monthly_expense",
    "remaining_budget",
    # Dates
    "day_of_month",
    "days_ago",
    "days_between",
    "days_in_month",
    "end_of_month",
    "is_same_calendar_day",
    "last_n_days",
    "remaining_days_in_month",
    "start_of_month",
    # Scoring
    "assess_budget",
    "budget_score",
    "budget_status",
    "expected_ratio",
    "monthly_progress",
    "spending_trend",
    # Series
    "category_breakdown",
    "cumulative_comparison",
    "daily_spending_series",
]
