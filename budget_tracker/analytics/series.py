"""
Chart-ready data series.

These produce the numbers behind the dashboard charts (category pie,
trailing daily bars, cumulative expected vs actual). Rendering is
someone else's job.
"""

import math
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from budget_tracker.analytics.aggregation import daily_spending
from budget_tracker.analytics.dates import (
    days_in_month,
    end_of_month,
    last_n_days,
    month_days_until,
    resolve_now,
    start_of_month,
)
from budget_tracker.models.expense import Expense, ExpenseCategory
from budget_tracker.models.report import ComparisonPoint, DailySpendingPoint


def round_half_up(value: float) -> int:
    """Nearest integer, with halves rounded up (12.5 -> 13)."""
    return math.floor(value + 0.5)


def category_breakdown(
    expenses: Sequence[Expense],
    now: Optional[datetime] = None,
    month_only: bool = False,
) -> dict[ExpenseCategory, float]:
    """
    Total spent per category, with every category present (zero if unused).

    When ``month_only`` is set, only expenses in ``now``'s month count.
    """
    totals = {category: 0.0 for category in ExpenseCategory}

    if month_only:
        now = resolve_now(now)
        start, end = start_of_month(now), end_of_month(now)
        expenses = [e for e in expenses if start <= e.date <= end]

    for expense in expenses:
        totals[expense.category] += expense.amount

    return totals


def daily_spending_series(
    expenses: Sequence[Expense],
    limit: float,
    now: Optional[datetime] = None,
    days: int = 7,
) -> list[DailySpendingPoint]:
    """Spending for the trailing ``days`` days, oldest first."""
    now = resolve_now(now)
    points = []

    for day in reversed(last_n_days(now, days)):
        spending = daily_spending(expenses, day)
        percentage = min(spending / limit * 100, 100.0) if limit > 0 else 0.0
        points.append(DailySpendingPoint(
            day=day.date(),
            spending=spending,
            limit=max(limit, 0.0),
            percentage=percentage,
        ))

    return points


def cumulative_comparison(
    expenses: Sequence[Expense],
    monthly_limit: float,
    now: Optional[datetime] = None,
) -> list[ComparisonPoint]:
    """
    Cumulative expected vs actual spending from the 1st through today.

    Expected spending accrues at ``monthly_limit / days_in_month`` per day,
    so it reaches the full limit on the last day of the month.
    """
    now = resolve_now(now)
    daily_budget = max(monthly_limit, 0.0) / days_in_month(now)

    cumulative_expected = 0.0
    cumulative_actual = 0.0
    points = []

    for day in month_days_until(now):
        cumulative_expected += daily_budget
        cumulative_actual += daily_spending(expenses, day)
        points.append(ComparisonPoint(
            day=day.date(),
            expected=round_half_up(cumulative_expected),
            actual=round_half_up(cumulative_actual),
        ))

    return points
