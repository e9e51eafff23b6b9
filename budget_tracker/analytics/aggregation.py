"""
Spending aggregation over a flat expense list.

Every function re-derives its result from the list it is given;
nothing is cached between calls.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from budget_tracker.analytics.dates import (
    day_of_month,
    days_in_month,
    end_of_month,
    is_same_calendar_day,
    remaining_days_in_month,
    resolve_now,
    start_of_month,
)
from budget_tracker.models.expense import Expense


def daily_spending(expenses: Iterable[Expense], day: datetime) -> float:
    """Total spent on ``day``'s calendar date (0.0 when nothing matches)."""
    return sum(
        (expense.amount for expense in expenses if is_same_calendar_day(expense.date, day)),
        0.0,
    )


def monthly_spending(expenses: Iterable[Expense], now: Optional[datetime] = None) -> float:
    """Total spent between the start and end of ``now``'s month, inclusive."""
    now = resolve_now(now)
    start, end = start_of_month(now), end_of_month(now)
    return sum(
        (expense.amount for expense in expenses if start <= expense.date <= end),
        0.0,
    )


def average_daily_spending(expenses: Iterable[Expense], now: Optional[datetime] = None) -> float:
    """Month-to-date spending spread over the days elapsed, today included."""
    now = resolve_now(now)
    return monthly_spending(expenses, now) / day_of_month(now)


def projected_monthly_expense(expenses: Iterable[Expense], now: Optional[datetime] = None) -> float:
    """Linear extrapolation of the average daily rate over the whole month."""
    now = resolve_now(now)
    return average_daily_spending(expenses, now) * days_in_month(now)


def remaining_budget(
    monthly_limit: float,
    expenses: Iterable[Expense],
    now: Optional[datetime] = None,
) -> float:
    """Limit minus month-to-date spending; negative when over budget."""
    return monthly_limit - monthly_spending(expenses, now)


def daily_limit(remaining: float, now: Optional[datetime] = None) -> float:
    """
    How much can be spent per day for the rest of the month.

    A budget that is used up (or was never set) allows 0.0 per day.
    """
    now = resolve_now(now)
    if not remaining > 0:
        return 0.0
    return remaining / remaining_days_in_month(now)
