"""
Spending trend, budget status and budget score.

DESIGN DECISION: There is exactly one status formula and one score
formula, both taking ``(monthly_spending, monthly_limit, trend)`` in
that order. The score is a coarse, bucketed gamification number, not a
continuous metric.

Trend sign convention: daily spending is sampled from today backwards
(index 0 = today) and ``trend = mean(s[i-1] - s[i])``. A positive trend
means spending has been rising toward today; negative means falling.

A monthly limit that is not positive means "no budget configured":
status is NOT_CONFIGURED and the score is 0, no ratio is computed.
"""

import math
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from budget_tracker.analytics.aggregation import daily_spending
from budget_tracker.analytics.dates import (
    day_of_month,
    days_in_month,
    last_n_days,
    resolve_now,
)
from budget_tracker.config import get_settings
from budget_tracker.models.expense import Expense
from budget_tracker.models.report import BudgetStatus, StatusAssessment


# Status thresholds, as multiples of the expected month-to-date ratio
EXCELLENT_PACE = 0.9
GOOD_PACE = 1.1
BAD_PACE = 1.2
# "Stable" trend: daily change below this share of the monthly limit
STABLE_TREND_SHARE = 0.01

# Score adjustments
TREND_PENALTY_CAP = 20.0
TREND_PENALTY_FACTOR = 1000.0
TREND_BONUS_CAP = 10.0
TREND_BONUS_FACTOR = 500.0

NO_LIMIT_SCORE = 0.0


def has_limit(monthly_limit: float) -> bool:
    return math.isfinite(monthly_limit) and monthly_limit > 0


def spending_trend(
    expenses: Sequence[Expense],
    now: Optional[datetime] = None,
    window_days: int = 7,
) -> float:
    """Average day-over-day change in spending across the trailing window."""
    if window_days < 2:
        raise ValueError("Trend window needs at least two days")

    now = resolve_now(now)
    samples = [daily_spending(expenses, day) for day in last_n_days(now, window_days)]

    trend = 0.0
    for i in range(1, len(samples)):
        trend += samples[i - 1] - samples[i]

    return trend / (len(samples) - 1)


def expected_ratio(now: Optional[datetime] = None) -> float:
    """Share of the month elapsed, today included."""
    now = resolve_now(now)
    return day_of_month(now) / days_in_month(now)


def budget_status(
    monthly_spending: float,
    monthly_limit: float,
    trend: float,
    now: Optional[datetime] = None,
) -> BudgetStatus:
    """Classify spending pace against the elapsed share of the month."""
    if not has_limit(monthly_limit):
        return BudgetStatus.NOT_CONFIGURED

    ratio = monthly_spending / monthly_limit
    expected = expected_ratio(now)

    # Under pace and not getting worse
    if ratio <= expected * EXCELLENT_PACE and trend <= 0:
        return BudgetStatus.EXCELLENT

    # Near pace with a stable trend
    if ratio <= expected * GOOD_PACE and abs(trend) < monthly_limit * STABLE_TREND_SHARE:
        return BudgetStatus.GOOD

    # Modestly over pace, or over but improving
    if ratio <= expected * BAD_PACE or trend < 0:
        return BudgetStatus.BAD

    return BudgetStatus.WORST


def monthly_progress(monthly_spending: float, monthly_limit: float) -> float:
    """Share of the monthly limit already spent, as a percentage capped at 100."""
    if not has_limit(monthly_limit):
        return 0.0
    return min(monthly_spending / monthly_limit * 100, 100.0)


def status_color(status: BudgetStatus) -> str:
    return get_settings().budget.status_colors[status.value]


def assess_budget(
    monthly_spending: float,
    monthly_limit: float,
    trend: float,
    now: Optional[datetime] = None,
) -> StatusAssessment:
    """Status plus its configured display color."""
    status = budget_status(monthly_spending, monthly_limit, trend, now)
    return StatusAssessment(status=status, color=status_color(status))


def budget_score(
    monthly_spending: float,
    monthly_limit: float,
    trend: float,
    now: Optional[datetime] = None,
) -> float:
    """
    Bucketed 0-100 score.

    100, 90 and 70 are fixed buckets; anything lower is the raw score
    clamped to [0, 50].
    """
    if not has_limit(monthly_limit):
        return NO_LIMIT_SCORE

    ratio = monthly_spending / monthly_limit
    score = 100 - max(0.0, ratio - expected_ratio(now)) * 100

    if trend > 0:
        score -= min(TREND_PENALTY_CAP, (trend / monthly_limit) * TREND_PENALTY_FACTOR)
    else:
        score += min(TREND_BONUS_CAP, abs(trend / monthly_limit) * TREND_BONUS_FACTOR)

    if score >= 90:
        return 100.0
    if score >= 70:
        return 90.0
    if score >= 50:
        return 70.0
    return max(0.0, min(50.0, score))
