"""
Date-window helpers.

All functions are pure and take ``now`` explicitly (callers default it
to ``datetime.now()``). Day counts are whole calendar days, time of day
is ignored.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional


def resolve_now(now: Optional[datetime] = None) -> datetime:
    return now if now is not None else datetime.now()


def start_of_month(now: datetime) -> datetime:
    """Midnight of the first day of ``now``'s month."""
    return datetime(now.year, now.month, 1)


def end_of_month(now: datetime) -> datetime:
    """Last representable instant of ``now``'s month."""
    last_day = calendar.monthrange(now.year, now.month)[1]
    return datetime.combine(date(now.year, now.month, last_day), time.max)


def days_between(a: datetime, b: datetime) -> int:
    """
    Whole calendar days from ``a`` to ``b`` (negative if ``b`` is earlier).

    Callers add 1 when the current day should count as a full day.
    """
    return (b.date() - a.date()).days


def is_same_calendar_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


def days_in_month(now: datetime) -> int:
    return days_between(start_of_month(now), end_of_month(now)) + 1


def day_of_month(now: datetime) -> int:
    """Days elapsed in the month, counting today."""
    return days_between(start_of_month(now), now) + 1


def remaining_days_in_month(now: datetime) -> int:
    """Days left in the month, counting today."""
    return days_between(now, end_of_month(now)) + 1


def days_ago(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)


def last_n_days(now: datetime, n: int) -> list[datetime]:
    """``now`` and the ``n - 1`` days before it, most recent first."""
    return [days_ago(now, i) for i in range(n)]


def month_days_until(now: datetime) -> list[datetime]:
    """Midnight of every day from the 1st of the month through ``now``."""
    start = start_of_month(now)
    return [start + timedelta(days=i) for i in range(day_of_month(now))]
