"""
Report Models for Budget Tracker

Read-only views derived from the expense list: status, score,
chart series and export payloads. Nothing here is persisted.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from budget_tracker.models.expense import ExpenseCategory


class BudgetStatus(str, Enum):
    """
    Qualitative classification of spending pace.

    NOT_CONFIGURED is returned when there is no positive monthly limit,
    so ratio-based classification is skipped entirely.
    """
    EXCELLENT = "excellent"
    GOOD = "good"
    BAD = "bad"
    WORST = "worst"
    NOT_CONFIGURED = "not_configured"


class StatusAssessment(BaseModel):
    """A budget status plus its display color."""

    status: BudgetStatus
    color: str


class DailySpendingPoint(BaseModel):
    """One bar of the trailing daily spending indicator."""

    day: date
    spending: float = Field(ge=0)
    limit: float = Field(ge=0)
    percentage: float = Field(
        ge=0,
        le=100,
        description="Spending as a share of the daily limit, capped at 100"
    )


class ComparisonPoint(BaseModel):
    """Cumulative expected vs actual spending on one day of the month."""

    day: date
    expected: int
    actual: int


class BudgetSummary(BaseModel):
    """
    Everything the dashboard shows, computed in one pass.

    All values are finite; a missing monthly limit yields the
    NOT_CONFIGURED status, a score of 0 and a daily limit of 0.
    """

    generated_at: datetime
    monthly_limit: float
    monthly_spending: float
    remaining_budget: float
    monthly_progress: float = Field(
        ge=0,
        le=100,
        description="Share of the monthly limit spent, capped at 100 (0 with no limit)"
    )
    daily_limit: float
    today_spending: float
    average_daily_spending: float
    projected_monthly_expense: float
    spending_trend: float
    status: BudgetStatus
    status_color: str
    score: float = Field(ge=0, le=100)
    last_days: list[DailySpendingPoint] = Field(default_factory=list)
    category_totals: dict[ExpenseCategory, float] = Field(default_factory=dict)
    comparison: list[ComparisonPoint] = Field(default_factory=list)

    @property
    def is_over_budget(self) -> bool:
        return self.remaining_budget < 0


class ExportFormat(str, Enum):
    """Supported export formats."""
    CSV = "csv"
    JSON = "json"

    @property
    def mime_type(self) -> str:
        if self is ExportFormat.CSV:
            return "text/csv;charset=utf-8"
        return "application/json"


class ExportResult(BaseModel):
    """Export payload handed to a save/share mechanism."""

    data: str
    filename: str
    format: ExportFormat
    row_count: int = Field(ge=0)

    @property
    def mime_type(self) -> str:
        return self.format.mime_type
