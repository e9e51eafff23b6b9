"""Validation package."""

from budget_tracker.validation.validator import (
    BudgetError,
    ExpenseValidationError,
    ExpenseValidator,
    InvalidLimitError,
    LimitChangeDeniedError,
    LimitChangeGate,
)

__all__ = [
    "BudgetError",
    "ExpenseValidationError",
    "ExpenseValidator",
    "InvalidLimitError",
    "LimitChangeDeniedError",
    "LimitChangeGate",
]
