"""
Budget snapshot encoding.

Dates are written as ISO-8601 strings and read back into local
datetimes; the round trip is exact to the microsecond.
"""

from typing import Any, Optional

import structlog
from pydantic import ValidationError

from budget_tracker.models.expense import BudgetInfo, Expense
from budget_tracker.services.storage.interface import SerializationError

logger = structlog.get_logger(__name__)

SCHEMA_VERSION = 1


def encode_budget_info(info: BudgetInfo) -> dict[str, Any]:
    """Convert a BudgetInfo into a JSON-compatible document."""
    return {
        "version": SCHEMA_VERSION,
        "monthly_limit": info.monthly_limit,
        "expenses": [
            {
                "id": str(expense.id),
                "amount": expense.amount,
                "category": expense.category.value,
                "date": expense.date.isoformat(),
                "description": expense.description,
            }
            for expense in info.expenses
        ],
    }


def decode_budget_info(
    blob: dict[str, Any],
    default_limit: Optional[float] = None,
) -> BudgetInfo:
    """
    Rebuild a BudgetInfo from a stored document.

    Stored expenses that break the Expense invariants (e.g. a
    non-positive amount) are dropped and logged, never admitted.

    Raises:
        SerializationError: If the document shape itself is wrong
    """
    if not isinstance(blob, dict):
        raise SerializationError("Budget document must be an object")

    # Older snapshots used camelCase
    limit = blob.get("monthly_limit", blob.get("monthlyLimit", default_limit))
    raw_expenses = blob.get("expenses", [])
    if not isinstance(raw_expenses, list):
        raise SerializationError("'expenses' must be a list")

    expenses = []
    for index, raw in enumerate(raw_expenses):
        try:
            expenses.append(Expense.model_validate(raw))
        except ValidationError as e:
            logger.warning(
                "stored_expense_dropped",
                index=index,
                errors=e.error_count(),
            )

    try:
        return BudgetInfo(
            monthly_limit=limit if limit is not None else 0.0,
            expenses=expenses,
        )
    except ValidationError as e:
        raise SerializationError(f"Invalid monthly limit in budget document: {e}")
