"""
Manual Entry Validation and the Limit Gate

DESIGN DECISION: Manual entry is validated in two passes:

PASS 1 - REQUIRED FIELDS:
- Amount present, numeric, finite and positive
- Category one of the known categories
- These are errors; the entry is rejected with field-level messages

PASS 2 - SANITY CHECKS:
- Unusually large amounts
- Dates too far in the future
- These are warnings; the entry can still be committed

IMPORTANT: Validation NEVER silently fixes values.
It reports them so the form can show them next to the field.
"""

import hmac
import math
from datetime import datetime, timedelta
from typing import Any, Optional

from pydantic import SecretStr, ValidationError

from budget_tracker.config import get_settings
from budget_tracker.models.expense import (
    ExpenseCategory,
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
)


class BudgetError(Exception):
    """Base exception for budget operations."""
    pass


class InvalidLimitError(BudgetError):
    """Monthly limit is not a positive finite number."""
    pass


class LimitChangeDeniedError(BudgetError):
    """The limit gate rejected the credential."""
    pass


class ExpenseValidationError(BudgetError):
    """A manual entry failed validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid expense: {messages}")


class LimitChangeGate:
    """
    Precondition on changing the monthly limit.

    The credential comes from configuration (BUDGET_LIMIT_PASSWORD).
    With no credential configured the gate is open.
    """

    def __init__(self, secret: Optional[SecretStr] = None):
        self._secret = secret

    @classmethod
    def from_settings(cls) -> "LimitChangeGate":
        return cls(get_settings().budget.limit_password)

    @property
    def is_open(self) -> bool:
        return self._secret is None or not self._secret.get_secret_value()

    def check(self, password: Optional[str]) -> bool:
        """True if the password unlocks limit changes."""
        if self.is_open:
            return True
        if password is None:
            return False
        return hmac.compare_digest(
            password.encode("utf-8"),
            self._secret.get_secret_value().encode("utf-8"),
        )


def _parse_amount(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


class ExpenseValidator:
    """Validates manual expense entries and monthly limit values."""

    def __init__(self):
        self._settings = get_settings().app

    def _check_required(
        self,
        amount: Any,
        category: Any,
    ) -> tuple[Optional[float], Optional[ExpenseCategory], list[ValidationIssue]]:
        issues = []

        parsed_amount = _parse_amount(amount)
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Please enter an amount",
                severity="error",
            ))
        elif parsed_amount is None or not math.isfinite(parsed_amount):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Please enter a valid amount",
                severity="error",
            ))
        elif parsed_amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
            ))

        parsed_category = None
        if category is None or (isinstance(category, str) and not category.strip()):
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Please select a category",
                severity="error",
            ))
        else:
            try:
                parsed_category = ExpenseCategory.parse(category)
            except ValueError:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="invalid_value",
                    message=f"Unknown category: {category}",
                    severity="error",
                ))

        return parsed_amount, parsed_category, issues

    def _check_sanity(
        self,
        amount: float,
        date: datetime,
        now: datetime,
    ) -> list[ValidationIssue]:
        issues = []

        if amount > self._settings.max_expense_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
            ))

        max_future = now + timedelta(days=self._settings.future_date_tolerance_days)
        if date > max_future:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({date.date()}) is in the future",
                severity="warning",
            ))

        return issues

    def validate_entry(
        self,
        amount: Any,
        category: Any = ExpenseCategory.OTHERS,
        date: Optional[datetime] = None,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ValidationResult:
        """
        Validate a manual entry form.

        Returns a ValidationResult; when valid, ``result.draft`` is ready
        to be committed.
        """
        now = now or datetime.now()
        date = date or now

        parsed_amount, parsed_category, issues = self._check_required(amount, category)
        if issues:
            return ValidationResult(is_valid=False, issues=issues)

        try:
            draft = ExpenseDraft(
                amount=parsed_amount,
                category=parsed_category,
                date=date,
                description=description or "",
            )
        except ValidationError as e:
            issues = [
                ValidationIssue(
                    field=str(error["loc"][0]) if error["loc"] else "entry",
                    issue_type="invalid_value",
                    message=error["msg"],
                    severity="error",
                )
                for error in e.errors()
            ]
            return ValidationResult(is_valid=False, issues=issues)

        issues = self._check_sanity(draft.amount, draft.date, now)
        return ValidationResult(is_valid=True, issues=issues, draft=draft)

    def validate_limit(self, value: Any) -> float:
        """
        Parse and check a new monthly limit.

        Raises:
            InvalidLimitError: If the value is not a positive finite number
        """
        limit = _parse_amount(value)
        if limit is None or not math.isfinite(limit) or limit <= 0:
            raise InvalidLimitError("Please enter a valid amount")
        return limit
