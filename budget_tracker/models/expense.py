"""
Core Data Models for Budget Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Keep invalid amounts out of the working set
2. Provide clear validation error messages
3. Be serializable for storage and export
4. Stay immutable once created

DESIGN DECISION: Expenses are frozen Pydantic models. An expense is
created, possibly deleted, but never edited in place.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    OTHERS is the catch-all for anything an import cannot place.
    """
    BILLS = "bills"
    EMI = "emi"
    ENTERTAINMENT = "entertainment"
    FOOD = "food"
    FUEL = "fuel"
    GROCERIES = "groceries"
    HEALTH = "health"
    HOUSING = "housing"
    INVESTMENT = "investment"
    SHOPPING = "shopping"
    TRANSFER = "transfer"
    TRAVEL = "travel"
    OTHERS = "others"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "ExpenseCategory":
        """
        Strictly resolve a category from its id, label or a known alias.

        Matching is case-insensitive. Raises ValueError for anything else.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Category must be a string, got {type(value).__name__}")

        key = value.strip().lower()
        if key in _CATEGORY_LOOKUP:
            return _CATEGORY_LOOKUP[key]
        raise ValueError(f"Unknown category: {value!r}")


CATEGORY_LABELS: dict[ExpenseCategory, str] = {
    ExpenseCategory.BILLS: "Bills",
    ExpenseCategory.EMI: "EMI",
    ExpenseCategory.ENTERTAINMENT: "Entertainment",
    ExpenseCategory.FOOD: "Food & Drinks",
    ExpenseCategory.FUEL: "Fuel",
    ExpenseCategory.GROCERIES: "Groceries",
    ExpenseCategory.HEALTH: "Health",
    ExpenseCategory.HOUSING: "Housing",
    ExpenseCategory.INVESTMENT: "Investment",
    ExpenseCategory.SHOPPING: "Shopping",
    ExpenseCategory.TRANSFER: "Transfer",
    ExpenseCategory.TRAVEL: "Travel",
    ExpenseCategory.OTHERS: "Other",
}

CATEGORY_ALIASES: dict[str, ExpenseCategory] = {
    "traveling": ExpenseCategory.TRAVEL,
    "travelling": ExpenseCategory.TRAVEL,
    "other": ExpenseCategory.OTHERS,
    "food & drink": ExpenseCategory.FOOD,
}

_CATEGORY_LOOKUP: dict[str, ExpenseCategory] = {
    **{category.value: category for category in ExpenseCategory},
    **{label.lower(): category for category, label in CATEGORY_LABELS.items()},
    **CATEGORY_ALIASES,
}


def resolve_category(value: Any) -> ExpenseCategory:
    """Lenient category lookup for imports: anything unknown becomes OTHERS."""
    try:
        return ExpenseCategory.parse(value)
    except ValueError:
        return ExpenseCategory.OTHERS


def to_local_datetime(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


# =============================================================================
# CORE EXPENSE MODELS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    A proposed expense, not yet committed.

    Import parsers and manual entry produce drafts. The session assigns
    the id when it commits a draft to the working set.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount spent (currency units)"
    )
    category: ExpenseCategory = Field(
        default=ExpenseCategory.OTHERS,
        description="Expense category"
    )
    date: datetime = Field(
        default_factory=datetime.now,
        description="When the money was spent (local time)"
    )
    description: str = Field(
        default="",
        max_length=500,
        description="Optional free-text note"
    )

    @field_validator('category', mode='before')
    @classmethod
    def parse_category(cls, v: Any) -> ExpenseCategory:
        return ExpenseCategory.parse(v)

    @field_validator('date', mode='before')
    @classmethod
    def widen_plain_date(cls, v: Any) -> Any:
        """Accept plain dates as midnight of that day."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time())
        return v

    @field_validator('date')
    @classmethod
    def localize_date(cls, v: datetime) -> datetime:
        return to_local_datetime(v)

    @field_validator('description', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Expense(ExpenseDraft):
    """
    A committed expense in the working set.

    CRITICAL: amount > 0 holds for every Expense. Ids are never reused.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique, stable expense id"
    )

    @classmethod
    def from_draft(cls, draft: ExpenseDraft) -> "Expense":
        """Commit a draft under a fresh id."""
        return cls(
            amount=draft.amount,
            category=draft.category,
            date=draft.date,
            description=draft.description,
        )


class BudgetInfo(BaseModel):
    """
    Aggregate root: the monthly limit and every committed expense.

    Insertion order of expenses carries no meaning.
    """

    monthly_limit: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Monthly spending ceiling (0 = not configured)"
    )
    expenses: list[Expense] = Field(default_factory=list)


# =============================================================================
# IMPORT MODELS
# =============================================================================

class RowRejection(BaseModel):
    """Why a spreadsheet row was not turned into a draft."""

    row_index: int = Field(ge=0)
    reason: str


class ImportResult(BaseModel):
    """
    Outcome of a spreadsheet import.

    Only drafts with a positive amount are included.
    """

    drafts: list[ExpenseDraft] = Field(default_factory=list)
    rejected: list[RowRejection] = Field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.drafts)

    @property
    def dropped_count(self) -> int:
        return len(self.rejected)

    @property
    def summary(self) -> str:
        """Feedback line shown after parsing."""
        return f"Found {self.accepted_count} valid expense entries"


class SmsParseResult(BaseModel):
    """
    Suggested expense fields extracted from an SMS.

    ADVISORY ONLY: every field can be overridden before commit.
    """

    raw_text: str
    amount: Optional[float] = None
    category: ExpenseCategory = ExpenseCategory.OTHERS
    description: str = ""
    message: str = ""

    @property
    def success(self) -> bool:
        return self.amount is not None

    def to_draft(
        self,
        amount: Optional[float] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
        date: Optional[datetime] = None,
    ) -> ExpenseDraft:
        """
        Build a draft, letting the caller override any extracted field.

        Raises pydantic.ValidationError when no usable amount is available.
        """
        return ExpenseDraft(
            amount=amount if amount is not None else self.amount,
            category=category if category is not None else self.category,
            description=description if description is not None else self.description,
            date=date or datetime.now(),
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of validating a manual entry.

    When is_valid is True, draft holds the expense ready to commit.
    """

    validated_at: datetime = Field(default_factory=datetime.now)
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    draft: Optional[ExpenseDraft] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    def messages_for(self, field: str) -> list[str]:
        """Field-level messages for the entry form."""
        return [issue.message for issue in self.issues if issue.field == field]
