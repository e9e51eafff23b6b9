"""
Data Models Package

This package contains all Pydantic models used in the Budget Tracker.
All data flowing through the system must conform to these schemas.
"""

from budget_tracker.models.expense import (
    CATEGORY_LABELS,
    BudgetInfo,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ImportResult,
    RowRejection,
    SmsParseResult,
    ValidationIssue,
    ValidationResult,
    resolve_category,
)
from budget_tracker.models.report import (
    BudgetStatus,
    BudgetSummary,
    ComparisonPoint,
    DailySpendingPoint,
    ExportFormat,
    ExportResult,
    StatusAssessment,
)
from budget_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CATEGORY_LABELS",
    "BudgetInfo",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "ImportResult",
    "RowRejection",
    "SmsParseResult",
    "ValidationIssue",
    "ValidationResult",
    "resolve_category",
    # Report models
    "BudgetStatus",
    "BudgetSummary",
    "ComparisonPoint",
    "DailySpendingPoint",
    "ExportFormat",
    "ExportResult",
    "StatusAssessment",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
