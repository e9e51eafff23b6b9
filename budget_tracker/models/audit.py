"""
Audit Models for Budget Tracker

Every change to the working set, and every boundary failure, is logged.
This provides:
1. Traceability of what happened to the user's expenses
2. Debugging information when imports or saves go wrong
3. A record of monthly limit changes (and denied attempts)

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Working set
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSES_RESET = "expenses_reset"
    ENTRY_REJECTED = "entry_rejected"

    # Budget limit
    LIMIT_CHANGED = "limit_changed"
    LIMIT_CHANGE_DENIED = "limit_change_denied"

    # Imports
    IMPORT_COMPLETED = "import_completed"
    IMPORT_FAILED = "import_failed"
    SMS_PARSED = "sms_parsed"

    # Persistence
    STATE_SAVED = "state_saved"
    STATE_LOADED = "state_loaded"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"

    # Export
    EXPORT_COMPLETED = "export_completed"
    EXPORT_FAILED = "export_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'budget', 'import')"
    )
    entity_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, amount, category, "manual")
        event = AuditEventBuilder.save_failed(key, error_message)
    """

    @staticmethod
    def expense_added(
        expense_id: UUID,
        amount: float,
        category: str,
        source: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense added from {source}: {amount:.2f} ({category})",
            details={
                "amount": amount,
                "category": category,
                "source": source,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(expense_id: UUID, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            severity=AuditSeverity.INFO if found else AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted" if found else "Delete requested for unknown expense",
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def expenses_reset(removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            description=f"All expenses cleared ({removed} removed)",
            details={"removed": removed},
            is_user_action=True,
        )

    @staticmethod
    def entry_rejected(issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            description=f"Manual entry rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def limit_changed(old_limit: float, new_limit: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LIMIT_CHANGED,
            entity_type="budget",
            description=f"Monthly limit changed: {old_limit:.2f} -> {new_limit:.2f}",
            details={
                "old_limit": old_limit,
                "new_limit": new_limit,
            },
            is_user_action=True,
        )

    @staticmethod
    def limit_change_denied(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LIMIT_CHANGE_DENIED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            description="Monthly limit change denied",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def import_completed(
        source: str,
        accepted: int,
        dropped: int,
        committed: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            entity_type="import",
            description=f"{source} import: {accepted} accepted, {dropped} dropped",
            details={
                "source": source,
                "accepted": accepted,
                "dropped": dropped,
                "committed": committed,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_failed(source: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="import",
            description=f"{source} import failed",
            error_message=error_message,
            details={"source": source},
            is_user_action=True,
        )

    @staticmethod
    def sms_parsed(found_amount: bool, category: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SMS_PARSED,
            severity=AuditSeverity.INFO if found_amount else AuditSeverity.WARNING,
            entity_type="import",
            description="SMS parsed" if found_amount else "SMS parsed without an amount",
            details={
                "found_amount": found_amount,
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def state_saved(key: str, expense_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="budget",
            description=f"Budget saved under {key!r}",
            details={"key": key, "expense_count": expense_count},
        )

    @staticmethod
    def state_loaded(key: str, expense_count: int, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="budget",
            description=(
                f"Budget loaded from {key!r}" if found
                else f"No saved budget under {key!r}, starting fresh"
            ),
            details={"key": key, "expense_count": expense_count, "found": found},
        )

    @staticmethod
    def save_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="budget",
            description=f"Saving budget under {key!r} failed",
            error_message=error_message,
            details={"key": key},
        )

    @staticmethod
    def load_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="budget",
            description=f"Loading budget from {key!r} failed",
            error_message=error_message,
            details={"key": key},
        )

    @staticmethod
    def export_completed(filename: str, row_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_COMPLETED,
            entity_type="export",
            description=f"Expenses exported to {filename}",
            details={"filename": filename, "row_count": row_count},
            is_user_action=True,
        )

    @staticmethod
    def export_failed(filename: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="export",
            description=f"Sharing {filename} failed, falling back to download",
            error_message=error_message,
            details={"filename": filename},
            is_user_action=True,
        )
