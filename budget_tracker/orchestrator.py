"""
Budget Session for Budget Tracker

This module ties the components together. A BudgetSession owns the
working set (monthly limit plus expenses) for one application session
and defines the flows for:
1. Entry (manual form, spreadsheet import, SMS import) -> commit
2. Analytics (summary for the dashboard)
3. Persistence (explicit load/save)
4. Export (payload, optional share with download fallback)

DESIGN DECISION: The session is an explicit object handed its
collaborators in the constructor. Nothing is saved implicitly; the
owner calls save() when it wants the snapshot written.

The in-memory working set is always the source of truth. A failed save
or load is logged and reported, never allowed to corrupt it.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

from budget_tracker.analytics.aggregation import (
    average_daily_spending,
    daily_limit,
    daily_spending,
    monthly_spending,
    projected_monthly_expense,
)
from budget_tracker.analytics.dates import resolve_now
from budget_tracker.analytics.scoring import (
    assess_budget,
    budget_score,
    monthly_progress,
    spending_trend,
)
from budget_tracker.analytics.series import (
    category_breakdown,
    cumulative_comparison,
    daily_spending_series,
)
from budget_tracker.audit import AuditLogger
from budget_tracker.config import Settings, get_settings
from budget_tracker.models.audit import AuditEventBuilder
from budget_tracker.models.expense import (
    BudgetInfo,
    Expense,
    ExpenseDraft,
    ImportResult,
    SmsParseResult,
)
from budget_tracker.models.report import BudgetSummary, ExportFormat, ExportResult
from budget_tracker.services.export import ExportError, ExportSink, export_expenses
from budget_tracker.services.importers import (
    ImportFileError,
    import_spreadsheet_file,
    map_spreadsheet_rows,
    parse_sms,
)
from budget_tracker.services.storage import (
    KeyValueStorageInterface,
    StorageError,
    create_storage,
    decode_budget_info,
    encode_budget_info,
)
from budget_tracker.validation import (
    ExpenseValidationError,
    ExpenseValidator,
    LimitChangeDeniedError,
    LimitChangeGate,
)


class BudgetSession:
    """
    Owns the monthly limit and the expense list for one session.

    Flow:
    1. load() -> restore the persisted snapshot (if any)
    2. add / import / delete / reset / set_monthly_limit -> mutate in memory
    3. summary() -> derive everything the dashboard shows
    4. save() -> write the snapshot
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[ExpenseValidator] = None,
        limit_gate: Optional[LimitChangeGate] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._validator = validator or ExpenseValidator()
        self._limit_gate = limit_gate or LimitChangeGate.from_settings()

        budget_settings = self._settings.budget
        self._storage_key = self._settings.storage.budget_key
        self._trend_window = budget_settings.trend_window_days
        self._monthly_limit = budget_settings.default_monthly_limit
        self._expenses: list[Expense] = []

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def monthly_limit(self) -> float:
        return self._monthly_limit

    @property
    def expenses(self) -> list[Expense]:
        """A copy of the working set; mutate through the session only."""
        return list(self._expenses)

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def budget_info(self) -> BudgetInfo:
        return BudgetInfo(monthly_limit=self._monthly_limit, expenses=list(self._expenses))

    def get_expense(self, expense_id: UUID) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    # -------------------------------------------------------------------------
    # Entry
    # -------------------------------------------------------------------------

    def add_expense(self, draft: ExpenseDraft, source: str = "manual") -> Expense:
        """Commit a draft under a fresh id."""
        expense = Expense.from_draft(draft)
        self._expenses.append(expense)
        self._audit_logger.log(AuditEventBuilder.expense_added(
            expense_id=expense.id,
            amount=expense.amount,
            category=expense.category.value,
            source=source,
        ))
        return expense

    def add_expenses(self, drafts: Iterable[ExpenseDraft], source: str = "import") -> list[Expense]:
        return [self.add_expense(draft, source=source) for draft in drafts]

    def add_manual_expense(
        self,
        amount: Any,
        category: Any,
        date: Optional[datetime] = None,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Expense:
        """
        Validate a form submission and commit it.

        Raises:
            ExpenseValidationError: With field-level issues if the entry is invalid
        """
        result = self._validator.validate_entry(
            amount=amount,
            category=category,
            date=date,
            description=description,
            now=now,
        )
        if not result.is_valid:
            self._audit_logger.log(AuditEventBuilder.entry_rejected([
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
            ]))
            raise ExpenseValidationError(result)

        return self.add_expense(result.draft, source="manual")

    def delete_expense(self, expense_id: UUID) -> bool:
        """Remove an expense; False if no expense has that id."""
        remaining = [e for e in self._expenses if e.id != expense_id]
        found = len(remaining) != len(self._expenses)
        self._expenses = remaining
        self._audit_logger.log(AuditEventBuilder.expense_deleted(expense_id, found))
        return found

    def reset_expenses(self) -> int:
        """Clear every expense (the limit is kept). Returns how many were removed."""
        removed = len(self._expenses)
        self._expenses = []
        self._audit_logger.log(AuditEventBuilder.expenses_reset(removed))
        return removed

    def set_monthly_limit(self, limit: Any, password: Optional[str] = None) -> float:
        """
        Change the monthly limit.

        Raises:
            LimitChangeDeniedError: If the gate rejects the password
            InvalidLimitError: If the limit is not a positive finite number
        """
        if not self._limit_gate.check(password):
            self._audit_logger.log(AuditEventBuilder.limit_change_denied("Invalid password"))
            raise LimitChangeDeniedError("Invalid password")

        new_limit = self._validator.validate_limit(limit)
        old_limit = self._monthly_limit
        self._monthly_limit = new_limit
        self._audit_logger.log(AuditEventBuilder.limit_changed(old_limit, new_limit))
        return new_limit

    # -------------------------------------------------------------------------
    # Imports
    # -------------------------------------------------------------------------

    def import_spreadsheet_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        commit: bool = True,
        now: Optional[datetime] = None,
    ) -> ImportResult:
        """
        Map spreadsheet rows to drafts and (optionally) commit them.

        With commit=False this is a preview: nothing enters the working set.
        """
        result = map_spreadsheet_rows(rows, now)
        if commit:
            self.add_expenses(result.drafts, source="spreadsheet")
        self._audit_logger.log(AuditEventBuilder.import_completed(
            source="spreadsheet",
            accepted=result.accepted_count,
            dropped=result.dropped_count,
            committed=commit,
        ))
        return result

    def import_spreadsheet_file(
        self,
        path: str | Path,
        commit: bool = True,
        now: Optional[datetime] = None,
    ) -> ImportResult:
        """
        Read a spreadsheet file and import its rows.

        Raises:
            ImportFileError: If the file cannot be read
        """
        try:
            result = import_spreadsheet_file(path, now)
        except ImportFileError as e:
            self._audit_logger.log(AuditEventBuilder.import_failed("spreadsheet", str(e)))
            raise

        if commit:
            self.add_expenses(result.drafts, source="spreadsheet")
        self._audit_logger.log(AuditEventBuilder.import_completed(
            source="spreadsheet",
            accepted=result.accepted_count,
            dropped=result.dropped_count,
            committed=commit,
        ))
        return result

    def parse_sms(self, text: str) -> SmsParseResult:
        """Suggest an expense from SMS text. Nothing is committed."""
        result = parse_sms(text, self._settings.importing.sms_description_length)
        self._audit_logger.log(AuditEventBuilder.sms_parsed(
            found_amount=result.success,
            category=result.category.value,
        ))
        return result

    def commit_sms(
        self,
        result: SmsParseResult,
        amount: Any = None,
        category: Any = None,
        description: Optional[str] = None,
        date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Expense:
        """
        Commit an SMS suggestion after the user's overrides.

        Overrides go through the same validation as manual entry.

        Raises:
            ExpenseValidationError: If the final values are invalid
        """
        return self.add_manual_expense(
            amount=amount if amount is not None else result.amount,
            category=category if category is not None else result.category,
            date=date,
            description=description if description is not None else result.description,
            now=now,
        )

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def summary(self, now: Optional[datetime] = None) -> BudgetSummary:
        """Everything the dashboard needs, derived from the current working set."""
        now = resolve_now(now)
        expenses = self._expenses
        limit = self._monthly_limit

        month_total = monthly_spending(expenses, now)
        remaining = limit - month_total
        per_day = daily_limit(remaining, now)
        trend = spending_trend(expenses, now, self._trend_window)
        assessment = assess_budget(month_total, limit, trend, now)

        return BudgetSummary(
            generated_at=now,
            monthly_limit=limit,
            monthly_spending=month_total,
            remaining_budget=remaining,
            monthly_progress=monthly_progress(month_total, limit),
            daily_limit=per_day,
            today_spending=daily_spending(expenses, now),
            average_daily_spending=average_daily_spending(expenses, now),
            projected_monthly_expense=projected_monthly_expense(expenses, now),
            spending_trend=trend,
            status=assessment.status,
            status_color=assessment.color,
            score=budget_score(month_total, limit, trend, now),
            last_days=daily_spending_series(expenses, per_day, now, self._trend_window),
            category_totals=category_breakdown(expenses, now, month_only=True),
            comparison=cumulative_comparison(expenses, limit, now),
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def load(self) -> bool:
        """
        Replace the working set with the persisted snapshot.

        Returns False (and keeps the current state) if there is no storage,
        nothing stored, or the snapshot cannot be read.
        """
        if self._storage is None:
            return False

        try:
            blob = await self._storage.get(self._storage_key)
            if blob is None:
                self._audit_logger.log(AuditEventBuilder.state_loaded(
                    self._storage_key, 0, found=False,
                ))
                return False
            info = decode_budget_info(blob, default_limit=self._monthly_limit)
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.load_failed(self._storage_key, str(e)))
            return False

        self._monthly_limit = info.monthly_limit
        self._expenses = list(info.expenses)
        self._audit_logger.log(AuditEventBuilder.state_loaded(
            self._storage_key, len(self._expenses), found=True,
        ))
        return True

    async def save(self) -> bool:
        """
        Write the working set to storage.

        Returns False if there is no storage or the write failed; the
        in-memory state is untouched either way.
        """
        if self._storage is None:
            return False

        try:
            stored = await self._storage.set(
                self._storage_key, encode_budget_info(self.budget_info()),
            )
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.save_failed(self._storage_key, str(e)))
            return False

        if not stored:
            self._audit_logger.log(AuditEventBuilder.save_failed(
                self._storage_key, "Backend declined the write",
            ))
            return False

        self._audit_logger.log(AuditEventBuilder.state_saved(
            self._storage_key, len(self._expenses),
        ))
        return True

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export(
        self,
        export_format: Optional[ExportFormat | str] = None,
        include_description: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> ExportResult:
        return export_expenses(self._expenses, export_format, include_description, now)

    async def share_export(
        self,
        sink: ExportSink,
        export_format: Optional[ExportFormat | str] = None,
        include_description: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> tuple[ExportResult, bool]:
        """
        Build an export and hand it to a sink.

        Returns:
            (export_result, shared). When shared is False the caller
            should offer export_result as a direct download instead.
        """
        result = self.export(export_format, include_description, now)

        try:
            shared = await sink.share(result)
        except ExportError as e:
            self._audit_logger.log(AuditEventBuilder.export_failed(result.filename, str(e)))
            return result, False

        if shared:
            self._audit_logger.log(AuditEventBuilder.export_completed(
                result.filename, result.row_count,
            ))
        else:
            self._audit_logger.log(AuditEventBuilder.export_failed(
                result.filename, "Sink declined the export",
            ))
        return result, shared


def create_session(use_storage: bool = True) -> BudgetSession:
    """
    Factory for a session wired from settings.

    Args:
        use_storage: Whether to attach the configured storage backend.
                    Set to False for a purely in-memory session.
    """
    storage = create_storage() if use_storage else None
    return BudgetSession(storage=storage, audit_logger=AuditLogger())
