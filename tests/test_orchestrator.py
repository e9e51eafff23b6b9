"""
Integration tests for BudgetSession flows.

Storage is in-memory (or a failing stub); no external services.
"""

import asyncio
import json
import pytest
from datetime import datetime
from uuid import uuid4

from pydantic import SecretStr

from budget_tracker.audit import AuditLogger
from budget_tracker.models.audit import AuditEventType
from budget_tracker.models.expense import ExpenseCategory, ExpenseDraft
from budget_tracker.models.report import BudgetStatus, ExportResult
from budget_tracker.orchestrator import BudgetSession, create_session
from budget_tracker.services.export import ExportError, ExportSink
from budget_tracker.services.importers import ImportFileError
from budget_tracker.services.storage import InMemoryStorage, StorageError
from budget_tracker.validation import (
    ExpenseValidationError,
    InvalidLimitError,
    LimitChangeDeniedError,
    LimitChangeGate,
)


class FailingStorage(InMemoryStorage):
    """Storage whose writes always fail."""

    async def set(self, key, blob):
        raise StorageError("disk full")


class DecliningStorage(InMemoryStorage):
    """Storage that reports every write as unsuccessful."""

    async def set(self, key, blob):
        return False


class RecordingSink(ExportSink):
    def __init__(self, outcome=True):
        self.outcome = outcome
        self.received = []

    async def share(self, result: ExportResult) -> bool:
        if isinstance(self.outcome, Exception):
            raise self.outcome
        self.received.append(result)
        return self.outcome


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def session(storage):
    return BudgetSession(
        storage=storage,
        audit_logger=AuditLogger(),
        limit_gate=LimitChangeGate(SecretStr("letmein")),
    )


def _event_types(session):
    return [event.event_type for event in session.audit_logger.recent_events()]


class TestEntryFlows:
    """Tests for adding, deleting and resetting expenses."""

    def test_starts_with_configured_default_limit(self, session):
        assert session.monthly_limit == 1000.0
        assert session.expenses == []

    def test_add_manual_expense(self, session, now):
        expense = session.add_manual_expense("250", "food", description="Lunch", now=now)
        assert session.expenses == [expense]
        assert expense.amount == 250.0
        assert _event_types(session)[0] == AuditEventType.EXPENSE_ADDED

    def test_ids_are_unique(self, session, now):
        first = session.add_manual_expense(10, "food", now=now)
        second = session.add_manual_expense(10, "food", now=now)
        assert first.id != second.id

    def test_invalid_manual_expense_is_not_added(self, session, now):
        with pytest.raises(ExpenseValidationError) as exc_info:
            session.add_manual_expense("", "food", now=now)

        assert exc_info.value.result.messages_for("amount") == ["Please enter an amount"]
        assert session.expenses == []
        assert _event_types(session)[0] == AuditEventType.ENTRY_REJECTED

    def test_expenses_property_is_a_copy(self, session, now):
        session.add_manual_expense(10, "food", now=now)
        session.expenses.clear()
        assert len(session.expenses) == 1

    def test_delete_expense(self, session, now):
        keep = session.add_manual_expense(10, "food", now=now)
        drop = session.add_manual_expense(20, "fuel", now=now)

        assert session.delete_expense(drop.id) is True
        assert session.expenses == [keep]
        assert session.get_expense(drop.id) is None

    def test_delete_unknown_id_is_a_no_op(self, session, now):
        session.add_manual_expense(10, "food", now=now)
        assert session.delete_expense(uuid4()) is False
        assert len(session.expenses) == 1

    def test_reset_keeps_the_limit(self, session, now):
        session.set_monthly_limit(5000, password="letmein")
        session.add_manual_expense(10, "food", now=now)
        session.add_manual_expense(20, "food", now=now)

        assert session.reset_expenses() == 2
        assert session.expenses == []
        assert session.monthly_limit == 5000.0


class TestMonthlyLimit:
    """Tests for the gated limit change."""

    def test_change_with_password(self, session):
        assert session.set_monthly_limit("2000", password="letmein") == 2000.0
        assert session.monthly_limit == 2000.0

    def test_wrong_password_is_denied(self, session):
        with pytest.raises(LimitChangeDeniedError):
            session.set_monthly_limit(2000, password="guess")
        assert session.monthly_limit == 1000.0
        assert _event_types(session)[0] == AuditEventType.LIMIT_CHANGE_DENIED

    def test_invalid_value_is_rejected(self, session):
        with pytest.raises(InvalidLimitError):
            session.set_monthly_limit("-10", password="letmein")
        assert session.monthly_limit == 1000.0

    def test_open_gate_needs_no_password(self, storage):
        session = BudgetSession(storage=storage, limit_gate=LimitChangeGate())
        assert session.set_monthly_limit(300) == 300.0


class TestImportFlows:
    """Tests for spreadsheet and SMS imports through the session."""

    ROWS = [
        {"Amount": 100, "Category": "Groceries", "Date": "2024-06-01"},
        {"Amount": "oops"},
        {"Cost": "45.5", "Type": "Fuel"},
    ]

    def test_preview_commits_nothing(self, session, now):
        result = session.import_spreadsheet_rows(self.ROWS, commit=False, now=now)
        assert result.accepted_count == 2
        assert result.dropped_count == 1
        assert session.expenses == []

    def test_commit_adds_drafts(self, session, now):
        session.import_spreadsheet_rows(self.ROWS, now=now)
        categories = sorted(e.category.value for e in session.expenses)
        assert categories == ["fuel", "groceries"]
        assert AuditEventType.IMPORT_COMPLETED in _event_types(session)

    def test_import_file(self, session, tmp_path, now):
        path = tmp_path / "bank.csv"
        path.write_text("Amount,Category\n12,food\n0,food\n", encoding="utf-8")

        result = session.import_spreadsheet_file(path, now=now)
        assert result.accepted_count == 1
        assert len(session.expenses) == 1

    def test_import_file_failure_is_audited(self, session, tmp_path):
        with pytest.raises(ImportFileError):
            session.import_spreadsheet_file(tmp_path / "missing.xlsx")
        assert _event_types(session)[0] == AuditEventType.IMPORT_FAILED
        assert session.expenses == []

    def test_sms_parse_then_commit(self, session, now):
        result = session.parse_sms("Rs.350 paid to Uber")
        assert session.expenses == []

        expense = session.commit_sms(result, now=now)
        assert expense.amount == 350.0
        assert expense.category == ExpenseCategory.TRAVEL
        assert expense.description == "Rs.350 paid to Uber"

    def test_sms_overrides(self, session, now):
        result = session.parse_sms("Rs.350 paid to Uber")
        expense = session.commit_sms(result, amount="400", category="bills", now=now)
        assert expense.amount == 400.0
        assert expense.category == ExpenseCategory.BILLS

    def test_sms_without_amount_needs_manual_amount(self, session, now):
        result = session.parse_sms("Your OTP is 1234")
        with pytest.raises(ExpenseValidationError):
            session.commit_sms(result, now=now)
        assert session.commit_sms(result, amount=20, now=now).amount == 20.0


class TestSummary:
    """Tests for the dashboard summary."""

    def test_summary_values(self, session, now):
        session.set_monthly_limit(3000, password="letmein")
        session.add_expense(ExpenseDraft(amount=600, category="housing", date=datetime(2024, 6, 1, 10, 0)))
        session.add_expense(ExpenseDraft(amount=300, category="food", date=datetime(2024, 6, 15, 9, 0)))

        summary = session.summary(now)
        assert summary.monthly_spending == 900
        assert summary.remaining_budget == 2100
        assert summary.daily_limit == pytest.approx(131.25)
        assert summary.today_spending == 300
        assert summary.average_daily_spending == pytest.approx(60.0)
        assert summary.projected_monthly_expense == pytest.approx(1800.0)
        assert summary.spending_trend == pytest.approx(50.0)
        assert summary.status == BudgetStatus.BAD
        assert summary.status_color == "#EED668"
        assert summary.score == 90.0
        assert summary.is_over_budget is False
        assert summary.monthly_progress == pytest.approx(30.0)

        assert len(summary.last_days) == 7
        assert summary.last_days[-1].percentage == 100.0
        assert summary.category_totals[ExpenseCategory.HOUSING] == 600
        assert summary.comparison[-1].expected == 1500
        assert summary.comparison[-1].actual == 900

    def test_over_budget(self, session, now):
        session.add_expense(ExpenseDraft(amount=1500, date=datetime(2024, 6, 2)))
        summary = session.summary(now)
        assert summary.is_over_budget is True
        assert summary.daily_limit == 0.0
        assert summary.monthly_progress == 100.0

    def test_unconfigured_limit(self, storage, session, now):
        asyncio.run(storage.set("budgetInfo", {"monthly_limit": 0, "expenses": []}))
        asyncio.run(session.load())

        summary = session.summary(now)
        assert summary.status == BudgetStatus.NOT_CONFIGURED
        assert summary.score == 0.0
        assert summary.daily_limit == 0.0
        assert summary.monthly_progress == 0.0


class TestPersistence:
    """Tests for explicit load and save."""

    def test_save_and_load_round_trip(self, storage, session, now):
        session.set_monthly_limit(4200, password="letmein")
        added = session.add_manual_expense(75, "health", description="Pharmacy", now=now)
        assert asyncio.run(session.save()) is True

        restored = BudgetSession(storage=storage)
        assert asyncio.run(restored.load()) is True
        assert restored.monthly_limit == 4200.0
        assert restored.expenses == [added]

    def test_load_with_nothing_stored(self, session, now):
        session.add_manual_expense(10, "food", now=now)
        assert asyncio.run(session.load()) is False
        assert len(session.expenses) == 1

    def test_failed_save_keeps_state(self, now):
        session = BudgetSession(storage=FailingStorage())
        session.add_manual_expense(10, "food", now=now)

        assert asyncio.run(session.save()) is False
        assert len(session.expenses) == 1
        assert _event_types(session)[0] == AuditEventType.SAVE_FAILED

    def test_declined_save_is_reported(self, now):
        storage = DecliningStorage()
        session = BudgetSession(storage=storage)
        session.add_manual_expense(10, "food", now=now)

        assert asyncio.run(session.save()) is False
        assert len(session.expenses) == 1
        latest = session.audit_logger.recent_events()[0]
        assert latest.event_type == AuditEventType.SAVE_FAILED
        assert latest.error_message == "Backend declined the write"
        assert AuditEventType.STATE_SAVED not in _event_types(session)

    def test_failed_load_keeps_state(self, tmp_path, now):
        from budget_tracker.services.storage import JsonFileStorage

        (tmp_path / "budgetInfo.json").write_text("{broken", encoding="utf-8")
        session = BudgetSession(storage=JsonFileStorage(tmp_path))
        session.add_manual_expense(10, "food", now=now)

        assert asyncio.run(session.load()) is False
        assert len(session.expenses) == 1
        assert _event_types(session)[0] == AuditEventType.LOAD_FAILED

    def test_session_without_storage(self, now):
        session = create_session(use_storage=False)
        session.add_manual_expense(10, "food", now=now)
        assert asyncio.run(session.save()) is False
        assert asyncio.run(session.load()) is False

    def test_saved_file_is_readable_json(self, tmp_path, monkeypatch, now):
        from budget_tracker.config import get_settings

        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
        get_settings.cache_clear()

        session = create_session()
        session.add_manual_expense(10, "food", now=now)
        assert asyncio.run(session.save()) is True

        blob = json.loads((tmp_path / "data" / "budgetInfo.json").read_text(encoding="utf-8"))
        assert blob["monthly_limit"] == 1000.0
        assert blob["expenses"][0]["category"] == "food"


class TestExportFlows:
    """Tests for export and share with fallback."""

    def test_export(self, session, now):
        session.add_manual_expense(10, "food", now=now)
        result = session.export(now=now)
        assert result.filename == "expenses_2024-06-15.csv"
        assert result.row_count == 1

    def test_share_success(self, session, now):
        session.add_manual_expense(10, "food", now=now)
        sink = RecordingSink()

        result, shared = asyncio.run(session.share_export(sink, now=now))
        assert shared is True
        assert sink.received == [result]
        assert _event_types(session)[0] == AuditEventType.EXPORT_COMPLETED

    def test_share_failure_falls_back_to_download(self, session, now):
        session.add_manual_expense(10, "food", now=now)
        sink = RecordingSink(ExportError("share sheet unavailable"))

        result, shared = asyncio.run(session.share_export(sink, now=now))
        assert shared is False
        assert result.data.startswith("Date,Amount,Category,Description")
        assert _event_types(session)[0] == AuditEventType.EXPORT_FAILED

    def test_share_declined(self, session, now):
        result, shared = asyncio.run(session.share_export(RecordingSink(False), now=now))
        assert shared is False
        assert result.row_count == 0
