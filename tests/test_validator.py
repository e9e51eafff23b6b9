"""Tests for manual entry validation and the limit gate."""

import pytest
from datetime import datetime, timedelta

from pydantic import SecretStr

from budget_tracker.models.expense import ExpenseCategory
from budget_tracker.validation import (
    ExpenseValidationError,
    ExpenseValidator,
    InvalidLimitError,
    LimitChangeGate,
)


@pytest.fixture
def validator():
    return ExpenseValidator()


class TestEntryValidation:
    """Tests for the two-pass manual entry check."""

    def test_valid_entry(self, validator, now):
        result = validator.validate_entry("250", "food", description="Lunch", now=now)
        assert result.is_valid is True
        assert result.issues == []
        assert result.draft.amount == 250.0
        assert result.draft.category == ExpenseCategory.FOOD
        assert result.draft.date == now

    def test_entry_with_explicit_date(self, validator, now):
        when = datetime(2024, 6, 2, 8, 0)
        result = validator.validate_entry(10, ExpenseCategory.HEALTH, date=when, now=now)
        assert result.draft.date == when

    @pytest.mark.parametrize("amount, message", [
        (None, "Please enter an amount"),
        ("", "Please enter an amount"),
        ("abc", "Please enter a valid amount"),
        ("nan", "Please enter a valid amount"),
        ("inf", "Please enter a valid amount"),
        ("0", "Amount must be greater than zero"),
        (-5, "Amount must be greater than zero"),
    ])
    def test_invalid_amounts(self, validator, amount, message, now):
        result = validator.validate_entry(amount, "food", now=now)
        assert result.is_valid is False
        assert result.draft is None
        assert result.messages_for("amount") == [message]

    def test_missing_category(self, validator, now):
        result = validator.validate_entry(10, "", now=now)
        assert result.messages_for("category") == ["Please select a category"]

    def test_unknown_category(self, validator, now):
        result = validator.validate_entry(10, "lottery", now=now)
        assert result.messages_for("category") == ["Unknown category: lottery"]

    def test_reports_every_field(self, validator, now):
        result = validator.validate_entry("", None, now=now)
        assert result.error_count == 2

    def test_overlong_description(self, validator, now):
        result = validator.validate_entry(10, "food", description="x" * 501, now=now)
        assert result.is_valid is False
        assert result.messages_for("description")

    def test_large_amount_is_a_warning(self, validator, now):
        result = validator.validate_entry(2_000_000, "investment", now=now)
        assert result.is_valid is True
        assert result.has_errors is False
        assert len(result.warnings) == 1

    def test_future_date_is_a_warning(self, validator, now):
        result = validator.validate_entry(10, "food", date=now + timedelta(days=5), now=now)
        assert result.is_valid is True
        assert result.messages_for("date")

    def test_validation_error_carries_result(self, validator, now):
        result = validator.validate_entry("abc", "food", now=now)
        error = ExpenseValidationError(result)
        assert error.result is result
        assert "Please enter a valid amount" in str(error)


class TestLimitValidation:
    """Tests for monthly limit values."""

    @pytest.mark.parametrize("value, expected", [
        ("1500", 1500.0),
        (2500, 2500.0),
        (99.5, 99.5),
    ])
    def test_valid_limits(self, validator, value, expected):
        assert validator.validate_limit(value) == expected

    @pytest.mark.parametrize("value", [None, "", "x", "0", -1, "inf", True])
    def test_invalid_limits(self, validator, value):
        with pytest.raises(InvalidLimitError, match="Please enter a valid amount"):
            validator.validate_limit(value)


class TestLimitChangeGate:
    """Tests for the limit-change credential check."""

    def test_open_without_secret(self):
        gate = LimitChangeGate()
        assert gate.is_open is True
        assert gate.check(None) is True

    def test_open_with_empty_secret(self):
        assert LimitChangeGate(SecretStr("")).is_open is True

    def test_closed_gate(self):
        gate = LimitChangeGate(SecretStr("letmein"))
        assert gate.is_open is False
        assert gate.check("letmein") is True
        assert gate.check("wrong") is False
        assert gate.check(None) is False

    def test_from_settings(self, monkeypatch):
        from budget_tracker.config import get_settings

        monkeypatch.setenv("BUDGET_LIMIT_PASSWORD", "s3cret")
        get_settings.cache_clear()

        gate = LimitChangeGate.from_settings()
        assert gate.check("s3cret") is True
        assert gate.check("nope") is False
