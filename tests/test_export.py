"""Tests for delimited-text and JSON export."""

import json
import pytest
from datetime import datetime

from budget_tracker.models.expense import Expense, ExpenseCategory
from budget_tracker.models.report import ExportFormat
from budget_tracker.services.export import (
    export_expenses,
    export_filename,
    read_delimited_text,
    to_delimited_text,
)


@pytest.fixture
def expenses():
    return [
        Expense(
            amount=12.5,
            category=ExpenseCategory.FOOD,
            date=datetime(2024, 6, 10, 19, 30),
            description='Dinner, with "friends"',
        ),
        Expense(
            amount=300,
            category=ExpenseCategory.BILLS,
            date=datetime(2024, 6, 11),
            description="Electricity",
        ),
    ]


class TestDelimitedText:
    """Tests for CSV output."""

    def test_header_and_rows(self, expenses):
        lines = to_delimited_text(expenses).split("\n")
        assert lines[0] == "Date,Amount,Category,Description"
        assert lines[1] == '06/10/2024,12.50,food,"Dinner, with ""friends"""'
        assert lines[2] == "06/11/2024,300.00,bills,Electricity"
        assert len(lines) == 3

    def test_without_description(self, expenses):
        lines = to_delimited_text(expenses, include_description=False).split("\n")
        assert lines[0] == "Date,Amount,Category"
        assert lines[2] == "06/11/2024,300.00,bills"

    def test_custom_date_format(self, expenses):
        lines = to_delimited_text(expenses, date_format="%Y-%m-%d").split("\n")
        assert lines[1].startswith("2024-06-10,")

    def test_empty_list_is_header_only(self):
        assert to_delimited_text([]) == "Date,Amount,Category,Description"

    def test_reads_back_through_the_spreadsheet_importer(self, expenses, now):
        result = read_delimited_text(to_delimited_text(expenses), now)
        assert result.accepted_count == 2
        first = result.drafts[0]
        assert first.amount == 12.5
        assert first.category == ExpenseCategory.FOOD
        assert first.description == 'Dinner, with "friends"'
        assert first.date == datetime(2024, 6, 10)


class TestExportPayload:
    """Tests for the export result handed to a sink."""

    def test_filename(self, now):
        assert export_filename(ExportFormat.CSV, now) == "expenses_2024-06-15.csv"
        assert export_filename(ExportFormat.JSON, now) == "expenses_2024-06-15.json"

    def test_default_export_is_csv(self, expenses, now):
        result = export_expenses(expenses, now=now)
        assert result.format == ExportFormat.CSV
        assert result.filename == "expenses_2024-06-15.csv"
        assert result.row_count == 2
        assert result.mime_type == "text/csv;charset=utf-8"

    def test_json_export(self, expenses, now):
        result = export_expenses(expenses, "json", now=now)
        records = json.loads(result.data)
        assert result.format == ExportFormat.JSON
        assert records[0]["amount"] == 12.5
        assert records[0]["date"] == "2024-06-10T19:30:00"
        assert records[1]["category"] == "bills"
        assert records[0]["id"] == str(expenses[0].id)

    def test_json_export_without_description(self, expenses, now):
        result = export_expenses(expenses, ExportFormat.JSON, include_description=False, now=now)
        assert "description" not in json.loads(result.data)[0]

    def test_configured_defaults(self, monkeypatch, expenses, now):
        from budget_tracker.config import get_settings

        monkeypatch.setenv("EXPORT_DEFAULT_FORMAT", "json")
        monkeypatch.setenv("EXPORT_INCLUDE_DESCRIPTION", "false")
        get_settings.cache_clear()

        result = export_expenses(expenses, now=now)
        assert result.format == ExportFormat.JSON
        assert "description" not in json.loads(result.data)[0]

    def test_unknown_format(self, expenses):
        with pytest.raises(ValueError):
            export_expenses(expenses, "pdf")
