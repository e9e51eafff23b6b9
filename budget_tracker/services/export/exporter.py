"""
Expense Export

Produces delimited text or JSON plus a dated filename. Sharing the
result is delegated to an ExportSink; when sharing fails the caller
still has the payload and can offer it as a plain download.
"""

import csv
import io
import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from budget_tracker.analytics.dates import resolve_now
from budget_tracker.config import get_settings
from budget_tracker.models.expense import Expense, ImportResult
from budget_tracker.models.report import ExportFormat, ExportResult
from budget_tracker.services.importers.spreadsheet import map_spreadsheet_rows


CSV_HEADERS = ["Date", "Amount", "Category", "Description"]


class ExportError(Exception):
    """Sharing an export failed."""
    pass


class ExportSink(ABC):
    """Where a finished export goes (share sheet, download folder, ...)."""

    @abstractmethod
    async def share(self, result: ExportResult) -> bool:
        """
        Hand the export to the host.

        Raises:
            ExportError: If the host could not take it
        """
        pass


def to_delimited_text(
    expenses: Sequence[Expense],
    include_description: bool = True,
    date_format: Optional[str] = None,
) -> str:
    """
    CSV text with a header row and one row per expense.

    Fields containing commas, quotes or newlines are quoted.
    """
    date_format = date_format or get_settings().export.date_format
    headers = CSV_HEADERS if include_description else CSV_HEADERS[:-1]

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)

    for expense in expenses:
        row = [
            expense.date.strftime(date_format),
            f"{expense.amount:.2f}",
            expense.category.value,
        ]
        if include_description:
            row.append(expense.description)
        writer.writerow(row)

    return buffer.getvalue().rstrip("\n")


def read_delimited_text(text: str, now: Optional[datetime] = None) -> ImportResult:
    """Read CSV produced by ``to_delimited_text`` (or any CSV) back into drafts."""
    reader = csv.DictReader(io.StringIO(text))
    return map_spreadsheet_rows(reader, now)


def to_json_text(expenses: Sequence[Expense], include_description: bool = True) -> str:
    """JSON array of expenses with ISO-8601 dates."""
    records = []
    for expense in expenses:
        record = {
            "id": str(expense.id),
            "date": expense.date.isoformat(),
            "amount": round(expense.amount, 2),
            "category": expense.category.value,
        }
        if include_description:
            record["description"] = expense.description
        records.append(record)

    return json.dumps(records, ensure_ascii=False, indent=2)


def export_filename(export_format: ExportFormat, now: Optional[datetime] = None) -> str:
    """``expenses_<YYYY-MM-DD>.<ext>``"""
    return f"expenses_{resolve_now(now).date().isoformat()}.{export_format.value}"


def export_expenses(
    expenses: Sequence[Expense],
    export_format: Optional[ExportFormat | str] = None,
    include_description: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> ExportResult:
    """Build an export payload using configured defaults for anything not given."""
    settings = get_settings().export
    export_format = ExportFormat(export_format or settings.default_format)
    if include_description is None:
        include_description = settings.include_description

    if export_format is ExportFormat.CSV:
        data = to_delimited_text(expenses, include_description, settings.date_format)
    else:
        data = to_json_text(expenses, include_description)

    return ExportResult(
        data=data,
        filename=export_filename(export_format, now),
        format=export_format,
        row_count=len(expenses),
    )
