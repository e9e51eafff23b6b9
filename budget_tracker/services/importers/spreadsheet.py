"""
Spreadsheet Import

Turns rows with arbitrary column headers into expense drafts.

DESIGN DECISION: Header matching is a declarative table. Each field has
an ordered tuple of candidate header names; the first one present in a
row with a non-empty value wins. No fuzzy matching, no reflection.

Rows are best-effort:
- amount missing, non-numeric or not positive -> row dropped
- category missing or unknown -> OTHERS
- description missing -> ""
- date missing or unparseable -> now
"""

import math
import numbers
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import structlog
from pydantic import ValidationError

from budget_tracker.analytics.dates import resolve_now
from budget_tracker.config import get_settings
from budget_tracker.models.expense import (
    ExpenseCategory,
    ExpenseDraft,
    ImportResult,
    RowRejection,
    resolve_category,
    to_local_datetime,
)

logger = structlog.get_logger(__name__)


FIELD_CANDIDATES: dict[str, tuple[str, ...]] = {
    "amount": (
        "Amount", "amount", "AMOUNT",
        "Cost", "cost",
        "Price", "price",
        "Value", "value",
    ),
    "category": (
        "Category", "category", "CATEGORY",
        "Type", "type",
        "Expense Type", "expense type",
    ),
    "description": (
        "Description", "description",
        "DESC", "desc",
        "Note", "note",
        "Details", "details",
    ),
    "date": (
        "Date", "date", "DATE",
        "Transaction Date", "transaction date",
        "Purchase Date", "purchase date",
    ),
}

# Spreadsheet serial day 0
SERIAL_DATE_EPOCH = datetime(1899, 12, 30)

DESCRIPTION_MAX_LENGTH = 500


class ImportFileError(Exception):
    """A spreadsheet file could not be read at all."""
    pass


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def find_value(row: Mapping[str, Any], candidates: Iterable[str]) -> Any:
    """Value of the first candidate header present in the row, else None."""
    for key in candidates:
        if key in row and not _is_missing(row[key]):
            return row[key]
    return None


def parse_amount(value: Any) -> Optional[float]:
    """Numeric amount from a cell, or None if it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, numbers.Real):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None

    return amount if math.isfinite(amount) else None


def parse_date(value: Any, now: datetime) -> datetime:
    """
    Interpret a date cell.

    Numbers are spreadsheet serial dates (days since 1899-12-30),
    datetimes and dates are taken as-is, strings are parsed as calendar
    dates. Anything else, or anything that fails, falls back to ``now``.
    """
    if value is None or isinstance(value, bool):
        return now

    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        return to_local_datetime(value)
    if isinstance(value, date):
        return datetime.combine(value, time())

    if isinstance(value, numbers.Real):
        if not math.isfinite(value) or value <= 0:
            return now
        try:
            return SERIAL_DATE_EPOCH + timedelta(days=float(value))
        except OverflowError:
            logger.debug("serial_date_out_of_range", value=value)
            return now

    if isinstance(value, str):
        try:
            parsed = pd.to_datetime(value.strip(), errors="coerce")
        except (TypeError, ValueError, OverflowError):
            parsed = pd.NaT
        if pd.isna(parsed):
            logger.debug("date_unparseable", value=value)
            return now
        return to_local_datetime(parsed.to_pydatetime())

    return now


def map_spreadsheet_row(
    row: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> ExpenseDraft:
    """
    Map one row to a draft.

    Raises:
        ValueError: If the row has no usable positive amount
    """
    now = resolve_now(now)

    amount = parse_amount(find_value(row, FIELD_CANDIDATES["amount"]))
    if amount is None:
        raise ValueError("missing or non-numeric amount")
    if amount <= 0:
        raise ValueError(f"non-positive amount {amount}")

    raw_category = find_value(row, FIELD_CANDIDATES["category"])
    category = (
        resolve_category(raw_category)
        if isinstance(raw_category, str)
        else ExpenseCategory.OTHERS
    )

    raw_description = find_value(row, FIELD_CANDIDATES["description"])
    description = raw_description if isinstance(raw_description, str) else ""

    try:
        return ExpenseDraft(
            amount=amount,
            category=category,
            date=parse_date(find_value(row, FIELD_CANDIDATES["date"]), now),
            description=description[:DESCRIPTION_MAX_LENGTH],
        )
    except ValidationError as e:
        raise ValueError(f"invalid row: {e.error_count()} errors")


def map_spreadsheet_rows(
    rows: Iterable[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> ImportResult:
    """Map every row, keeping the valid drafts and recording why others were dropped."""
    now = resolve_now(now)
    result = ImportResult()

    for index, row in enumerate(rows):
        try:
            result.drafts.append(map_spreadsheet_row(row, now))
        except ValueError as e:
            result.rejected.append(RowRejection(row_index=index, reason=str(e)))
            logger.debug("spreadsheet_row_dropped", row_index=index, reason=str(e))

    logger.info(
        "spreadsheet_rows_mapped",
        accepted=result.accepted_count,
        dropped=result.dropped_count,
    )
    return result


def read_spreadsheet_file(path: str | Path) -> list[dict[str, Any]]:
    """
    Load the first sheet of an .xlsx/.xls/.csv file as a list of row dicts.

    Empty cells come back as None.

    Raises:
        ImportFileError: For unsupported, oversized or unreadable files
    """
    settings = get_settings().importing
    path = Path(path)
    extension = path.suffix.lower().lstrip(".")

    if extension not in settings.supported_formats_list:
        raise ImportFileError(
            f"Unsupported file type: .{extension}. "
            f"Allowed: {', '.join(settings.supported_formats_list)}"
        )

    try:
        size = path.stat().st_size
    except OSError as e:
        raise ImportFileError(f"Cannot open {path}: {e}")
    if size > settings.max_upload_size_bytes:
        raise ImportFileError(
            f"File is too large ({size} bytes, limit {settings.max_upload_size_bytes})"
        )

    try:
        if extension == "csv":
            frame = pd.read_csv(path)
        else:
            frame = pd.read_excel(path, sheet_name=0)
    except Exception as e:
        # pandas and its engines raise many unrelated exception types
        raise ImportFileError(f"Could not parse {path.name}: {e}")

    frame.columns = [str(column).strip() for column in frame.columns]
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict(orient="records")


def import_spreadsheet_file(
    path: str | Path,
    now: Optional[datetime] = None,
) -> ImportResult:
    """Read a spreadsheet file and map its rows."""
    return map_spreadsheet_rows(read_spreadsheet_file(path), now)
