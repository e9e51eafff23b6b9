"""Export services: delimited text, JSON and the share boundary."""

from budget_tracker.services.export.exporter import (
    CSV_HEADERS,
    ExportError,
    ExportSink,
    export_expenses,
    export_filename,
    read_delimited_text,
    to_delimited_text,
    to_json_text,
)

__all__ = [
    "CSV_HEADERS",
    "ExportError",
    "ExportSink",
    "export_expenses",
    "export_filename",
    "read_delimited_text",
    "to_delimited_text",
    "to_json_text",
]
