"""Import parsers: spreadsheet rows/files and SMS text."""

from budget_tracker.services.importers.sms import (
    extract_amount,
    guess_category,
    parse_sms,
)
from budget_tracker.services.importers.spreadsheet import (
    FIELD_CANDIDATES,
    ImportFileError,
    import_spreadsheet_file,
    map_spreadsheet_row,
    map_spreadsheet_rows,
    read_spreadsheet_file,
)

__all__ = [
    # SMS
    "extract_amount",
    "guess_category",
    "parse_sms",
    # Spreadsheet
    "FIELD_CANDIDATES",
    "ImportFileError",
    "import_spreadsheet_file",
    "map_spreadsheet_row",
    "map_spreadsheet_rows",
    "read_spreadsheet_file",
]
