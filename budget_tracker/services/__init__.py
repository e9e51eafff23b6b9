"""Services package."""

from budget_tracker.services.export import (
    ExportError,
    ExportSink,
    export_expenses,
    read_delimited_text,
    to_delimited_text,
    to_json_text,
)
from budget_tracker.services.importers import (
    ImportFileError,
    import_spreadsheet_file,
    map_spreadsheet_rows,
    parse_sms,
)
from budget_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    SerializationError,
    StorageConnectionError,
    StorageError,
    create_storage,
    decode_budget_info,
    encode_budget_info,
)

__all__ = [
    # Export
    "ExportError",
    "ExportSink",
    "export_expenses",
    "read_delimited_text",
    "to_delimited_text",
    "to_json_text",
    # Import
    "ImportFileError",
    "import_spreadsheet_file",
    "map_spreadsheet_rows",
    "parse_sms",
    # Storage
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "SerializationError",
    "StorageConnectionError",
    "StorageError",
    "create_storage",
    "decode_budget_info",
    "encode_budget_info",
]
