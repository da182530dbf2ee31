"""Export and backup package."""

from finance_tracker.export.exporter import (
    CSV_HEADERS,
    EmptyExportError,
    ExportError,
    FormatError,
    backup_filename,
    csv_filename,
    dumps_backup,
    from_json_backup,
    to_csv,
    to_json_backup,
)

__all__ = [
    "CSV_HEADERS",
    "EmptyExportError",
    "ExportError",
    "FormatError",
    "backup_filename",
    "csv_filename",
    "dumps_backup",
    "from_json_backup",
    "to_csv",
    "to_json_backup",
]
