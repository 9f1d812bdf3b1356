"""Public interface for the CSV export adapter."""

from __future__ import annotations

from .reader import DEFAULT_READ_BATCH_SIZE, CsvExportSource
from .schema import REQUIRED_COLUMNS, ExportRowPayload
from .translator import parse_import_record

__all__ = [
    "DEFAULT_READ_BATCH_SIZE",
    "REQUIRED_COLUMNS",
    "CsvExportSource",
    "ExportRowPayload",
    "parse_import_record",
]
