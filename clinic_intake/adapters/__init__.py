"""Adapter layer package for uploaded spreadsheet ingestion boundaries."""

from .csv_ingestor import CsvTabularIngestor
from .interfaces import TabularIngestorPort, TabularParseResult
from .tabular_errors import (
    TabularAdapterError,
    TabularDecodeError,
    TabularHeaderError,
    TabularParseError,
)

__all__ = [
    "CsvTabularIngestor",
    "TabularAdapterError",
    "TabularDecodeError",
    "TabularHeaderError",
    "TabularIngestorPort",
    "TabularParseError",
    "TabularParseResult",
]
