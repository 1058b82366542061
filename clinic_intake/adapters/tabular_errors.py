"""Project-native typed exceptions for tabular ingestion failures."""

from __future__ import annotations


class TabularAdapterError(Exception):
    """Base exception for adapter-level tabular ingestion failures.

    Attributes:
        error_code: Deterministic failure code.
    """

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


class TabularParseError(TabularAdapterError, ValueError):
    """Uploaded payload could not be turned into headers and rows."""


class TabularDecodeError(TabularParseError):
    """Uploaded payload is not valid UTF-8 text."""


class TabularHeaderError(TabularParseError):
    """Header row is missing, blank or ambiguous."""
