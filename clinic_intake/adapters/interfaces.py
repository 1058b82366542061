"""Typed interfaces for adapter-layer responsibilities."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class TabularParseResult:
    """Result contract for tabular payload parsing.

    Attributes:
        headers: Source headers in file order.
        rows: Data rows keyed by source header; short rows omit trailing headers.
    """

    headers: tuple[str, ...]
    rows: list[dict[str, str]]


class TabularIngestorPort(Protocol):
    """Port definition for turning uploaded spreadsheet bytes into rows."""

    def adapter_source_name(self) -> str:
        """Return ingestor format identifier for diagnostics.

        Returns:
            str: Human-readable format identifier.

        Raises:
            RuntimeError: Raised when source metadata is unavailable.
        """

    def adapter_parse(self, payload_bytes: bytes) -> TabularParseResult:
        """Parse one uploaded payload.

        Args:
            payload_bytes: Raw uploaded file bytes.

        Returns:
            TabularParseResult: Headers and rows.

        Raises:
            TabularParseError: Raised when payload cannot be parsed.
        """
