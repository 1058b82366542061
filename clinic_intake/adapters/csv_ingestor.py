"""CSV tabular ingestor for uploaded patient spreadsheets."""

from __future__ import annotations

import csv
import io

from .interfaces import TabularIngestorPort, TabularParseResult
from .tabular_errors import TabularDecodeError, TabularHeaderError, TabularParseError

_ADAPTER_CSV_CANDIDATE_DELIMITERS = ",;\t|"
_ADAPTER_CSV_SNIFF_SAMPLE_SIZE = 8192


class CsvTabularIngestor(TabularIngestorPort):
    """Concrete ingestor for UTF-8 delimited text exports.

    The first non-empty line is the header row, empty lines are skipped and
    the delimiter is sniffed among comma, semicolon, tab and pipe.
    """

    def __init__(self, default_delimiter: str = ","):
        """Initialize CSV ingestor.

        Args:
            default_delimiter: Delimiter used when sniffing is inconclusive.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when default delimiter is not one character.
        """

        if len(default_delimiter) != 1:
            raise ValueError("default_delimiter must be exactly one character")

        self._default_delimiter = default_delimiter

    def adapter_source_name(self) -> str:
        """Return ingestor format identifier.

        Returns:
            str: Format identifier.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return "csv"

    def adapter_parse(self, payload_bytes: bytes) -> TabularParseResult:
        """Parse uploaded CSV bytes into headers and rows.

        Args:
            payload_bytes: Raw uploaded file bytes.

        Returns:
            TabularParseResult: Headers in file order and rows keyed by header.

        Raises:
            TabularDecodeError: Raised when payload is not UTF-8.
            TabularHeaderError: Raised when headers are missing, blank or duplicated.
            TabularParseError: Raised when payload is empty or malformed.
        """

        if not isinstance(payload_bytes, (bytes, bytearray)):
            raise TabularParseError("payload must be bytes", error_code="INVALID_PAYLOAD")

        try:
            payload_text = bytes(payload_bytes).decode("utf-8-sig")
        except UnicodeDecodeError as error:
            raise TabularDecodeError("payload is not valid UTF-8 text", error_code="DECODE_ERROR") from error

        if not payload_text.strip():
            raise TabularParseError("payload is empty", error_code="EMPTY_PAYLOAD")

        delimiter = self._adapter_csv_detect_delimiter(payload_text)
        reader = csv.reader(io.StringIO(payload_text, newline=""), delimiter=delimiter)
        try:
            parsed_lines = [(reader.line_num, line) for line in reader if any(cell.strip() for cell in line)]
        except csv.Error as error:
            raise TabularParseError(f"malformed CSV payload: {error}", error_code="MALFORMED_CSV") from error

        if not parsed_lines:
            raise TabularHeaderError("payload has no header row", error_code="MISSING_HEADERS")

        headers = self._adapter_csv_validate_headers(parsed_lines[0][1])
        rows = [
            self._adapter_csv_build_row(headers, line, line_number)
            for line_number, line in parsed_lines[1:]
        ]
        return TabularParseResult(headers=headers, rows=rows)

    def _adapter_csv_detect_delimiter(self, payload_text: str) -> str:
        """Sniff the delimiter from the leading sample of the payload.

        Args:
            payload_text: Decoded payload text.

        Returns:
            str: Detected delimiter or configured default.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        sample = payload_text[:_ADAPTER_CSV_SNIFF_SAMPLE_SIZE]
        try:
            dialect = csv.Sniffer().sniff(sample, delimiters=_ADAPTER_CSV_CANDIDATE_DELIMITERS)
        except csv.Error:
            return self._default_delimiter
        return dialect.delimiter

    def _adapter_csv_validate_headers(self, header_cells: list[str]) -> tuple[str, ...]:
        """Normalize header cells and enforce a closed, unambiguous header set.

        Args:
            header_cells: Raw header row cells.

        Returns:
            tuple[str, ...]: Trimmed headers in file order.

        Raises:
            TabularHeaderError: Raised when a header is blank or duplicated.
        """

        headers: list[str] = []
        seen_headers: set[str] = set()
        for column_number, cell in enumerate(header_cells, start=1):
            header = cell.strip()
            if not header:
                raise TabularHeaderError(f"blank header at column {column_number}", error_code="BLANK_HEADER")
            if header in seen_headers:
                raise TabularHeaderError(f"duplicate header={header}", error_code="DUPLICATE_HEADER")
            seen_headers.add(header)
            headers.append(header)
        return tuple(headers)

    def _adapter_csv_build_row(self, headers: tuple[str, ...], line: list[str], line_number: int) -> dict[str, str]:
        """Key one data line by header, rejecting values past the last header.

        Args:
            headers: Validated headers.
            line: Parsed cells of one data line.
            line_number: Source line number for diagnostics.

        Returns:
            dict[str, str]: Cells keyed by header; short lines omit trailing headers.

        Raises:
            TabularParseError: Raised when a cell beyond the header count holds a value.
        """

        # Trailing empty cells are left by spreadsheet exports and carry no data.
        if any(cell.strip() for cell in line[len(headers):]):
            raise TabularParseError(
                f"line {line_number} has {len(line)} cells but the header row has {len(headers)}; "
                "quote values that contain the delimiter",
                error_code="ROW_WIDTH_MISMATCH",
            )
        return dict(zip(headers, line))
