"""Typed interfaces for import session orchestration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from clinic_intake.mapping import RowRejection

IMPORT_NO_VALID_ROWS_CODE = "IMPORT_NO_VALID_ROWS"
IMPORT_PERSISTENCE_ERROR_CODE = "IMPORT_PERSISTENCE_ERROR"
IMPORT_PARSE_ERROR_CODE = "IMPORT_PARSE_ERROR"


class ImportSessionState(str, Enum):
    """Lifecycle states of one import session."""

    IDLE = "idle"
    INGESTED = "ingested"
    MAPPED = "mapped"
    TRANSFORMED = "transformed"
    COMMITTED = "committed"
    ABORTED = "aborted"


IMPORT_SESSION_TERMINAL_STATES = frozenset({ImportSessionState.COMMITTED, ImportSessionState.ABORTED})


class ImportSessionStateError(RuntimeError):
    """Raised when an operation is not permitted in the current session state."""


@dataclass(frozen=True)
class ImportReport:
    """Outcome of one import session.

    Attributes:
        status: Final session state value (`committed` or `aborted`).
        imported_count: Number of persisted records.
        skipped_count: Number of rows discarded during transform.
        terminal_error: Human-readable failure message for aborted sessions.
        error_code: Deterministic failure code for aborted sessions.
        rejections: Discarded rows with reasons.
        diagnostics: Structured stage timeline events.
    """

    status: str
    imported_count: int
    skipped_count: int
    terminal_error: str | None = None
    error_code: str | None = None
    rejections: tuple[RowRejection, ...] = ()
    diagnostics: list[dict[str, object]] = field(default_factory=list)

    def job_report_as_payload(self) -> dict[str, object]:
        """Serialize report into a JSON-compatible payload.

        Returns:
            dict[str, object]: Report payload.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "status": self.status,
            "imported_count": self.imported_count,
            "skipped_count": self.skipped_count,
            "terminal_error": self.terminal_error,
            "error_code": self.error_code,
            "rejections": [
                {"row_index": rejection.row_index, "reason": rejection.reason} for rejection in self.rejections
            ],
            "diagnostics": list(self.diagnostics),
        }
