"""Typed interfaces for mapping-layer transformations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

RawRow = Mapping[str, object]
FieldMapping = Mapping[str, tuple[str, ...]]


@dataclass(frozen=True)
class CandidateRecord:
    """Fully sanitized patient record ready for batch persistence.

    Attributes:
        owner_id: Session-injected owner (practitioner) identifier.
        created_at_utc: Session-injected creation timestamp.
        field_values: Sanitized values keyed by target field key; unmapped fields are absent.
    """

    owner_id: str
    created_at_utc: datetime
    field_values: dict[str, str | None]

    def mapping_candidate_as_row(self) -> dict[str, object]:
        """Flatten candidate into one persistence row payload.

        Returns:
            dict[str, object]: Column-keyed row values.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "owner_id": self.owner_id,
            "created_at_utc": self.created_at_utc,
            **self.field_values,
        }


@dataclass(frozen=True)
class IdentityValidationResult:
    """Outcome of the identity-field hard check for one candidate.

    Attributes:
        is_valid: Whether the candidate may be kept.
        reason: Rejection reason when invalid.
    """

    is_valid: bool
    reason: str | None = None


@dataclass(frozen=True)
class RowRejection:
    """Diagnostic entry for one discarded source row.

    Attributes:
        row_index: Zero-based index of the row in the ingested row list.
        reason: Deterministic rejection reason.
    """

    row_index: int
    reason: str


@dataclass(frozen=True)
class RowTransformBatch:
    """Result of transforming every ingested row.

    Attributes:
        candidates: Surviving candidate records in source row order.
        rejections: Discarded rows in source row order.
    """

    candidates: tuple[CandidateRecord, ...]
    rejections: tuple[RowRejection, ...]

    @property
    def skipped_count(self) -> int:
        """Return number of discarded rows."""

        return len(self.rejections)


class RowTransformPort(Protocol):
    """Port definition for turning raw rows into candidate records."""

    def mapping_transform_rows(
        self,
        rows: list[RawRow],
        mapping: FieldMapping,
        owner_id: str,
        created_at_utc: datetime,
    ) -> RowTransformBatch:
        """Transform raw rows into candidate records with per-row error containment.

        Args:
            rows: Raw rows keyed by source header.
            mapping: Target field key to ordered source headers.
            owner_id: Owner identifier injected into every candidate.
            created_at_utc: Creation timestamp injected into every candidate.

        Returns:
            RowTransformBatch: Candidates and rejections.

        Raises:
            ValueError: Raised when top-level input values are invalid.
        """
