"""Import session orchestrating ingest, mapping, transform and batch commit.

One session owns its mapping state, rows and counters; nothing is shared
between sessions, and nothing is written to the patient store before commit.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
import logging
from typing import Callable

from clinic_intake.adapters import CsvTabularIngestor, TabularIngestorPort, TabularParseError, TabularParseResult
from clinic_intake.db import PatientPersistenceRepositoryPort
from clinic_intake.domain import PATIENT_TARGET_SCHEMA, TargetSchema, domain_build_stage_event
from clinic_intake.mapping import ColumnMapper, RawRow, RowTransformConfig, RowTransformPort, RowTransformService

from .batch_loader import job_batch_load
from .interfaces import (
    IMPORT_PARSE_ERROR_CODE,
    IMPORT_SESSION_TERMINAL_STATES,
    ImportReport,
    ImportSessionState,
    ImportSessionStateError,
)

LOGGER = logging.getLogger(__name__)


class PatientImportSession:
    """Stateful bulk patient import session.

    Lifecycle: `idle -> ingested -> mapped -> transformed -> committed|aborted`.
    Selections may also come first; ingestion then replays them against the
    discovered headers.
    Terminal states reject every further operation.
    """

    def __init__(
        self,
        owner_id: str,
        persistence_repository: PatientPersistenceRepositoryPort,
        schema: TargetSchema | None = None,
        row_transformer: RowTransformPort | None = None,
        tabular_ingestor: TabularIngestorPort | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize one idle import session.

        Args:
            owner_id: Owner identifier injected into every record.
            persistence_repository: Bulk insert collaborator.
            schema: Optional target schema; defaults to the patient schema.
            row_transformer: Optional row transformer override.
            tabular_ingestor: Optional ingestor used by `job_ingest_payload`.
            clock: Optional UTC clock used to stamp records.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when owner id is blank or repository is missing.
        """

        normalized_owner_id = (owner_id or "").strip()
        if not normalized_owner_id:
            raise ValueError("owner_id must not be blank")
        if persistence_repository is None:
            raise ValueError("persistence_repository must not be None")

        self._schema = schema or PATIENT_TARGET_SCHEMA
        self._owner_id = normalized_owner_id
        self._persistence_repository = persistence_repository
        self._row_transformer = row_transformer or RowTransformService(schema=self._schema)
        self._tabular_ingestor = tabular_ingestor or CsvTabularIngestor()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._state = ImportSessionState.IDLE
        self._headers: tuple[str, ...] = ()
        self._rows: list[RawRow] = []
        self._ingested = False
        self._column_mapper = ColumnMapper(schema=self._schema)
        self._timeline: list[dict[str, object]] = [domain_build_stage_event(stage="session", status="started")]
        self._report: ImportReport | None = None

    @property
    def state(self) -> ImportSessionState:
        """Return current lifecycle state."""

        return self._state

    @property
    def headers(self) -> tuple[str, ...]:
        """Return headers discovered at ingestion."""

        return self._headers

    @property
    def report(self) -> ImportReport | None:
        """Return final report once the session reached a terminal state."""

        return self._report

    @property
    def column_mapper(self) -> ColumnMapper:
        """Return the session-owned column mapper."""

        return self._column_mapper

    def job_ingest(self, headers: list[str] | tuple[str, ...], rows: list[RawRow]) -> None:
        """Load parsed headers and rows into the session.

        Args:
            headers: Source headers in file order.
            rows: Raw rows keyed by source header.

        Returns:
            None: Session state is updated as side effect.

        Raises:
            ImportSessionStateError: Raised when rows were already ingested or the session ended.
            ValueError: Raised when headers or rows are missing, or an earlier selection names an absent header.
        """

        self._job_require_ingest_allowed()
        if headers is None or rows is None:
            raise ValueError("headers and rows must not be None")

        ingested_headers = tuple(headers)
        column_mapper = ColumnMapper(schema=self._schema, headers=ingested_headers)
        # Selections made before ingestion are replayed against the discovered headers.
        carried_mapping = self._column_mapper.mapping_snapshot()
        for target_key, selected_headers in carried_mapping.items():
            for header in selected_headers:
                column_mapper.mapping_select(target_key, header)

        self._headers = ingested_headers
        self._rows = [dict(row) for row in rows]
        self._ingested = True
        self._column_mapper = column_mapper
        self._job_transition(
            ImportSessionState.INGESTED,
            stage="ingest",
            details={"header_count": len(self._headers), "row_count": len(self._rows)},
        )
        if carried_mapping:
            self._state = ImportSessionState.MAPPED

    def job_ingest_payload(self, payload_bytes: bytes) -> TabularParseResult:
        """Parse an uploaded payload with the session ingestor and load it.

        Args:
            payload_bytes: Raw uploaded file bytes.

        Returns:
            TabularParseResult: Parsed headers and rows.

        Raises:
            ImportSessionStateError: Raised when rows were already ingested or the session ended.
            TabularParseError: Raised when parsing fails; the session is aborted first.
        """

        self._job_require_ingest_allowed()
        try:
            parse_result = self._tabular_ingestor.adapter_parse(payload_bytes)
        except TabularParseError as error:
            self._job_abort_on_parse_error(error)
            raise

        self.job_ingest(headers=parse_result.headers, rows=parse_result.rows)
        return parse_result

    def job_set_mapping(self, target_key: str, header: str) -> tuple[str, ...]:
        """Apply one header selection to a target field.

        Args:
            target_key: Target field key.
            header: Source header.

        Returns:
            tuple[str, ...]: Headers mapped to the field after the selection.

        Raises:
            ImportSessionStateError: Raised when the session no longer accepts mapping changes.
            ValueError: Raised when the target key or header is unknown.
        """

        self._job_require_state(
            {ImportSessionState.IDLE, ImportSessionState.INGESTED, ImportSessionState.MAPPED},
            operation="set_mapping",
        )
        selected_headers = self._column_mapper.mapping_select(target_key, header)
        if self._state is not ImportSessionState.MAPPED:
            self._state = ImportSessionState.MAPPED
        return selected_headers

    def job_is_required_satisfied(self) -> bool:
        """Return whether every required field is mapped."""

        return self._column_mapper.mapping_is_required_satisfied()

    def job_commit(self, raw_rows: list[RawRow] | None = None) -> ImportReport:
        """Transform rows and commit surviving candidates in one bulk call.

        Args:
            raw_rows: Optional rows to import; defaults to the ingested rows.

        Returns:
            ImportReport: Final report; the session ends committed or aborted.

        Raises:
            ImportSessionStateError: Raised when the session can not commit in its current state.
            ValueError: Raised when no rows are available.
        """

        self._job_require_state(
            {ImportSessionState.IDLE, ImportSessionState.INGESTED, ImportSessionState.MAPPED},
            operation="commit",
        )
        if raw_rows is not None:
            rows = list(raw_rows)
        elif self._ingested:
            rows = self._rows
        else:
            raise ValueError("no rows available to commit; ingest a payload or pass raw_rows")

        field_mapping = self._column_mapper.mapping_snapshot()
        self._timeline.append(
            domain_build_stage_event(
                stage="mapping",
                status="completed",
                details={
                    "mapping": {key: list(headers) for key, headers in field_mapping.items()},
                    "missing_required": list(self._column_mapper.mapping_missing_required_keys()),
                },
            )
        )

        transform_batch = self._row_transformer.mapping_transform_rows(
            rows=rows,
            mapping=field_mapping,
            owner_id=self._owner_id,
            created_at_utc=self._clock(),
        )
        self._job_transition(
            ImportSessionState.TRANSFORMED,
            stage="transform",
            details={
                "input_row_count": len(rows),
                "candidate_count": len(transform_batch.candidates),
                "skipped_count": transform_batch.skipped_count,
            },
        )

        load_report = job_batch_load(
            candidates=transform_batch.candidates,
            skipped_count=transform_batch.skipped_count,
            persistence_repository=self._persistence_repository,
            rejections=transform_batch.rejections,
        )
        final_state = ImportSessionState(load_report.status)
        commit_details: dict[str, object] = {"imported_count": load_report.imported_count}
        if load_report.error_code is not None:
            commit_details["error_code"] = load_report.error_code
        self._job_transition(final_state, stage="commit", details=commit_details)
        self._report = replace(load_report, diagnostics=list(self._timeline))
        return self._report

    def _job_abort_on_parse_error(self, error: TabularParseError) -> None:
        """Move the session to aborted with a parse-failure report.

        Args:
            error: Ingestor parse failure.

        Returns:
            None: Session state is updated as side effect.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        LOGGER.warning("import aborted at ingest: %s", error)
        self._job_transition(
            ImportSessionState.ABORTED,
            stage="ingest",
            details={"error_code": IMPORT_PARSE_ERROR_CODE, "parse_error_code": error.error_code},
        )
        self._report = ImportReport(
            status=ImportSessionState.ABORTED.value,
            imported_count=0,
            skipped_count=0,
            terminal_error=str(error),
            error_code=IMPORT_PARSE_ERROR_CODE,
            diagnostics=list(self._timeline),
        )

    def _job_require_state(self, allowed_states: set[ImportSessionState], operation: str) -> None:
        """Reject operations that the current state does not permit.

        Args:
            allowed_states: States in which the operation is valid.
            operation: Operation name for the error message.

        Returns:
            None: This method does not return a value.

        Raises:
            ImportSessionStateError: Raised when the state does not permit the operation.
        """

        if self._state in IMPORT_SESSION_TERMINAL_STATES:
            raise ImportSessionStateError(
                f"import session is {self._state.value}; start a new session to {operation}"
            )
        if self._state not in allowed_states:
            raise ImportSessionStateError(f"operation {operation} is not allowed in state {self._state.value}")

    def _job_require_ingest_allowed(self) -> None:
        """Allow one ingestion, before or after mapping selections.

        Returns:
            None: This method does not return a value.

        Raises:
            ImportSessionStateError: Raised when rows were already ingested or the session ended.
        """

        self._job_require_state({ImportSessionState.IDLE, ImportSessionState.MAPPED}, operation="ingest")
        if self._ingested:
            raise ImportSessionStateError("import session already ingested rows; start a new session to ingest again")

    def _job_transition(
        self,
        next_state: ImportSessionState,
        stage: str,
        details: dict[str, object] | None = None,
    ) -> None:
        """Record one stage event and move to the next state.

        Args:
            next_state: State entered after the stage.
            stage: Stage name recorded in the timeline.
            details: Optional structured stage details.

        Returns:
            None: Session state is updated as side effect.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        status = "failed" if next_state is ImportSessionState.ABORTED else "completed"
        self._timeline.append(domain_build_stage_event(stage=stage, status=status, details=details))
        LOGGER.info("import session %s -> %s", self._state.value, next_state.value)
        self._state = next_state


def job_start_import_session(
    owner_id: str,
    persistence_repository: PatientPersistenceRepositoryPort,
    schema: TargetSchema | None = None,
    config: RowTransformConfig | None = None,
    tabular_ingestor: TabularIngestorPort | None = None,
    clock: Callable[[], datetime] | None = None,
) -> PatientImportSession:
    """Start one idle import session bound to a target schema.

    Args:
        owner_id: Owner identifier injected into every record.
        persistence_repository: Bulk insert collaborator.
        schema: Optional target schema; defaults to the patient schema.
        config: Optional row transformation configuration.
        tabular_ingestor: Optional ingestor for uploaded payloads.
        clock: Optional UTC clock used to stamp records.

    Returns:
        PatientImportSession: Idle session handle.

    Raises:
        ValueError: Raised when inputs or configuration are invalid.
    """

    resolved_schema = schema or PATIENT_TARGET_SCHEMA
    return PatientImportSession(
        owner_id=owner_id,
        persistence_repository=persistence_repository,
        schema=resolved_schema,
        row_transformer=RowTransformService(schema=resolved_schema, config=config),
        tabular_ingestor=tabular_ingestor,
        clock=clock,
    )
