"""Batch load step committing transformed candidates in one persistence call."""

from __future__ import annotations

import logging

from clinic_intake.db import PatientPersistenceRepositoryPort
from clinic_intake.mapping import CandidateRecord, RowRejection

from .interfaces import (
    IMPORT_NO_VALID_ROWS_CODE,
    IMPORT_PERSISTENCE_ERROR_CODE,
    ImportReport,
    ImportSessionState,
)

LOGGER = logging.getLogger(__name__)

JOB_NO_VALID_ROWS_MESSAGE = "no valid patient rows were produced; check that the name column is mapped"


def job_batch_load(
    candidates: tuple[CandidateRecord, ...] | list[CandidateRecord],
    skipped_count: int,
    persistence_repository: PatientPersistenceRepositoryPort,
    rejections: tuple[RowRejection, ...] = (),
) -> ImportReport:
    """Commit all candidates with one bulk call and build the import report.

    Args:
        candidates: Candidate records surviving transform.
        skipped_count: Rows discarded during transform.
        persistence_repository: Bulk insert collaborator.
        rejections: Discarded row diagnostics carried into the report.

    Returns:
        ImportReport: Committed report, or aborted report with terminal error.

    Raises:
        ValueError: Raised when persistence repository is missing.
    """

    if persistence_repository is None:
        raise ValueError("persistence_repository must not be None")

    candidate_list = list(candidates)
    if not candidate_list:
        LOGGER.warning("import aborted before persistence: no valid rows (skipped=%s)", skipped_count)
        return ImportReport(
            status=ImportSessionState.ABORTED.value,
            imported_count=0,
            skipped_count=skipped_count,
            terminal_error=JOB_NO_VALID_ROWS_MESSAGE,
            error_code=IMPORT_NO_VALID_ROWS_CODE,
            rejections=tuple(rejections),
        )

    # The bulk insert is opaque; every failure it raises ends the import.
    try:
        persistence_repository.db_patient_insert_many(candidate_list)
    except Exception as error:  # pylint: disable=broad-exception-caught
        LOGGER.error(
            "import aborted: bulk insert of %s records failed: %s",
            len(candidate_list),
            error,
            exc_info=True,
        )
        return ImportReport(
            status=ImportSessionState.ABORTED.value,
            imported_count=0,
            skipped_count=skipped_count,
            terminal_error=str(error),
            error_code=IMPORT_PERSISTENCE_ERROR_CODE,
            rejections=tuple(rejections),
        )

    LOGGER.info("import committed: imported=%s skipped=%s", len(candidate_list), skipped_count)
    return ImportReport(
        status=ImportSessionState.COMMITTED.value,
        imported_count=len(candidate_list),
        skipped_count=skipped_count,
        rejections=tuple(rejections),
    )
