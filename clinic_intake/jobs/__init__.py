"""Job layer package for import session orchestration boundaries."""

from .batch_loader import JOB_NO_VALID_ROWS_MESSAGE, job_batch_load
from .import_session import PatientImportSession, job_start_import_session
from .interfaces import (
    IMPORT_NO_VALID_ROWS_CODE,
    IMPORT_PARSE_ERROR_CODE,
    IMPORT_PERSISTENCE_ERROR_CODE,
    IMPORT_SESSION_TERMINAL_STATES,
    ImportReport,
    ImportSessionState,
    ImportSessionStateError,
)

__all__ = [
    "IMPORT_NO_VALID_ROWS_CODE",
    "IMPORT_PARSE_ERROR_CODE",
    "IMPORT_PERSISTENCE_ERROR_CODE",
    "IMPORT_SESSION_TERMINAL_STATES",
    "ImportReport",
    "ImportSessionState",
    "ImportSessionStateError",
    "JOB_NO_VALID_ROWS_MESSAGE",
    "PatientImportSession",
    "job_batch_load",
    "job_start_import_session",
]
