"""Database service for bulk patient record persistence."""

from __future__ import annotations

import logging

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from clinic_intake.mapping import CandidateRecord

from .interfaces import PatientPersistenceError, PatientPersistenceRepositoryPort

LOGGER = logging.getLogger(__name__)

# Only these columns exist on `patients`; anything else is stripped before insert.
DB_PATIENT_ALLOWED_COLUMNS = (
    "owner_id",
    "created_at_utc",
    "name",
    "phone",
    "email",
    "birth_date",
    "allergies",
    "clinical_context",
)


class SQLAlchemyPatientPersistenceService(PatientPersistenceRepositoryPort):
    """SQLAlchemy implementation of the single-transaction patient bulk insert."""

    def __init__(self, engine: Engine):
        """Initialize patient persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when engine is invalid.
        """

        if engine is None:
            raise ValueError("engine must not be None")

        self._engine = engine

    def db_patient_insert_many(self, records: list[CandidateRecord]) -> int:
        """Insert all candidate records in one transaction.

        Args:
            records: Candidate records to persist.

        Returns:
            int: Number of inserted rows.

        Raises:
            ValueError: Raised when records are invalid.
            PatientPersistenceError: Raised when the insert fails; nothing is committed.
        """

        if records is None:
            raise ValueError("records must not be None")
        if len(records) == 0:
            return 0

        row_payloads = [self._db_patient_build_row(record) for record in records]
        column_list = ", ".join(DB_PATIENT_ALLOWED_COLUMNS)
        parameter_list = ", ".join(f":{column}" for column in DB_PATIENT_ALLOWED_COLUMNS)

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(f"INSERT INTO patients ({column_list}) VALUES ({parameter_list})"),
                    row_payloads,
                )
        except SQLAlchemyError as error:
            failure_detail = getattr(error, "orig", None) or error
            raise PatientPersistenceError(f"patient bulk insert failed: {failure_detail}") from error

        LOGGER.info("patient bulk insert committed: rows=%s", len(row_payloads))
        return len(row_payloads)

    def _db_patient_build_row(self, record: CandidateRecord) -> dict[str, object]:
        """Project one candidate onto the allowed patient columns.

        Args:
            record: Candidate record.

        Returns:
            dict[str, object]: Parameters for every allowed column; unmapped columns are None.

        Raises:
            ValueError: Raised when the record or its owner id is invalid.
        """

        if record is None:
            raise ValueError("record must not be None")
        if not isinstance(record.owner_id, str) or not record.owner_id.strip():
            raise ValueError("record.owner_id must not be blank")

        row_values = record.mapping_candidate_as_row()
        stripped_keys = sorted(set(row_values) - set(DB_PATIENT_ALLOWED_COLUMNS))
        if stripped_keys:
            LOGGER.debug("stripping unknown patient columns: %s", ", ".join(stripped_keys))
        return {column: row_values.get(column) for column in DB_PATIENT_ALLOWED_COLUMNS}
