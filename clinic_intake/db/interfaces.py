"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from typing import Protocol

from clinic_intake.domain import HealthStatus
from clinic_intake.mapping import CandidateRecord


class PatientPersistenceError(RuntimeError):
    """Raised when the patient bulk insert fails as a whole."""


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and patient store readiness.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


class PatientPersistenceRepositoryPort(Protocol):
    """Port definition for the single bulk patient insert call."""

    def db_patient_insert_many(self, records: list[CandidateRecord]) -> int:
        """Insert all candidate records as one non-decomposable operation.

        Args:
            records: Candidate records to persist.

        Returns:
            int: Number of inserted rows.

        Raises:
            PatientPersistenceError: Raised when the insert fails.
            ValueError: Raised when records are invalid.
        """
