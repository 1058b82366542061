"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort, PatientPersistenceError, PatientPersistenceRepositoryPort
from .patient_persistence import DB_PATIENT_ALLOWED_COLUMNS, SQLAlchemyPatientPersistenceService
from .session import db_create_engine

__all__ = [
    "DB_PATIENT_ALLOWED_COLUMNS",
    "DatabaseHealthPort",
    "PatientPersistenceError",
    "PatientPersistenceRepositoryPort",
    "SQLAlchemyDatabaseHealthService",
    "SQLAlchemyPatientPersistenceService",
    "db_create_engine",
]
