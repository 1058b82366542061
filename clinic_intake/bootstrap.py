"""Application bootstrap wiring for startup validation and dependency assembly."""

from typing import Callable

from fastapi import FastAPI
from sqlalchemy import Engine

from clinic_intake.adapters import CsvTabularIngestor
from clinic_intake.api import create_api_application
from clinic_intake.config import AppSettings, config_load_settings
from clinic_intake.db import (
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyPatientPersistenceService,
    db_create_engine,
)
from clinic_intake.domain import PATIENT_TARGET_SCHEMA
from clinic_intake.jobs import PatientImportSession, job_start_import_session
from clinic_intake.mapping import RowTransformConfig


def bootstrap_build_row_transform_config(settings: AppSettings) -> RowTransformConfig:
    """Build row transformation configuration from runtime settings.

    Args:
        settings: Validated runtime settings.

    Returns:
        RowTransformConfig: Transformation configuration.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return RowTransformConfig(
        identity_min_length=settings.import_identity_min_length,
        generator_tag=settings.import_generator_tag,
        phone_max_length=settings.import_phone_max_length,
        context_filter_placeholders=settings.import_context_filter_placeholders,
    )


def bootstrap_create_import_session_factory(
    settings: AppSettings | None = None,
    engine: Engine | None = None,
) -> Callable[[str], PatientImportSession]:
    """Build a factory that starts one import session per owner id.

    Args:
        settings: Optional pre-loaded settings; loaded from environment when omitted.
        engine: Optional shared engine; created from settings when omitted.

    Returns:
        Callable[[str], PatientImportSession]: Session factory bound to the patient store.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    resolved_engine = engine or db_create_engine(database_url=resolved_settings.database_url)
    persistence_repository = SQLAlchemyPatientPersistenceService(engine=resolved_engine)
    transform_config = bootstrap_build_row_transform_config(resolved_settings)
    tabular_ingestor = CsvTabularIngestor()

    def bootstrap_start_session(owner_id: str) -> PatientImportSession:
        return job_start_import_session(
            owner_id=owner_id,
            persistence_repository=persistence_repository,
            schema=PATIENT_TARGET_SCHEMA,
            config=transform_config,
            tabular_ingestor=tabular_ingestor,
        )

    return bootstrap_start_session


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    engine = db_create_engine(database_url=settings.database_url)
    return create_api_application(
        settings=settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        import_session_factory=bootstrap_create_import_session_factory(settings=settings, engine=engine),
        tabular_ingestor=CsvTabularIngestor(),
        schema=PATIENT_TARGET_SCHEMA,
    )
