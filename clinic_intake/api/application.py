"""FastAPI application factory for the patient import service."""

from typing import Callable

from fastapi import FastAPI

from clinic_intake.adapters import TabularIngestorPort
from clinic_intake.config import AppSettings
from clinic_intake.db import DatabaseHealthPort
from clinic_intake.domain import TargetSchema
from clinic_intake.jobs import PatientImportSession

from .routers import api_create_health_router, api_create_imports_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    import_session_factory: Callable[[str], PatientImportSession],
    tabular_ingestor: TabularIngestorPort,
    schema: TargetSchema,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        import_session_factory: Factory starting one import session per owner id.
        tabular_ingestor: Ingestor used by the preview endpoint.
        schema: Target schema exposed to mapping clients.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when router dependencies are invalid.
    """

    application = FastAPI(title="Clinic Intake")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identity for bootstrap verification.

        Returns:
            dict[str, str]: Minimal service identity payload.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        return {
            "service": "clinic-intake",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(
        api_create_imports_router(
            settings=settings,
            import_session_factory=import_session_factory,
            tabular_ingestor=tabular_ingestor,
            schema=schema,
        )
    )

    return application
