"""Patient import API router for schema discovery, preview and commit endpoints."""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Header, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from clinic_intake.adapters import TabularIngestorPort, TabularParseError
from clinic_intake.config import AppSettings
from clinic_intake.domain import TargetSchema
from clinic_intake.jobs import ImportSessionStateError, PatientImportSession


class PatientImportPreviewRequest(BaseModel):
    """Preview request body.

    Attributes:
        csv_text: Uploaded spreadsheet content as UTF-8 text.
    """

    csv_text: str


class PatientImportSelection(BaseModel):
    """One mapping selection, applied in request order.

    Attributes:
        target_key: Target field key.
        header: Source header selected for the field.
    """

    target_key: str = Field(min_length=1)
    header: str = Field(min_length=1)


class PatientImportRequest(BaseModel):
    """Import commit request body.

    Attributes:
        csv_text: Uploaded spreadsheet content as UTF-8 text.
        selections: Mapping selections; repeated aggregate selections toggle membership.
    """

    csv_text: str
    selections: list[PatientImportSelection] = Field(default_factory=list)


def api_create_imports_router(
    settings: AppSettings,
    import_session_factory: Callable[[str], PatientImportSession],
    tabular_ingestor: TabularIngestorPort,
    schema: TargetSchema,
) -> APIRouter:
    """Create patient import router.

    Args:
        settings: Runtime settings used for preview sizing.
        import_session_factory: Factory starting one import session per owner id.
        tabular_ingestor: Ingestor used for previews.
        schema: Target schema exposed to mapping clients.

    Returns:
        APIRouter: Router exposing `/imports/patients` APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if import_session_factory is None:
        raise ValueError("import_session_factory must not be None")
    if tabular_ingestor is None:
        raise ValueError("tabular_ingestor must not be None")
    if schema is None:
        raise ValueError("schema must not be None")

    router = APIRouter(prefix="/imports/patients", tags=["imports"])

    @router.get("/schema")
    def api_imports_schema() -> JSONResponse:
        """Return target fields a spreadsheet can be mapped onto.

        Returns:
            JSONResponse: Ordered field definitions.

        Raises:
            RuntimeError: Raised if the payload cannot be produced.
        """

        payload = {
            "fields": [
                {
                    "key": field.key,
                    "label": field.label,
                    "type": field.field_type.value,
                    "required": field.required,
                    "multiple": field.domain_field_is_aggregate(),
                    "description": field.description,
                }
                for field in schema.fields
            ]
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/preview")
    def api_imports_preview(request: PatientImportPreviewRequest) -> JSONResponse:
        """Parse an uploaded spreadsheet and return headers with sample rows.

        Args:
            request: Preview request body.

        Returns:
            JSONResponse: Headers, row count and sample rows, or 400 on parse failure.

        Raises:
            RuntimeError: Raised when parsing fails unexpectedly.
        """

        try:
            parse_result = tabular_ingestor.adapter_parse(request.csv_text.encode("utf-8"))
        except TabularParseError as error:
            return api_imports_error_response(code=error.error_code or "PARSE_ERROR", message=str(error))

        payload = {
            "headers": list(parse_result.headers),
            "row_count": len(parse_result.rows),
            "sample_rows": parse_result.rows[: settings.import_preview_row_limit],
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("")
    def api_imports_commit(
        request: PatientImportRequest,
        owner_id: str = Header(alias="X-Owner-Id"),
    ) -> JSONResponse:
        """Run one full import session and return its report.

        Args:
            request: Import request body.
            owner_id: Owner identifier supplied by the authenticated gateway.

        Returns:
            JSONResponse: Import report; 400 when parsing or mapping input is invalid.

        Raises:
            RuntimeError: Raised when the session fails unexpectedly.
        """

        try:
            session = import_session_factory(owner_id)
        except ValueError as error:
            return api_imports_error_response(code="INVALID_OWNER", message=str(error))

        try:
            session.job_ingest_payload(request.csv_text.encode("utf-8"))
        except TabularParseError:
            report_payload = session.report.job_report_as_payload() if session.report else {}
            return JSONResponse(content=report_payload, status_code=status.HTTP_400_BAD_REQUEST)

        try:
            for selection in request.selections:
                session.job_set_mapping(selection.target_key, selection.header)
        except (ValueError, ImportSessionStateError) as error:
            return api_imports_error_response(code="INVALID_MAPPING_SELECTION", message=str(error))

        report = session.job_commit()
        return JSONResponse(content=report.job_report_as_payload(), status_code=status.HTTP_200_OK)

    return router


def api_imports_error_response(code: str, message: str) -> JSONResponse:
    """Build deterministic 400 error payload.

    Args:
        code: Deterministic error code.
        message: Human-readable message.

    Returns:
        JSONResponse: Error response.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    payload = {
        "status": "error",
        "code": code,
        "message": message,
    }
    return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)
