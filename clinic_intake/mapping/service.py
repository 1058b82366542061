"""Row transformation service for spreadsheet-to-patient record mapping."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging

from clinic_intake.domain import (
    PATIENT_TARGET_SCHEMA,
    DOMAIN_SANITIZE_DEFAULT_PHONE_MAX_LENGTH,
    TargetField,
    TargetFieldType,
    TargetSchema,
    domain_sanitize_date,
    domain_sanitize_phone,
    domain_sanitize_string,
)

from .context_aggregator import mapping_build_context_payload, mapping_serialize_context_payload
from .interfaces import (
    CandidateRecord,
    FieldMapping,
    IdentityValidationResult,
    RawRow,
    RowRejection,
    RowTransformBatch,
    RowTransformPort,
)

LOGGER = logging.getLogger(__name__)

ROW_REJECTION_IDENTITY_TOO_SHORT = "identity_too_short"
ROW_REJECTION_UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True)
class RowTransformConfig:
    """Configuration for row transformation behavior.

    Attributes:
        identity_field_key: Target field whose value identifies a patient.
        identity_min_length: Minimum trimmed identity length for a row to survive.
        generator_tag: Origin marker stamped into clinical context payloads.
        phone_max_length: Maximum sanitized phone length.
        context_filter_placeholders: Whether placeholder tokens are dropped from context payloads.
    """

    identity_field_key: str = "name"
    identity_min_length: int = 2
    generator_tag: str = "bulk_import"
    phone_max_length: int = DOMAIN_SANITIZE_DEFAULT_PHONE_MAX_LENGTH
    context_filter_placeholders: bool = False

    def mapping_validate(self, schema: TargetSchema) -> None:
        """Validate transformation configuration against a target schema.

        Args:
            schema: Target schema the configuration is applied to.

        Returns:
            None: This method does not return a value.

        Raises:
            ValueError: Raised when configured values are invalid.
        """

        if not self.identity_field_key.strip():
            raise ValueError("config.identity_field_key must not be blank")
        identity_field = schema.domain_schema_get_field(self.identity_field_key)
        if identity_field.domain_field_is_aggregate():
            raise ValueError("config.identity_field_key must not reference an aggregate field")
        if self.identity_min_length < 1:
            raise ValueError("config.identity_min_length must be positive")
        if not self.generator_tag.strip():
            raise ValueError("config.generator_tag must not be blank")
        if self.phone_max_length < 1:
            raise ValueError("config.phone_max_length must be positive")


class RowTransformService(RowTransformPort):
    """Concrete row transformer producing zero or one candidate per raw row."""

    def __init__(self, schema: TargetSchema | None = None, config: RowTransformConfig | None = None):
        """Initialize row transformation service.

        Args:
            schema: Optional target schema; defaults to the patient schema.
            config: Optional transformation configuration values.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when config values are invalid for the schema.
        """

        resolved_schema = schema or PATIENT_TARGET_SCHEMA
        resolved_config = config or RowTransformConfig()
        resolved_config.mapping_validate(resolved_schema)

        self._schema = resolved_schema
        self._config = resolved_config

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
            RowTransformBatch: Candidates and rejections in source row order.

        Raises:
            ValueError: Raised when owner id is blank or rows are missing.
        """

        if rows is None:
            raise ValueError("rows must not be None")
        normalized_owner_id = (owner_id or "").strip()
        if not normalized_owner_id:
            raise ValueError("owner_id must not be blank")

        candidates: list[CandidateRecord] = []
        rejections: list[RowRejection] = []
        for row_index, row in enumerate(rows):
            try:
                candidate, validation = self._mapping_transform_row(
                    row=row,
                    mapping=mapping,
                    owner_id=normalized_owner_id,
                    created_at_utc=created_at_utc,
                )
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.warning("row %s skipped: unexpected transform failure", row_index, exc_info=True)
                rejections.append(RowRejection(row_index=row_index, reason=ROW_REJECTION_UNEXPECTED_ERROR))
                continue

            if not validation.is_valid:
                reason = validation.reason or ROW_REJECTION_IDENTITY_TOO_SHORT
                LOGGER.warning("row %s skipped: %s", row_index, reason)
                rejections.append(RowRejection(row_index=row_index, reason=reason))
                continue
            candidates.append(candidate)

        LOGGER.info(
            "row transform completed: candidates=%s skipped=%s",
            len(candidates),
            len(rejections),
        )
        return RowTransformBatch(candidates=tuple(candidates), rejections=tuple(rejections))

    def mapping_validate_identity(self, field_values: dict[str, str | None]) -> IdentityValidationResult:
        """Run the identity hard check against sanitized field values.

        Args:
            field_values: Sanitized values keyed by target field key.

        Returns:
            IdentityValidationResult: Validation outcome with reason on failure.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        identity_value = (field_values.get(self._config.identity_field_key) or "").strip()
        if len(identity_value) < self._config.identity_min_length:
            return IdentityValidationResult(is_valid=False, reason=ROW_REJECTION_IDENTITY_TOO_SHORT)
        return IdentityValidationResult(is_valid=True)

    def _mapping_transform_row(
        self,
        row: RawRow,
        mapping: FieldMapping,
        owner_id: str,
        created_at_utc: datetime,
    ) -> tuple[CandidateRecord | None, IdentityValidationResult]:
        """Transform one raw row; aggregation runs only for rows passing identity validation.

        Args:
            row: Raw row keyed by source header.
            mapping: Target field key to ordered source headers.
            owner_id: Owner identifier.
            created_at_utc: Creation timestamp.

        Returns:
            tuple[CandidateRecord | None, IdentityValidationResult]: Candidate when valid and validation outcome.

        Raises:
            Exception: Any unexpected failure propagates to the per-row boundary.
        """

        field_values: dict[str, str | None] = {}
        for target_field in self._schema.domain_schema_scalar_fields():
            source_headers = mapping.get(target_field.key) or ()
            if not source_headers:
                continue
            field_values[target_field.key] = self._mapping_sanitize_value(target_field, row.get(source_headers[0]))

        validation = self.mapping_validate_identity(field_values)
        if not validation.is_valid:
            return None, validation

        import_date = created_at_utc.date()
        for aggregate_field in self._schema.domain_schema_aggregate_fields():
            payload = mapping_build_context_payload(
                row=row,
                headers=mapping.get(aggregate_field.key) or (),
                generator_tag=self._config.generator_tag,
                import_date=import_date,
                filter_placeholders=self._config.context_filter_placeholders,
            )
            field_values[aggregate_field.key] = mapping_serialize_context_payload(payload)

        candidate = CandidateRecord(
            owner_id=owner_id,
            created_at_utc=created_at_utc,
            field_values=field_values,
        )
        return candidate, validation

    def _mapping_sanitize_value(self, target_field: TargetField, value: object | None) -> str | None:
        """Dispatch one raw value to the sanitizer matching the field type.

        Args:
            target_field: Scalar target field definition.
            value: Raw cell value.

        Returns:
            str | None: Sanitized value.

        Raises:
            ValueError: Raised for aggregate fields, which are not scalar.
        """

        if target_field.field_type is TargetFieldType.DATE:
            return domain_sanitize_date(value)
        if target_field.field_type is TargetFieldType.PHONE:
            return domain_sanitize_phone(value, max_length=self._config.phone_max_length)
        if target_field.field_type in (TargetFieldType.PLAIN_TEXT, TargetFieldType.EMAIL):
            return domain_sanitize_string(value)
        raise ValueError(f"field {target_field.key} is not a scalar field")
