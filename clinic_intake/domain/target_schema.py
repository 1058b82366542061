"""Target schema registry for the bulk patient import engine.

The schema is an ordered, immutable table of the fields an import accepts. It
is defined once at import time and shared by every import session.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TargetFieldType(str, Enum):
    """Value type of one target field, driving sanitizer and mapping dispatch."""

    PLAIN_TEXT = "plain_text"
    DATE = "date"
    PHONE = "phone"
    EMAIL = "email"
    AGGREGATE_CONTEXT = "aggregate_context"


@dataclass(frozen=True)
class TargetField:
    """One accepted field of the target schema.

    Attributes:
        key: Unique field identifier, also the persisted column name.
        label: Human-readable field label for mapping surfaces.
        field_type: Value type controlling sanitization and mapping cardinality.
        required: Whether the field must be mapped before an import is meaningful.
        description: Optional hint shown next to the field.
    """

    key: str
    label: str
    field_type: TargetFieldType
    required: bool = False
    description: str = ""

    def domain_field_is_aggregate(self) -> bool:
        """Return whether the field folds many source columns into one payload.

        Returns:
            bool: True for aggregate context fields.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return self.field_type is TargetFieldType.AGGREGATE_CONTEXT


@dataclass(frozen=True)
class TargetSchema:
    """Ordered immutable collection of target fields.

    Attributes:
        fields: Target fields in display and processing order.
    """

    fields: tuple[TargetField, ...]

    def __post_init__(self) -> None:
        seen_keys: set[str] = set()
        for field in self.fields:
            normalized_key = field.key.strip()
            if not normalized_key:
                raise ValueError("target field key must not be blank")
            if normalized_key in seen_keys:
                raise ValueError(f"duplicate target field key={normalized_key}")
            seen_keys.add(normalized_key)

    def domain_schema_get_field(self, key: str) -> TargetField:
        """Return one target field by key.

        Args:
            key: Target field key.

        Returns:
            TargetField: Matching field definition.

        Raises:
            ValueError: Raised when the key is not part of the schema.
        """

        for field in self.fields:
            if field.key == key:
                return field
        raise ValueError(f"unknown target field key={key}")

    def domain_schema_keys(self) -> tuple[str, ...]:
        """Return field keys in schema order.

        Returns:
            tuple[str, ...]: Ordered field keys.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return tuple(field.key for field in self.fields)

    def domain_schema_required_fields(self) -> tuple[TargetField, ...]:
        """Return required fields in schema order.

        Returns:
            tuple[TargetField, ...]: Required field definitions.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return tuple(field for field in self.fields if field.required)

    def domain_schema_scalar_fields(self) -> tuple[TargetField, ...]:
        """Return fields holding one sanitized source value each.

        Returns:
            tuple[TargetField, ...]: Non-aggregate field definitions.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return tuple(field for field in self.fields if not field.domain_field_is_aggregate())

    def domain_schema_aggregate_fields(self) -> tuple[TargetField, ...]:
        """Return fields folding many source columns into one payload.

        Returns:
            tuple[TargetField, ...]: Aggregate context field definitions.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return tuple(field for field in self.fields if field.domain_field_is_aggregate())


PATIENT_TARGET_SCHEMA = TargetSchema(
    fields=(
        TargetField(
            key="name",
            label="Full name",
            field_type=TargetFieldType.PLAIN_TEXT,
            required=True,
            description="Required",
        ),
        TargetField(key="phone", label="Phone", field_type=TargetFieldType.PHONE),
        TargetField(key="email", label="Email", field_type=TargetFieldType.PLAIN_TEXT),
        TargetField(
            key="birth_date",
            label="Birth date",
            field_type=TargetFieldType.DATE,
            description="YYYY-MM-DD or DD/MM/YYYY",
        ),
        TargetField(key="allergies", label="Allergies", field_type=TargetFieldType.PLAIN_TEXT),
        TargetField(
            key="clinical_context",
            label="History / notes / context",
            field_type=TargetFieldType.AGGREGATE_CONTEXT,
            description="Select background and note columns",
        ),
    )
)
