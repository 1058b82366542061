"""Tests for per-row transformation into candidate patient records."""

from __future__ import annotations

from datetime import datetime, timezone
import json

import pytest

from clinic_intake.domain import TargetField, TargetFieldType, TargetSchema
from clinic_intake.mapping import (
    ROW_REJECTION_IDENTITY_TOO_SHORT,
    ROW_REJECTION_UNEXPECTED_ERROR,
    RowTransformConfig,
    RowTransformService,
)

_CREATED_AT_UTC = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)

_FULL_MAPPING = {
    "name": ("Nombre",),
    "phone": ("Telefono",),
    "email": ("Correo",),
    "birth_date": ("Nacimiento",),
    "allergies": ("Alergias",),
    "clinical_context": ("Antecedentes", "Notas"),
}


def _transform(rows: list, mapping: dict | None = None, config: RowTransformConfig | None = None):
    """Run the default row transformer over rows.

    Args:
        rows: Raw rows.
        mapping: Optional mapping override.
        config: Optional transformer configuration.

    Returns:
        RowTransformBatch: Transform outcome.

    Raises:
        ValueError: Raised when inputs are invalid.
    """

    service = RowTransformService(config=config)
    return service.mapping_transform_rows(
        rows=rows,
        mapping=_FULL_MAPPING if mapping is None else mapping,
        owner_id="owner-1",
        created_at_utc=_CREATED_AT_UTC,
    )


def test_mapping_transform_rows_builds_sanitized_candidate() -> None:
    """Sanitize scalar fields and fold context columns for a valid row.

    Returns:
        None: Assertions validate candidate contents.

    Raises:
        AssertionError: Raised when candidate values differ.
    """

    row = {
        "Nombre": "  Ana Pérez ",
        "Telefono": "+56 9 1234-5678",
        "Correo": " ana@example.org ",
        "Nacimiento": "20/05/1990",
        "Alergias": "Penicilina",
        "Antecedentes": "Asma",
        "Notas": "",
    }

    batch = _transform([row])

    assert batch.skipped_count == 0
    assert len(batch.candidates) == 1
    candidate = batch.candidates[0]
    assert candidate.owner_id == "owner-1"
    assert candidate.created_at_utc == _CREATED_AT_UTC
    assert candidate.field_values["name"] == "Ana Pérez"
    assert candidate.field_values["phone"] == "+56912345678"
    assert candidate.field_values["email"] == "ana@example.org"
    assert candidate.field_values["birth_date"] == "1990-05-20"
    assert candidate.field_values["allergies"] == "Penicilina"
    assert json.loads(candidate.field_values["clinical_context"]) == {
        "generator_tag": "bulk_import",
        "import_date": "2026-10-18",
        "legacy_data": {"Antecedentes": "Asma"},
        "summary_text": "[Antecedentes]: Asma\n",
        "clinical_summary": "[Antecedentes]: Asma\n",
    }


def test_mapping_transform_rows_rejects_short_identity() -> None:
    """Skip rows whose trimmed identity is shorter than two characters.

    Returns:
        None: Assertions validate the identity hard check.

    Raises:
        AssertionError: Raised when short identities survive.
    """

    batch = _transform([{"Nombre": "J"}, {"Nombre": "Jo"}, {"Nombre": "   "}, {}])

    assert [candidate.field_values["name"] for candidate in batch.candidates] == ["Jo"]
    assert [rejection.row_index for rejection in batch.rejections] == [0, 2, 3]
    assert {rejection.reason for rejection in batch.rejections} == {ROW_REJECTION_IDENTITY_TOO_SHORT}
    assert batch.skipped_count == 3


def test_mapping_transform_rows_rejects_all_rows_when_identity_is_unmapped() -> None:
    """Skip every row when the identity field has no mapped header.

    Returns:
        None: Assertions validate unmapped identity handling.

    Raises:
        AssertionError: Raised when rows survive without identity.
    """

    batch = _transform([{"Telefono": "123"}, {"Telefono": "456"}], mapping={"phone": ("Telefono",)})

    assert batch.candidates == ()
    assert batch.skipped_count == 2


def test_mapping_transform_rows_contains_unexpected_row_failures() -> None:
    """Count a row that raises during transform as skipped and continue.

    Returns:
        None: Assertions validate per-row error containment.

    Raises:
        AssertionError: Raised when one failing row aborts the batch.
    """

    batch = _transform([{"Nombre": "Ana"}, None, {"Nombre": "Luis"}])

    assert [candidate.field_values["name"] for candidate in batch.candidates] == ["Ana", "Luis"]
    assert len(batch.rejections) == 1
    assert batch.rejections[0].row_index == 1
    assert batch.rejections[0].reason == ROW_REJECTION_UNEXPECTED_ERROR


def test_mapping_transform_rows_keeps_unparseable_dates_as_none() -> None:
    """Keep rows with unparseable optional values and store None dates.

    Returns:
        None: Assertions validate soft sanitization.

    Raises:
        AssertionError: Raised when dirty optional cells drop rows.
    """

    batch = _transform([{"Nombre": "Ana", "Nacimiento": "N/A", "Telefono": None}])

    candidate = batch.candidates[0]
    assert candidate.field_values["birth_date"] is None
    assert candidate.field_values["phone"] == ""


def test_mapping_transform_rows_emits_context_envelope_without_mapped_columns() -> None:
    """Emit the minimal context envelope when no context column is mapped.

    Returns:
        None: Assertions validate the envelope.

    Raises:
        AssertionError: Raised when the envelope is missing.
    """

    batch = _transform([{"Nombre": "Ana"}], mapping={"name": ("Nombre",)})

    assert json.loads(batch.candidates[0].field_values["clinical_context"]) == {
        "generator_tag": "bulk_import",
        "import_date": "2026-10-18",
        "legacy_data": {},
    }
    assert "phone" not in batch.candidates[0].field_values


def test_mapping_transform_rows_fills_every_aggregate_field() -> None:
    """Build one payload per aggregate field of a custom schema.

    Returns:
        None: Assertions validate multi-aggregate schemas.

    Raises:
        AssertionError: Raised when an aggregate field is skipped.
    """

    schema = TargetSchema(
        fields=(
            TargetField(key="name", label="Name", field_type=TargetFieldType.PLAIN_TEXT, required=True),
            TargetField(key="history", label="History", field_type=TargetFieldType.AGGREGATE_CONTEXT),
            TargetField(key="notes", label="Notes", field_type=TargetFieldType.AGGREGATE_CONTEXT),
        )
    )
    service = RowTransformService(schema=schema, config=RowTransformConfig(generator_tag="legacy_sync"))

    batch = service.mapping_transform_rows(
        rows=[{"N": "Ana", "H": "Asma", "X": "Control anual"}],
        mapping={"name": ("N",), "history": ("H",), "notes": ("X",)},
        owner_id="owner-1",
        created_at_utc=_CREATED_AT_UTC,
    )

    field_values = batch.candidates[0].field_values
    assert json.loads(field_values["history"])["legacy_data"] == {"H": "Asma"}
    assert json.loads(field_values["notes"])["legacy_data"] == {"X": "Control anual"}
    assert json.loads(field_values["notes"])["generator_tag"] == "legacy_sync"


def test_mapping_transform_rows_validates_inputs_and_config() -> None:
    """Reject blank owners and configurations that do not fit the schema.

    Returns:
        None: Assertions validate guard clauses.

    Raises:
        AssertionError: Raised when invalid inputs are accepted.
    """

    with pytest.raises(ValueError, match="owner_id"):
        RowTransformService().mapping_transform_rows(
            rows=[], mapping={}, owner_id="  ", created_at_utc=_CREATED_AT_UTC
        )
    with pytest.raises(ValueError, match="aggregate"):
        RowTransformService(config=RowTransformConfig(identity_field_key="clinical_context"))
    with pytest.raises(ValueError, match="unknown target field"):
        RowTransformService(config=RowTransformConfig(identity_field_key="ssn"))
    with pytest.raises(ValueError, match="identity_min_length"):
        RowTransformService(config=RowTransformConfig(identity_min_length=0))


def test_mapping_transform_rows_honors_identity_min_length_config() -> None:
    """Apply a configured identity minimum length.

    Returns:
        None: Assertions validate configurable identity threshold.

    Raises:
        AssertionError: Raised when the threshold is ignored.
    """

    batch = _transform(
        [{"Nombre": "Jo"}, {"Nombre": "Joe"}],
        mapping={"name": ("Nombre",)},
        config=RowTransformConfig(identity_min_length=3),
    )

    assert [candidate.field_values["name"] for candidate in batch.candidates] == ["Joe"]
