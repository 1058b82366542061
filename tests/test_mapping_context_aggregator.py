"""Tests for clinical context payload aggregation."""

from __future__ import annotations

from datetime import date
import json

from clinic_intake.mapping import mapping_build_context_payload, mapping_serialize_context_payload

_IMPORT_DATE = date(2026, 10, 18)


def test_mapping_build_context_payload_folds_columns_in_mapping_order() -> None:
    """Fold non-empty mapped values into legacy data and summary lines.

    Returns:
        None: Assertions validate payload structure.

    Raises:
        AssertionError: Raised when payload differs.
    """

    row = {"Notas": "  Hipertensa ", "Antecedentes": "Asma infantil", "Otro": "ignored"}

    payload = mapping_build_context_payload(
        row=row,
        headers=("Antecedentes", "Notas"),
        generator_tag="bulk_import",
        import_date=_IMPORT_DATE,
    )

    assert payload == {
        "generator_tag": "bulk_import",
        "import_date": "2026-10-18",
        "legacy_data": {"Antecedentes": "Asma infantil", "Notas": "Hipertensa"},
        "summary_text": "[Antecedentes]: Asma infantil\n[Notas]: Hipertensa\n",
        "clinical_summary": "[Antecedentes]: Asma infantil\n[Notas]: Hipertensa\n",
    }
    assert list(payload["legacy_data"]) == ["Antecedentes", "Notas"]


def test_mapping_build_context_payload_emits_envelope_for_empty_rows() -> None:
    """Emit generator tag and import date even when no mapped cell has content.

    Returns:
        None: Assertions validate the minimal envelope.

    Raises:
        AssertionError: Raised when the envelope is missing or over-populated.
    """

    payload = mapping_build_context_payload(
        row={"Notas": "   "},
        headers=("Notas", "Missing"),
        generator_tag="bulk_import",
        import_date=_IMPORT_DATE,
    )

    assert payload == {"generator_tag": "bulk_import", "import_date": "2026-10-18", "legacy_data": {}}


def test_mapping_build_context_payload_keeps_placeholders_unless_filtered() -> None:
    """Keep placeholder tokens by default and drop them when filtering is enabled.

    Returns:
        None: Assertions validate placeholder handling.

    Raises:
        AssertionError: Raised when placeholder handling differs.
    """

    row = {"Notas": "N/A", "Alergias": "Penicilina"}

    default_payload = mapping_build_context_payload(
        row=row,
        headers=("Notas", "Alergias"),
        generator_tag="bulk_import",
        import_date=_IMPORT_DATE,
    )
    filtered_payload = mapping_build_context_payload(
        row=row,
        headers=("Notas", "Alergias"),
        generator_tag="bulk_import",
        import_date=_IMPORT_DATE,
        filter_placeholders=True,
    )

    assert default_payload["legacy_data"] == {"Notas": "N/A", "Alergias": "Penicilina"}
    assert filtered_payload["legacy_data"] == {"Alergias": "Penicilina"}
    assert filtered_payload["summary_text"] == "[Alergias]: Penicilina\n"


def test_mapping_serialize_context_payload_preserves_non_ascii_text() -> None:
    """Serialize payloads as JSON without escaping accented characters.

    Returns:
        None: Assertions validate serialization.

    Raises:
        AssertionError: Raised when serialization differs.
    """

    payload = mapping_build_context_payload(
        row={"Diagnóstico": "Migraña"},
        headers=("Diagnóstico",),
        generator_tag="bulk_import",
        import_date=_IMPORT_DATE,
    )

    serialized = mapping_serialize_context_payload(payload)

    assert "Migraña" in serialized
    assert json.loads(serialized) == payload
