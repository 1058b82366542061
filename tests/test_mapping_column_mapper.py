"""Tests for session-scoped column mapping state."""

from __future__ import annotations

import pytest

from clinic_intake.domain import PATIENT_TARGET_SCHEMA
from clinic_intake.mapping import ColumnMapper


def _mapper_build(headers: tuple[str, ...] | None = ("Nombre", "Nombre completo", "Notas", "Antecedentes", "Tel")) -> ColumnMapper:
    """Build a mapper over the patient schema.

    Args:
        headers: Discovered source headers, or None for an unrestricted mapper.

    Returns:
        ColumnMapper: Empty mapper.

    Raises:
        ValueError: Raised when schema is invalid.
    """

    return ColumnMapper(schema=PATIENT_TARGET_SCHEMA, headers=headers)


def test_mapping_select_replaces_scalar_field_selection() -> None:
    """Keep only the last header selected for a scalar field.

    Returns:
        None: Assertions validate last-selection-wins behavior.

    Raises:
        AssertionError: Raised when scalar mapping accumulates headers.
    """

    mapper = _mapper_build()

    assert mapper.mapping_select("name", "Nombre") == ("Nombre",)
    assert mapper.mapping_select("name", "Nombre completo") == ("Nombre completo",)
    assert mapper.mapping_select("name", "Nombre completo") == ("Nombre completo",)
    assert mapper.mapping_sources_for("name") == ("Nombre completo",)


def test_mapping_select_toggles_aggregate_field_membership_in_order() -> None:
    """Toggle aggregate headers while keeping first-selection order.

    Returns:
        None: Assertions validate toggle semantics.

    Raises:
        AssertionError: Raised when aggregate membership is not toggled.
    """

    mapper = _mapper_build()

    assert mapper.mapping_select("clinical_context", "Notas") == ("Notas",)
    assert mapper.mapping_select("clinical_context", "Antecedentes") == ("Notas", "Antecedentes")
    assert mapper.mapping_select("clinical_context", "Notas") == ("Antecedentes",)
    assert mapper.mapping_select("clinical_context", "Notas") == ("Antecedentes", "Notas")
    assert mapper.mapping_select("clinical_context", "Antecedentes") == ("Notas",)


def test_mapping_snapshot_omits_emptied_aggregate_entries() -> None:
    """Drop aggregate entries whose headers were all toggled off.

    Returns:
        None: Assertions validate snapshot contents.

    Raises:
        AssertionError: Raised when empty entries leak into snapshots.
    """

    mapper = _mapper_build()
    mapper.mapping_select("name", "Nombre")
    mapper.mapping_select("clinical_context", "Notas")
    mapper.mapping_select("clinical_context", "Notas")

    snapshot = mapper.mapping_snapshot()

    assert snapshot == {"name": ("Nombre",)}
    mapper.mapping_select("phone", "Tel")
    assert "phone" not in snapshot


def test_mapping_required_satisfaction_tracks_identity_field() -> None:
    """Report unsatisfied required fields until the identity field is mapped.

    Returns:
        None: Assertions validate required-field tracking.

    Raises:
        AssertionError: Raised when satisfaction state is wrong.
    """

    mapper = _mapper_build()
    mapper.mapping_select("phone", "Tel")

    assert not mapper.mapping_is_required_satisfied()
    assert mapper.mapping_missing_required_keys() == ("name",)

    mapper.mapping_select("name", "Nombre")

    assert mapper.mapping_is_required_satisfied()
    assert mapper.mapping_missing_required_keys() == ()


def test_mapping_select_rejects_unknown_target_and_header() -> None:
    """Raise for target keys outside the schema and headers outside the file.

    Returns:
        None: Assertions validate selection guards.

    Raises:
        AssertionError: Raised when invalid selections are accepted.
    """

    mapper = _mapper_build()

    with pytest.raises(ValueError, match="unknown target field"):
        mapper.mapping_select("ssn", "Nombre")
    with pytest.raises(ValueError, match="unknown source header"):
        mapper.mapping_select("name", "Apellido")
    assert mapper.mapping_snapshot() == {}


def test_mapping_select_accepts_any_header_before_ingestion() -> None:
    """Accept arbitrary headers when no header set is known.

    Returns:
        None: Assertions validate unrestricted mapping.

    Raises:
        AssertionError: Raised when unrestricted selection fails.
    """

    mapper = _mapper_build(headers=None)

    assert mapper.mapping_select("name", "Anything") == ("Anything",)
