"""Session-scoped column mapping state between source headers and target fields."""

from __future__ import annotations

from clinic_intake.domain import TargetField, TargetSchema

from .interfaces import FieldMapping


class ColumnMapper:
    """Mutable mapping of target field keys to ordered source headers.

    Scalar fields hold at most one header and every selection replaces the
    previous one. Aggregate context fields hold any number of headers and every
    selection toggles membership while keeping first-selection order.
    """

    def __init__(self, schema: TargetSchema, headers: list[str] | tuple[str, ...] | None = None):
        """Initialize empty mapping state.

        Args:
            schema: Target schema driving cardinality dispatch.
            headers: Optional discovered source headers; when given, selections are restricted to them.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when schema is missing.
        """

        if schema is None:
            raise ValueError("schema must not be None")

        self._schema = schema
        self._headers: frozenset[str] | None = frozenset(headers) if headers is not None else None
        self._mapping: dict[str, list[str]] = {}

    def mapping_select(self, target_key: str, header: str) -> tuple[str, ...]:
        """Apply one header selection to a target field.

        Args:
            target_key: Target field key.
            header: Source header being selected.

        Returns:
            tuple[str, ...]: Headers mapped to the target field after the selection.

        Raises:
            ValueError: Raised when the target key or header is unknown.
        """

        target_field = self._schema.domain_schema_get_field(target_key)
        if self._headers is not None and header not in self._headers:
            raise ValueError(f"unknown source header={header}")

        if target_field.domain_field_is_aggregate():
            self._mapping_toggle(target_field, header)
        else:
            self._mapping[target_field.key] = [header]
        return self.mapping_sources_for(target_field.key)

    def mapping_sources_for(self, target_key: str) -> tuple[str, ...]:
        """Return ordered source headers mapped to one target field.

        Args:
            target_key: Target field key.

        Returns:
            tuple[str, ...]: Mapped headers, empty when unmapped.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return tuple(self._mapping.get(target_key, ()))

    def mapping_is_required_satisfied(self) -> bool:
        """Check whether every required field has at least one mapped header.

        Returns:
            bool: True when no required field is unmapped.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return not self.mapping_missing_required_keys()

    def mapping_missing_required_keys(self) -> tuple[str, ...]:
        """Return required field keys that still have no mapped header.

        Returns:
            tuple[str, ...]: Unsatisfied required keys in schema order.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return tuple(
            field.key
            for field in self._schema.domain_schema_required_fields()
            if not self._mapping.get(field.key)
        )

    def mapping_snapshot(self) -> FieldMapping:
        """Return an immutable copy of the current mapping.

        Returns:
            FieldMapping: Target key to ordered header tuple, without empty entries.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {key: tuple(headers) for key, headers in self._mapping.items() if headers}

    def _mapping_toggle(self, target_field: TargetField, header: str) -> None:
        current_headers = self._mapping.setdefault(target_field.key, [])
        if header in current_headers:
            current_headers.remove(header)
        else:
            current_headers.append(header)
