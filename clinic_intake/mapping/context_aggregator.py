"""Clinical context aggregation for multi-column free-text source data.

Scattered note, history and background columns are folded into one JSON
envelope per row so downstream readers get a single structured payload.
"""

from __future__ import annotations

from datetime import date
import json

from clinic_intake.domain import domain_sanitize_is_placeholder, domain_sanitize_string

from .interfaces import RawRow

MAPPING_CONTEXT_GENERATOR_TAG_KEY = "generator_tag"
MAPPING_CONTEXT_IMPORT_DATE_KEY = "import_date"
MAPPING_CONTEXT_LEGACY_DATA_KEY = "legacy_data"
MAPPING_CONTEXT_SUMMARY_TEXT_KEY = "summary_text"
# Older readers look the summary up under this name.
MAPPING_CONTEXT_COMPATIBILITY_ALIAS_KEY = "clinical_summary"


def mapping_build_context_payload(
    row: RawRow,
    headers: tuple[str, ...] | list[str],
    generator_tag: str,
    import_date: date,
    filter_placeholders: bool = False,
) -> dict[str, object]:
    """Fold mapped source columns of one row into a clinical context payload.

    Args:
        row: Raw row keyed by source header.
        headers: Ordered headers mapped to the aggregate field.
        generator_tag: Origin marker stamped into the payload.
        import_date: Import date stamped into the payload.
        filter_placeholders: Whether placeholder tokens such as `N/A` are dropped.

    Returns:
        dict[str, object]: Context payload; always carries generator tag and import date.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    legacy_data: dict[str, str] = {}
    summary_lines: list[str] = []
    for header in headers:
        value = domain_sanitize_string(row.get(header))
        if not value:
            continue
        if filter_placeholders and domain_sanitize_is_placeholder(value):
            continue
        legacy_data[header] = value
        summary_lines.append(f"[{header}]: {value}\n")

    payload: dict[str, object] = {
        MAPPING_CONTEXT_GENERATOR_TAG_KEY: generator_tag,
        MAPPING_CONTEXT_IMPORT_DATE_KEY: import_date.isoformat(),
        MAPPING_CONTEXT_LEGACY_DATA_KEY: legacy_data,
    }
    summary_text = "".join(summary_lines)
    if summary_text:
        payload[MAPPING_CONTEXT_SUMMARY_TEXT_KEY] = summary_text
        payload[MAPPING_CONTEXT_COMPATIBILITY_ALIAS_KEY] = summary_text
    return payload


def mapping_serialize_context_payload(payload: dict[str, object]) -> str:
    """Serialize one context payload into its stored JSON text form.

    Args:
        payload: Context payload built by `mapping_build_context_payload`.

    Returns:
        str: JSON document preserving key insertion order and non-ASCII text.

    Raises:
        TypeError: Raised when payload holds non-JSON values.
    """

    return json.dumps(payload, ensure_ascii=False)


__all__ = [
    "MAPPING_CONTEXT_COMPATIBILITY_ALIAS_KEY",
    "MAPPING_CONTEXT_GENERATOR_TAG_KEY",
    "MAPPING_CONTEXT_IMPORT_DATE_KEY",
    "MAPPING_CONTEXT_LEGACY_DATA_KEY",
    "MAPPING_CONTEXT_SUMMARY_TEXT_KEY",
    "mapping_build_context_payload",
    "mapping_serialize_context_payload",
]
