"""Shared value sanitizers for spreadsheet import normalization.

Every sanitizer is pure and total: missing or malformed input degrades to
None or an empty string and never raises, so a single dirty cell can not abort
a row or an import.
"""

from __future__ import annotations

from datetime import date, datetime
import re

_DOMAIN_SANITIZE_PLACEHOLDER_TOKENS = frozenset(
    {
        "",
        "-",
        ".",
        "n/a",
        "na",
        "nd",
        "s/d",
        "no aplica",
        "desconocido",
        "sin dato",
        "null",
        "undefined",
    }
)

_DOMAIN_SANITIZE_DAY_FIRST_PATTERN = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")

_DOMAIN_SANITIZE_PHONE_REJECT_PATTERN = re.compile(r"[^0-9+]")

_DOMAIN_SANITIZE_DATE_FORMATS = (
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%Y%m%d",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d-%b-%Y",
)

DOMAIN_SANITIZE_DEFAULT_PHONE_MAX_LENGTH = 20


def domain_sanitize_is_placeholder(value: object | None) -> bool:
    """Check whether a raw value is a known "no value" placeholder token.

    Args:
        value: Raw cell value.

    Returns:
        bool: True when the value is missing or matches the placeholder denylist.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None:
        return True
    if not isinstance(value, str):
        return False
    return value.strip().lower() in _DOMAIN_SANITIZE_PLACEHOLDER_TOKENS


def domain_sanitize_date(value: object | None) -> str | None:
    """Normalize one raw date cell to an ISO `YYYY-MM-DD` string.

    Args:
        value: Raw cell value.

    Returns:
        str | None: ISO date string, or None when missing, a placeholder or unparseable.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    normalized_value = str(value).strip()
    if domain_sanitize_is_placeholder(normalized_value):
        return None

    parsed_date = _domain_sanitize_parse_date(normalized_value)
    if parsed_date is None:
        return None
    return parsed_date.isoformat()


def domain_sanitize_phone(value: object | None, max_length: int = DOMAIN_SANITIZE_DEFAULT_PHONE_MAX_LENGTH) -> str:
    """Strip a raw phone cell down to ASCII digits and `+`.

    Args:
        value: Raw cell value.
        max_length: Maximum number of characters kept.

    Returns:
        str: Sanitized phone text, empty when the input is missing.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None or value == "":
        return ""
    digits_only = _DOMAIN_SANITIZE_PHONE_REJECT_PATTERN.sub("", str(value))
    return digits_only[: max(max_length, 0)]


def domain_sanitize_string(value: object | None) -> str:
    """Trim one raw text cell.

    Args:
        value: Raw cell value.

    Returns:
        str: Trimmed text, empty for missing or non-string input.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if not isinstance(value, str):
        return ""
    return value.strip()


def _domain_sanitize_parse_date(normalized_value: str) -> date | None:
    """Parse one non-placeholder date text using a fixed candidate order.

    Args:
        normalized_value: Stripped date text.

    Returns:
        date | None: Parsed calendar date, else None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    try:
        return date.fromisoformat(normalized_value)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(normalized_value).date()
    except ValueError:
        pass

    # Slash or dash separated numeric dates are always read day-first.
    day_first_match = _DOMAIN_SANITIZE_DAY_FIRST_PATTERN.match(normalized_value)
    if day_first_match is not None:
        day_text, month_text, year_text = day_first_match.groups()
        try:
            return date(int(year_text), int(month_text), int(day_text))
        except ValueError:
            return None

    for supported_format in _DOMAIN_SANITIZE_DATE_FORMATS:
        try:
            return datetime.strptime(normalized_value, supported_format).date()
        except ValueError:
            continue

    return None


__all__ = [
    "DOMAIN_SANITIZE_DEFAULT_PHONE_MAX_LENGTH",
    "domain_sanitize_date",
    "domain_sanitize_is_placeholder",
    "domain_sanitize_phone",
    "domain_sanitize_string",
]
