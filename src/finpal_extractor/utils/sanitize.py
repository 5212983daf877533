"""Sanitization utilities for extracted text and safe output generation."""

import re
from typing import Optional

# Characters that trigger formula execution in spreadsheet applications
# when they appear at the start of a cell value
# Includes | for DDE (Dynamic Data Exchange) attack prevention
_FORMULA_CHARS = ("=", "+", "-", "@", "\t", "\r", "\n", "|")

_WHITESPACE = re.compile(r"\s+")

# Runs of punctuation left behind once amounts and dates are cut out of a line
_DANGLING_PUNCTUATION = re.compile(r"^[\s,;:|/\\-]+|[\s,;:|/\\-]+$")

DEFAULT_MAX_DESCRIPTION_LENGTH = 200


def clean_description(text: Optional[str], max_length: int = DEFAULT_MAX_DESCRIPTION_LENGTH) -> str:
    """Collapse whitespace, trim dangling separators and cap length.

    Args:
        text: Raw description captured from a row or line.
        max_length: Maximum number of characters kept.

    Returns:
        Cleaned description, possibly empty.
    """
    if not text:
        return ""
    cleaned = _WHITESPACE.sub(" ", str(text)).strip()
    cleaned = _DANGLING_PUNCTUATION.sub("", cleaned)
    return cleaned[:max_length].strip()


def sanitize_for_csv(value: Optional[str]) -> Optional[str]:
    """Sanitize a string value for safe CSV/Excel output.

    Prevents formula injection by prefixing values that start with
    formula-triggering characters (=, +, -, @, tab, etc.) with a
    single quote, the OWASP mitigation for CSV injection.

    Args:
        value: String value to sanitize, or None.

    Returns:
        Sanitized string, or None if input was None.
    """
    if value is None or not value:
        return value

    if value.startswith(_FORMULA_CHARS):
        return "'" + value

    return value
