"""Decimal utilities for statement amounts.

All monetary values are Decimal. Commas are always thousands separators
(Indian grouping such as 1,20,000.50 included).
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

ZERO = Decimal("0")

# Currency markers to strip, longest first so "Rs." wins over "Rs"
CURRENCY_MARKERS = ("INR", "Rs.", "Rs", "₹", "$", "€", "£")

# Parentheses-enclosed negatives: (₹1,234.56) or (1234.56)
PARENS_NEGATIVE_PATTERN = re.compile(r"^\s*\(\s*([^)]+)\s*\)\s*$")

# Trailing DR/CR indicators used by bank statements
DR_CR_PATTERN = re.compile(r"\s*\b(DR|CR)\.?\s*$", re.IGNORECASE)


def parse_amount_parts(raw_amount: str) -> tuple[Decimal, bool]:
    """Parse a raw amount string into magnitude and sign.

    Handles:
    - Plain: 1234.56, -1234.56
    - With currency: ₹1,234.56, Rs. 500, INR 250
    - Indian grouping: 1,20,000.50
    - Parentheses for negative: (500), (₹1,234.56)
    - DR/CR suffix: 1234.56 Dr, 1234.56 CR

    Args:
        raw_amount: The raw amount string to parse.

    Returns:
        Tuple of (absolute amount as Decimal, is_negative flag).

    Raises:
        ValueError: If the amount cannot be parsed.
    """
    if not raw_amount or not raw_amount.strip():
        raise ValueError("Empty amount string")

    original = raw_amount
    amount_str = raw_amount.strip()
    is_negative = False

    parens_match = PARENS_NEGATIVE_PATTERN.match(amount_str)
    if parens_match:
        amount_str = parens_match.group(1).strip()
        is_negative = True

    dr_cr_match = DR_CR_PATTERN.search(amount_str)
    if dr_cr_match:
        if dr_cr_match.group(1).upper() == "DR":
            is_negative = True
        amount_str = amount_str[:dr_cr_match.start()].strip()

    if amount_str.startswith("-"):
        is_negative = True
        amount_str = amount_str[1:].strip()
    elif amount_str.startswith("+"):
        amount_str = amount_str[1:].strip()

    for marker in CURRENCY_MARKERS:
        amount_str = amount_str.replace(marker, "")

    # Sign may also sit after the currency glyph: ₹-450
    amount_str = amount_str.strip()
    if amount_str.startswith("-"):
        is_negative = True
        amount_str = amount_str[1:]

    amount_str = amount_str.replace(",", "").replace("\u00a0", "").replace(" ", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse amount '{original}'") from e

    if not amount.is_finite():
        raise ValueError(f"Cannot parse amount '{original}'")

    return abs(amount), is_negative


def parse_amount(raw_amount: object) -> Decimal:
    """Leniently parse a statement amount into a signed Decimal.

    Unparseable input yields zero rather than an error; most candidate
    cells and lines in a statement are noise.

    Args:
        raw_amount: String, int, float or Decimal.

    Returns:
        Signed Decimal, negative for parenthesized/minus/DR amounts.
    """
    if raw_amount is None or isinstance(raw_amount, bool):
        return ZERO
    if isinstance(raw_amount, Decimal):
        return raw_amount if raw_amount.is_finite() else ZERO
    if isinstance(raw_amount, (int, float)):
        return safe_decimal(raw_amount)
    if not isinstance(raw_amount, str):
        return ZERO

    try:
        magnitude, is_negative = parse_amount_parts(raw_amount)
    except ValueError:
        return ZERO
    return -magnitude if is_negative else magnitude


def safe_decimal(value: Optional[object], default: Decimal = ZERO) -> Decimal:
    """Safely convert a value to Decimal.

    Args:
        value: Value to convert (string, int, float, or None).
        default: Default value if conversion fails.

    Returns:
        Decimal value or default.
    """
    if value is None:
        return default

    try:
        if isinstance(value, Decimal):
            return value
        if isinstance(value, (int, float, str)):
            # str() first so floats keep their shortest repr
            result = Decimal(str(value))
            return result if result.is_finite() else default
        return default
    except (InvalidOperation, ValueError):
        return default
