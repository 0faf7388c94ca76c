"""Decimal-string parsing and scaling for raw token amounts.

Amounts enter the engine as decimal strings (or ints) and are parsed straight
into Python ints. Binary floats are never involved, so a 24-decimal NEAR amount
keeps every digit.
"""

from __future__ import annotations

import re

from refquote.errors import InvalidAmount

_UNSIGNED_RE = re.compile(r"[0-9]+")
_DECIMAL_RE = re.compile(r"([0-9]+)(?:\.([0-9]+))?")

MAX_DECIMALS = 255


def parse_unsigned_decimal(value: str | int, field: str = "amount") -> int:
    """Parse a non-negative integer from a decimal string or int.

    Args:
        value: Digits-only string (outer whitespace ignored) or non-negative int
        field: Field name used in error messages

    Returns:
        Parsed integer

    Raises:
        InvalidAmount: On empty input, signs, decimal points, exponential
            notation or any other non-digit character
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"{field} must be an unsigned integer, got bool")
    if isinstance(value, int):
        if value < 0:
            raise InvalidAmount(f"{field} must be non-negative, got {value}")
        return value
    if not isinstance(value, str):
        raise InvalidAmount(f"{field} must be a decimal string, got {type(value).__name__}")

    normalized = value.strip()
    if not _UNSIGNED_RE.fullmatch(normalized):
        raise InvalidAmount(f"{field} must be an unsigned integer string: '{value}'")
    return int(normalized)


def parse_positive_amount(value: str | int, field: str = "amount") -> int:
    """Parse an unsigned integer amount that must be greater than zero."""
    parsed = parse_unsigned_decimal(value, field)
    if parsed <= 0:
        raise InvalidAmount(f"{field} must be greater than 0")
    return parsed


def _validate_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise InvalidAmount("decimals must be an integer")
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise InvalidAmount(f"decimals must be between 0 and {MAX_DECIMALS}")
    return decimals


def scale_decimal_to_atomic(value: str, decimals: int, field: str = "amount") -> int:
    """Convert a human decimal amount into atomic units.

    "1.5" with 6 decimals becomes 1_500_000. The fractional part is padded,
    never rounded: more fractional digits than ``decimals`` is an error.

    Raises:
        InvalidAmount: On malformed input or excess fractional precision
    """
    decimals = _validate_decimals(decimals)
    if not isinstance(value, str):
        raise InvalidAmount(f"{field} must be a decimal string, got {type(value).__name__}")

    match = _DECIMAL_RE.fullmatch(value.strip())
    if match is None:
        raise InvalidAmount(f"{field} must be a positive decimal number: '{value}'")

    whole, fraction = match.group(1), match.group(2) or ""
    if len(fraction) > decimals:
        raise InvalidAmount(f"{field} supports up to {decimals} decimal places")

    return int(whole + fraction.ljust(decimals, "0"))


def format_atomic_amount(
    raw_amount: str | int,
    decimals: int,
    max_fraction_digits: int = 6,
) -> str:
    """Render atomic units as a human decimal string.

    Extra fractional digits are truncated, never rounded, and trailing zeros
    are stripped: 1_234_567 with 6 decimals and 2 digits gives "1.23".
    """
    amount = parse_unsigned_decimal(raw_amount, "raw_amount")
    decimals = _validate_decimals(decimals)

    base = 10**decimals
    whole, fraction_raw = divmod(amount, base)
    if fraction_raw == 0:
        return str(whole)

    digits = max(0, min(max_fraction_digits, decimals))
    fraction = str(fraction_raw).rjust(decimals, "0")[:digits].rstrip("0")
    if not fraction:
        return str(whole)
    return f"{whole}.{fraction}"


__all__ = [
    "MAX_DECIMALS",
    "parse_unsigned_decimal",
    "parse_positive_amount",
    "scale_decimal_to_atomic",
    "format_atomic_amount",
]
