"""
Values -- Decimal coercion helpers shared by every domain type.

Responsibility:
    Normalize the loosely-typed numbers that arrive from catalog YAML and
    UI records (int, str, float, Decimal, sometimes NaN or blank) into
    ``Decimal`` so that no binary float ever reaches pricing arithmetic.

Invariants enforced:
    - Rates, prices, multipliers and totals are always ``Decimal``.
    - Line totals are quantized to two places with ROUND_HALF_UP.
    - Booleans are never silently treated as numbers.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
ONE = Decimal("1")
_TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """
    Convert a number-like value to Decimal.

    Floats are routed through ``str`` so that ``0.1`` becomes
    ``Decimal("0.1")`` rather than its binary expansion.

    Raises:
        TypeError: If value is a bool or not number-like.
        ValueError: If value cannot be parsed or is NaN / infinite.
    """
    if isinstance(value, bool):
        raise TypeError(f"{field_name} must be a number, got bool")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid {field_name}: {value!r}") from e
    else:
        raise TypeError(f"{field_name} must be a number, got {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Invalid {field_name}: {value!r}")
    return result


def optional_decimal(value: Any, field_name: str = "value") -> Decimal | None:
    """
    Like ``to_decimal`` but maps "not entered" to None.

    None, blank strings and NaN (what a cleared numeric input produces)
    all count as not entered.
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, float) and value != value:
        return None
    if isinstance(value, Decimal) and value.is_nan():
        return None
    return to_decimal(value, field_name)


def quantize_amount(amount: Decimal) -> Decimal:
    """Round a monetary amount to two decimal places (ROUND_HALF_UP)."""
    return amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def is_positive(value: Decimal | None) -> bool:
    """True when value is set and strictly greater than zero."""
    return value is not None and value > ZERO
