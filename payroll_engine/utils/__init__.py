"""Utility helpers for the payroll engine."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

__all__ = ["round_half_up", "to_decimal", "floor_to_unit"]


def to_decimal(value: Any) -> Decimal:
    """Convert value to Decimal without going through binary float."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a numeric value: {value!r}") from e


def round_half_up(value: Any) -> int:
    """Round value to nearest integer using the HALF_UP rule."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def floor_to_unit(amount: int, unit: int) -> int:
    """Round a non-negative amount down to a multiple of unit (e.g. full thousands)."""
    if unit <= 1:
        return amount
    return amount - (amount % unit)
