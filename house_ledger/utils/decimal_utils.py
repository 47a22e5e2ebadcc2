"""Decimal arithmetic helpers"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

SPLIT_TOLERANCE = Decimal("0.01")


def round_decimal(value: Decimal, decimal_places: int = 2) -> Decimal:
    """
    Round a decimal value to specified decimal places.

    ROUND_HALF_UP on Decimal rounds halves away from zero, so -0.125
    becomes -0.13.

    Args:
        value: Decimal value to round
        decimal_places: Number of decimal places (default 2)

    Returns:
        Rounded decimal value
    """
    quantize_value = Decimal(10) ** -decimal_places
    return value.quantize(quantize_value, rounding=ROUND_HALF_UP)


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """
    Sum decimal values.

    Args:
        values: Decimal values

    Returns:
        Sum of all values
    """
    return sum(values, Decimal("0"))


def amounts_match(left: Decimal, right: Decimal, tolerance: Decimal = SPLIT_TOLERANCE) -> bool:
    """Check two amounts are equal within the rounding tolerance"""
    return abs(left - right) <= tolerance
