"""
Whole-unit money helpers.

Prices, totals, tax and savings are carried as integer currency units. Every
fractional intermediate is rounded half-up exactly once through to_whole_units.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

TAX_RATE = Decimal("0.08")


def to_whole_units(value: Union[int, float, Decimal]) -> int:
    """
    Round an amount half-up to the nearest whole currency unit.

    Floats are routed through their shortest repr so that 2.5 rounds to 3
    the way a purchasing clerk expects, not to 2.

    Args:
        value: Amount to round

    Returns:
        Rounded integer amount
    """
    if isinstance(value, int):
        return value
    if not isinstance(value, Decimal):
        value = Decimal(repr(value))
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apply_rate(amount: int, rate: Union[Decimal, str]) -> int:
    """Multiply an integer amount by a rate and round once."""
    return to_whole_units(Decimal(amount) * Decimal(rate))


def format_money(amount: Union[int, float]) -> str:
    """Format an amount as $12,345 (cents only when present)."""
    if isinstance(amount, float) and not amount.is_integer():
        return f"${amount:,.2f}"
    return f"${int(amount):,}"
