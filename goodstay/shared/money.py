"""Currency helpers - amounts are Decimal dollars internally and integer cents at Stripe"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")

Amount = Union[Decimal, int, float, str]


def to_decimal(value: Amount) -> Decimal:
    """Convert a price to a two-place Decimal (floats go through str to avoid binary noise)"""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(value: Amount) -> int:
    """Dollars to integer cents, rounding half up"""
    return int((to_decimal(value) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(value: Amount) -> str:
    """Render an amount the way it is stored in checkout metadata"""
    return f"{to_decimal(value):.2f}"
