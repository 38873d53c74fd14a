"""
Decimal helpers shared by the pricing pipeline and the formatter.

Floats are converted through ``str`` so that ``9.99`` stays ``Decimal("9.99")``
instead of carrying binary noise into totals.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

MoneyLike = Union[int, float, str, Decimal]

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def parse_decimal(value) -> Decimal | None:
    """Return a finite Decimal for ``value`` or None when it is not a usable number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    return number


def to_decimal(value, *, error: type[Exception], field: str) -> Decimal:
    number = parse_decimal(value)
    if number is None:
        raise error(f"{field} must be a number, got {value!r}")
    return number


def quantize_money(value: Decimal, digits: int) -> Decimal:
    exponent = Decimal(1).scaleb(-digits)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)
