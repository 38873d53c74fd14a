"""
Forward and reverse tax computation.

Quote creation builds totals forward (tax added on top of the discounted
amount); quote summaries and invoices re-derive the tax portion already
contained in a stored tax-inclusive total. Rates are fractions in [0, 1];
percent values must be converted before they get here.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from repair_pricing.core.errors import PricingError
from repair_pricing.core.models.tax_rate import TaxRate, check_rate
from repair_pricing.utils.money import ZERO, to_decimal

RateLike = Union[TaxRate, Decimal, float, int, str, None]


def _rate(rate: RateLike) -> Decimal | None:
    if rate is None:
        return None
    if isinstance(rate, TaxRate):
        return rate.rate
    return check_rate(rate)


def forward_tax(discounted_amount, rate: RateLike) -> Decimal:
    value = _rate(rate)
    if value is None:
        return ZERO
    return to_decimal(discounted_amount, error=PricingError, field="amount") * value


def forward_total(discounted_amount, rate: RateLike) -> Decimal:
    amount = to_decimal(discounted_amount, error=PricingError, field="amount")
    return amount + forward_tax(amount, rate)


def reverse_tax(total, rate: RateLike) -> Decimal:
    """Tax portion of a tax-inclusive ``total``: ``total - total / (1 + rate)``."""
    value = _rate(rate)
    if value is None:
        return ZERO
    gross = to_decimal(total, error=PricingError, field="total")
    return gross - gross / (1 + value)


def net_of_tax(total, rate: RateLike) -> Decimal:
    gross = to_decimal(total, error=PricingError, field="total")
    return gross - reverse_tax(gross, rate)
