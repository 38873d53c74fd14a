from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping

from repair_pricing.core.calculations.tax import forward_tax
from repair_pricing.core.errors import PricingError
from repair_pricing.core.models.line_item import LineItem
from repair_pricing.core.models.pricing import (
    DiscountType,
    PricingInput,
    PricingResult,
    check_discount,
    check_labor,
    coerce_items,
)
from repair_pricing.utils.money import HUNDRED, ZERO, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class PricingBreakdown:
    items_total: Decimal
    labor: Decimal

    @property
    def total(self) -> Decimal:
        return self.items_total + self.labor


def aggregate(items: Iterable[LineItem | Mapping], include_labor: bool, labor_cost=ZERO) -> Decimal:
    """Pre-discount subtotal: sum of quantity x unit price, plus labor when included."""
    return PricingEngine.summarize(items, include_labor, labor_cost).total


def apply_discount(amount, discount, discount_type: DiscountType | str) -> Decimal:
    """
    Reduce ``amount`` by a fixed amount or a 0-100 percentage.

    The result is clamped at zero, so a discount larger than the amount
    yields 0 rather than a negative total.
    """
    base = to_decimal(amount, error=PricingError, field="amount")
    if base < ZERO:
        raise PricingError(f"amount must be non-negative, got {amount!r}")
    value, kind = check_discount(discount, discount_type)
    if kind is DiscountType.AMOUNT:
        discounted = base - value
    else:
        discounted = base * (1 - value / HUNDRED)
    return max(ZERO, discounted)


class PricingEngine:
    """Line items -> subtotal -> discount -> tax -> total."""

    @staticmethod
    def summarize(items: Iterable[LineItem | Mapping], include_labor: bool = False, labor_cost=ZERO) -> PricingBreakdown:
        items_total = ZERO
        for item in coerce_items(items):
            items_total += item.line_total
        labor = check_labor(labor_cost) if include_labor else ZERO
        return PricingBreakdown(items_total=items_total, labor=labor)

    def quote(self, pricing: PricingInput) -> PricingResult:
        breakdown = self.summarize(pricing.items, pricing.include_labor, pricing.labor_cost)
        discounted = apply_discount(breakdown.total, pricing.discount, pricing.discount_type)
        rate = pricing.tax_rate.rate if pricing.tax_rate else None
        tax_amount = forward_tax(discounted, rate)
        result = PricingResult(
            subtotal=breakdown.items_total,
            labor_amount=breakdown.labor,
            discount_amount=breakdown.total - discounted,
            tax_amount=tax_amount,
            total=discounted + tax_amount,
            tax_rate=pricing.tax_rate,
        )
        logger.debug(
            "Quote totals: subtotal=%s labor=%s discount=%s tax=%s total=%s",
            result.subtotal,
            result.labor_amount,
            result.discount_amount,
            result.tax_amount,
            result.total,
        )
        return result
