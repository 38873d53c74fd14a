from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Optional

from repair_pricing.core.errors import InvalidDiscount, InvalidLineItem, InvalidTaxRate
from repair_pricing.core.models.line_item import LineItem
from repair_pricing.core.models.tax_rate import TaxRate
from repair_pricing.utils.money import HUNDRED, ZERO, quantize_money, to_decimal


class DiscountType(str, Enum):
    AMOUNT = "amount"
    PERCENTAGE = "percentage"


def check_discount(discount, discount_type) -> tuple[Decimal, DiscountType]:
    try:
        kind = DiscountType(discount_type)
    except ValueError:
        raise InvalidDiscount(f"unknown discount type {discount_type!r}") from None
    value = to_decimal(discount, error=InvalidDiscount, field="discount")
    if value < ZERO:
        raise InvalidDiscount(f"discount must not be negative, got {discount!r}")
    if kind is DiscountType.PERCENTAGE and value > HUNDRED:
        raise InvalidDiscount(f"percentage discount must be at most 100, got {discount!r}")
    return value, kind


def check_labor(labor_cost) -> Decimal:
    if labor_cost is None:
        raise InvalidLineItem("labor cost is required when labor is included")
    value = to_decimal(labor_cost, error=InvalidLineItem, field="labor_cost")
    if value < ZERO:
        raise InvalidLineItem(f"labor cost must not be negative, got {labor_cost!r}")
    return value


def coerce_items(items: Iterable[LineItem | Mapping]) -> tuple[LineItem, ...]:
    coerced = []
    for item in items or ():
        if isinstance(item, LineItem):
            coerced.append(item)
        elif isinstance(item, Mapping):
            coerced.append(LineItem.from_record(item))
        else:
            raise InvalidLineItem(f"unsupported line item {item!r}")
    return tuple(coerced)


@dataclass(frozen=True)
class PricingInput:
    """
    Everything a quote/invoice summary needs, validated on construction.

    ``labor_cost`` only counts when ``include_labor`` is set; ``tax_rate`` of
    None means "No Tax".
    """

    items: tuple[LineItem, ...] = ()
    include_labor: bool = False
    labor_cost: Decimal = ZERO
    discount: Decimal = ZERO
    discount_type: DiscountType = DiscountType.AMOUNT
    tax_rate: Optional[TaxRate] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", coerce_items(self.items))
        object.__setattr__(self, "include_labor", bool(self.include_labor))
        labor = self.labor_cost if self.labor_cost is not None else ZERO
        object.__setattr__(self, "labor_cost", check_labor(labor))
        discount, kind = check_discount(self.discount, self.discount_type)
        object.__setattr__(self, "discount", discount)
        object.__setattr__(self, "discount_type", kind)
        if self.tax_rate is not None and not isinstance(self.tax_rate, TaxRate):
            raise InvalidTaxRate(f"tax_rate must be a TaxRate or None, got {self.tax_rate!r}")


@dataclass(frozen=True)
class PricingResult:
    subtotal: Decimal
    labor_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    tax_rate: Optional[TaxRate] = field(default=None, compare=False)

    @property
    def discounted_amount(self) -> Decimal:
        return self.total - self.tax_amount

    def rounded(self, digits: int = 2) -> "PricingResult":
        """Round every figure to ``digits`` fraction digits (e.g. before persisting a quote)."""
        return PricingResult(
            subtotal=quantize_money(self.subtotal, digits),
            labor_amount=quantize_money(self.labor_amount, digits),
            discount_amount=quantize_money(self.discount_amount, digits),
            tax_amount=quantize_money(self.tax_amount, digits),
            total=quantize_money(self.total, digits),
            tax_rate=self.tax_rate,
        )

    def as_payload(self) -> dict:
        """Quote summary fields in the shape the quotes endpoint accepts."""
        return {
            "subtotal": float(self.subtotal + self.labor_amount),
            "tax": float(self.tax_amount),
            "total": float(self.total),
            "discount": float(self.discount_amount),
            "taxRateId": self.tax_rate.id if self.tax_rate else None,
        }
