from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Mapping

from repair_pricing.core.errors import InvalidLineItem
from repair_pricing.utils.money import ZERO, parse_decimal, to_decimal


class ItemType(str, Enum):
    PART = "part"
    SERVICE = "service"


@dataclass(frozen=True)
class LineItem:
    """A quantity x unit price record for a part or service rendered on a repair."""

    quantity: int
    unit_price: Decimal
    item_type: ItemType = ItemType.PART
    description: str = ""

    def __post_init__(self) -> None:
        if self.quantity is None:
            raise InvalidLineItem("quantity is required")
        qty = parse_decimal(self.quantity)
        if qty is None or qty != qty.to_integral_value():
            raise InvalidLineItem(f"quantity must be a whole number, got {self.quantity!r}")
        if qty < 0:
            raise InvalidLineItem(f"quantity must not be negative, got {self.quantity!r}")
        if self.unit_price is None:
            raise InvalidLineItem("unit_price is required")
        price = to_decimal(self.unit_price, error=InvalidLineItem, field="unit_price")
        if price < ZERO:
            raise InvalidLineItem(f"unit_price must not be negative, got {self.unit_price!r}")
        try:
            item_type = ItemType(self.item_type)
        except ValueError:
            raise InvalidLineItem(f"unknown item type {self.item_type!r}") from None
        object.__setattr__(self, "quantity", int(qty))
        object.__setattr__(self, "unit_price", price)
        object.__setattr__(self, "item_type", item_type)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @classmethod
    def from_record(cls, record: Mapping) -> "LineItem":
        """Build from a persisted repair item (camelCase REST shape or snake_case)."""
        unit_price = record.get("unitPrice", record.get("unit_price"))
        item_type = record.get("itemType", record.get("item_type")) or ItemType.PART
        return cls(
            quantity=record.get("quantity"),
            unit_price=unit_price,
            item_type=item_type,
            description=str(record.get("description") or ""),
        )
