from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from repair_pricing.core.calculations.pricing_engine import PricingEngine
from repair_pricing.core.calculations.tax import forward_tax
from repair_pricing.core.errors import PricingError
from repair_pricing.core.models.line_item import LineItem
from repair_pricing.core.models.tax_rate import TaxRate
from repair_pricing.utils.money import ZERO, parse_decimal, quantize_money, to_decimal


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal
    source: str  # "quote" | "items"


def _money(document: Mapping, key: str) -> Decimal | None:
    return parse_decimal(document.get(key))


def displayed_tax(document: Mapping) -> Decimal:
    """
    Tax figure printed on a quote or invoice.

    Older records store it as ``tax``, newer ones as ``taxAmount``; records
    with neither show ``total - subtotal``. Zero values fall through to the
    next candidate.
    """
    for key in ("tax", "taxAmount"):
        value = _money(document, key)
        if value:
            return value
    total = _money(document, "total")
    subtotal = _money(document, "subtotal")
    if total is not None and subtotal is not None and total != subtotal:
        return total - subtotal
    return ZERO


def build_invoice_totals(
    items: Iterable[LineItem | Mapping],
    approved_quote: Optional[Mapping] = None,
    tax_rate: Optional[TaxRate] = None,
) -> InvoiceTotals:
    """
    Figures an invoice starts from.

    An approved quote is reused as-is (a missing tax means zero); without one
    the invoice is priced from the repair's items with forward tax at ``tax_rate``.
    """
    if approved_quote is not None:
        subtotal = to_decimal(approved_quote.get("subtotal"), error=PricingError, field="subtotal")
        total = to_decimal(approved_quote.get("total"), error=PricingError, field="total")
        tax_amount = _money(approved_quote, "tax") or ZERO
        return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=total, source="quote")

    subtotal = PricingEngine.summarize(items).items_total
    tax_amount = forward_tax(subtotal, tax_rate)
    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount, source="items")


def build_invoice_payload(
    repair_id: int,
    items: Iterable[LineItem | Mapping],
    approved_quote: Optional[Mapping] = None,
    tax_rate: Optional[TaxRate] = None,
    currency_code: Optional[str] = None,
    digits: int = 2,
) -> dict:
    """Body for creating an invoice: totals rounded to the currency's minor units, status unpaid."""
    totals = build_invoice_totals(items, approved_quote=approved_quote, tax_rate=tax_rate)
    return {
        "repairId": repair_id,
        "dateIssued": date.today().isoformat(),
        "subtotal": float(quantize_money(totals.subtotal, digits)),
        "tax": float(quantize_money(totals.tax_amount, digits)),
        "total": float(quantize_money(totals.total, digits)),
        "status": "unpaid",
        "currencyCode": currency_code,
        "taxRateId": tax_rate.id if tax_rate else None,
    }
