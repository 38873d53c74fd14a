from decimal import Decimal

import pytest

from repair_pricing.core.calculations.pricing_engine import PricingEngine, aggregate, apply_discount
from repair_pricing.core.errors import InvalidDiscount, InvalidLineItem, InvalidTaxRate, PricingError
from repair_pricing.core.models.line_item import ItemType, LineItem
from repair_pricing.core.models.pricing import DiscountType, PricingInput
from repair_pricing.core.services.pricing_service import compute_quote_totals


def test_pricing_engine_sums_items_and_labor(sample_items):
    breakdown = PricingEngine.summarize(sample_items, include_labor=True, labor_cost=30)

    assert breakdown.items_total == Decimal("90")
    assert breakdown.labor == Decimal("30")
    assert breakdown.total == Decimal("120")


def test_aggregate_adds_labor_only_when_included(sample_items):
    assert aggregate(sample_items, False, 30) == Decimal("90")
    assert aggregate(sample_items, True, 30) == aggregate(sample_items, False, 0) + 30


@pytest.mark.parametrize("labor", [0, 1, "12.5", 99.99])
def test_aggregate_labor_property(sample_items, labor):
    assert aggregate(sample_items, True, labor) == aggregate(sample_items, False, 0) + Decimal(str(labor))


def test_aggregate_accepts_persisted_records():
    records = [
        {"quantity": 3, "unitPrice": "9.99", "itemType": "part"},
        {"quantity": 1, "unitPrice": 20, "itemType": "service"},
    ]
    assert aggregate(records, False) == Decimal("49.97")


def test_aggregate_of_nothing_is_zero():
    assert aggregate([], False) == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"quantity": -1, "unit_price": 10},
        {"quantity": 1, "unit_price": -0.01},
        {"quantity": None, "unit_price": 10},
        {"quantity": 1, "unit_price": None},
        {"quantity": 1.5, "unit_price": 10},
        {"quantity": 1, "unit_price": "abc"},
        {"quantity": 1, "unit_price": 10, "item_type": "labor"},
    ],
)
def test_invalid_line_items_are_rejected(kwargs):
    with pytest.raises(InvalidLineItem):
        LineItem(**kwargs)


def test_missing_price_in_record_is_rejected():
    with pytest.raises(InvalidLineItem):
        aggregate([{"quantity": 2}], False)


def test_negative_labor_is_rejected(sample_items):
    with pytest.raises(InvalidLineItem):
        aggregate(sample_items, True, -5)


def test_line_item_normalizes_values():
    item = LineItem(quantity="2", unit_price=9.99, item_type="service")
    assert item.quantity == 2
    assert item.unit_price == Decimal("9.99")
    assert item.item_type is ItemType.SERVICE
    assert item.line_total == Decimal("19.98")


def test_fixed_discount_is_subtracted():
    assert apply_discount(100, 15, "amount") == Decimal("85")


def test_percentage_discount():
    assert apply_discount(150, 10, DiscountType.PERCENTAGE) == Decimal("135")
    assert apply_discount(150, 100, "percentage") == 0


@pytest.mark.parametrize("amount,discount", [(0, 0), (10, 200), (120, 120), (5.5, 0.25), (1000, 999.99)])
def test_fixed_discount_never_exceeds_amount_or_goes_negative(amount, discount):
    result = apply_discount(amount, discount, "amount")
    assert result <= Decimal(str(amount))
    assert result >= 0


@pytest.mark.parametrize(
    "discount,kind",
    [(-1, "amount"), (-0.5, "percentage"), (100.01, "percentage"), (10, "coupon"), (None, "amount")],
)
def test_invalid_discounts_are_rejected(discount, kind):
    with pytest.raises(InvalidDiscount):
        apply_discount(100, discount, kind)


@pytest.mark.parametrize("kind", ["amount", "percentage"])
def test_negative_amount_is_rejected(kind):
    with pytest.raises(PricingError):
        apply_discount(-5, 0, kind)


def test_quote_totals_with_labor_percentage_discount_and_tax(sample_items, sales_tax):
    result = compute_quote_totals(
        PricingInput(
            items=sample_items,
            include_labor=True,
            labor_cost=30,
            discount=10,
            discount_type="percentage",
            tax_rate=sales_tax,
        )
    )

    # items 90 + labor 30 = 120 before discount
    assert result.subtotal + result.labor_amount == Decimal("120")
    assert result.discount_amount == Decimal("12")
    assert result.discounted_amount == Decimal("108")
    assert result.tax_amount == Decimal("7.56")
    assert result.total == Decimal("115.56")


def test_quote_totals_from_the_repair_screen_example(sales_tax):
    items = [
        LineItem(quantity=2, unit_price=25, item_type="part"),
        LineItem(quantity=1, unit_price=40, item_type="service"),
        LineItem(quantity=1, unit_price=30, item_type="service"),
    ]
    result = compute_quote_totals(
        PricingInput(items=items, include_labor=True, labor_cost=30, discount=10, discount_type="percentage", tax_rate=sales_tax)
    )
    assert result.subtotal == Decimal("120")
    assert result.subtotal + result.labor_amount == Decimal("150")
    assert result.total == Decimal("144.45")


def test_oversized_fixed_discount_clamps_total_to_zero(sample_items):
    result = compute_quote_totals(
        PricingInput(items=sample_items, include_labor=False, discount=200, discount_type="amount")
    )

    assert result.discounted_amount == 0
    assert result.tax_amount == 0
    assert result.total == 0
    assert result.discount_amount == result.subtotal


def test_total_invariant_holds(sample_items, sales_tax):
    result = compute_quote_totals(
        PricingInput(items=sample_items, include_labor=True, labor_cost=12, discount=7.5, tax_rate=sales_tax)
    )
    pre_tax = max(Decimal(0), result.subtotal + result.labor_amount - result.discount_amount)
    assert result.total == pre_tax + result.tax_amount
    assert result.tax_amount == pre_tax * sales_tax.rate


def test_labor_cost_is_ignored_when_not_included(sample_items):
    result = compute_quote_totals(PricingInput(items=sample_items, include_labor=False, labor_cost=50))
    assert result.labor_amount == 0
    assert result.total == Decimal("90")


def test_pricing_input_validates_on_construction(sample_items):
    with pytest.raises(InvalidDiscount):
        PricingInput(items=sample_items, discount=150, discount_type="percentage")
    with pytest.raises(InvalidTaxRate):
        PricingInput(items=sample_items, tax_rate=0.07)
    with pytest.raises(InvalidLineItem):
        PricingInput(items=[{"quantity": -2, "unitPrice": 10}])


def test_rounded_result_and_payload(sample_items):
    from repair_pricing.core.models.tax_rate import TaxRate

    tax = TaxRate.from_percent("8.875", id=3, country_code="us", region_code="NY", name="New York Sales Tax")
    result = compute_quote_totals(PricingInput(items=sample_items, include_labor=True, labor_cost=10, tax_rate=tax))

    rounded = result.rounded(2)
    assert rounded.tax_amount == Decimal("8.88")
    assert rounded.total == Decimal("108.88")

    payload = rounded.as_payload()
    assert payload["subtotal"] == 100.0
    assert payload["taxRateId"] == 3
