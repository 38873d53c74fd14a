import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Ensure `src` is importable when running tests from repo root.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def sample_items():
    from repair_pricing.core.models.line_item import LineItem

    return [
        LineItem(quantity=2, unit_price=25, item_type="part", description="Battery"),
        LineItem(quantity=1, unit_price=40, item_type="service", description="Screen replacement"),
    ]


@pytest.fixture
def sales_tax():
    from repair_pricing.core.models.tax_rate import TaxRate

    return TaxRate(id=7, country_code="US", region_code="FL", name="Sales Tax", rate=Decimal("0.07"))


@pytest.fixture
def currencies():
    from repair_pricing.core.models.currency import Currency

    return [
        Currency(code="USD_3", name="US Dollar", symbol="$"),
        Currency(code="EUR_3", name="Euro", symbol="€", is_default=True),
        Currency(code="GBP_CORE", name="British Pound", symbol="£"),
    ]


class FakeSettingsClient:
    """Stands in for SettingsClient; values (or exceptions) are set per attribute."""

    def __init__(self, currencies=(), default_currency=None, tax_rates=(), default_tax_rate=None):
        self.currencies = tuple(currencies)
        self.default_currency = default_currency
        self.tax_rates = tuple(tax_rates)
        self.default_tax_rate = default_tax_rate
        self.calls = []

    async def _value(self, name, organization_id):
        self.calls.append((name, organization_id))
        value = getattr(self, name)
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_currencies(self, organization_id):
        return await self._value("currencies", organization_id)

    async def fetch_default_currency(self, organization_id):
        return await self._value("default_currency", organization_id)

    async def fetch_tax_rates(self, organization_id):
        return await self._value("tax_rates", organization_id)

    async def fetch_default_tax_rate(self, organization_id):
        return await self._value("default_tax_rate", organization_id)


@pytest.fixture
def fake_client():
    return FakeSettingsClient()


@pytest.fixture
def cache(fake_client):
    from repair_pricing.core.services.reference_cache import ReferenceCache

    return ReferenceCache(fake_client, interval=0.01, seed_core_currencies=False)
