"""Wire shapes of the settings endpoints (camelCase JSON)."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from repair_pricing.core.models.currency import Currency
from repair_pricing.core.models.tax_rate import TaxRate

UNKNOWN_COUNTRY = "XX"


class CurrencyPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str
    name: str = ""
    symbol: str = ""
    is_default: bool = Field(default=False, alias="isDefault")
    organization_id: Optional[int] = Field(default=None, alias="organizationId")

    def to_domain(self) -> Currency:
        return Currency(code=self.code, name=self.name, symbol=self.symbol, is_default=self.is_default)


class TaxRatePayload(BaseModel):
    """Tax rates are stored and served as percentages (``7.25`` for 7.25 %)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = None
    country_code: Optional[str] = Field(default=None, alias="countryCode")
    region_code: Optional[str] = Field(default=None, alias="regionCode")
    name: str = ""
    rate: Decimal = Decimal("0")
    is_default: bool = Field(default=False, alias="isDefault")

    def to_domain(self) -> TaxRate:
        return TaxRate.from_percent(
            self.rate,
            id=self.id,
            country_code=self.country_code or UNKNOWN_COUNTRY,
            name=self.name,
            region_code=self.region_code or None,
            is_default=self.is_default,
        )
