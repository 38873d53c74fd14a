from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from repair_pricing.core.errors import InvalidTaxRate
from repair_pricing.utils.money import HUNDRED, to_decimal

_ONE = Decimal("1")


def check_rate(rate) -> Decimal:
    """Return ``rate`` as a Decimal fraction, rejecting values outside [0, 1]."""
    value = to_decimal(rate, error=InvalidTaxRate, field="rate")
    if value < 0 or value > _ONE:
        raise InvalidTaxRate(f"tax rate must be within [0, 1], got {rate!r}")
    return value


@dataclass(frozen=True)
class TaxRate:
    """
    A named tax rate for a country (and optionally a region).

    ``rate`` is a fraction: 7.25 % is stored as ``Decimal("0.0725")``.
    Use :meth:`from_percent` for values entered or stored as percentages.
    """

    id: Optional[int]
    country_code: str
    name: str
    rate: Decimal
    region_code: Optional[str] = None
    is_default: bool = False

    def __post_init__(self) -> None:
        code = (self.country_code or "").strip().upper()
        if len(code) != 2 or not code.isalpha():
            raise InvalidTaxRate(f"country code must be two letters, got {self.country_code!r}")
        object.__setattr__(self, "country_code", code)
        object.__setattr__(self, "rate", check_rate(self.rate))

    @property
    def percent(self) -> Decimal:
        return self.rate * HUNDRED

    @classmethod
    def from_percent(
        cls,
        percent,
        *,
        id: Optional[int] = None,
        country_code: str,
        name: str,
        region_code: Optional[str] = None,
        is_default: bool = False,
    ) -> "TaxRate":
        value = to_decimal(percent, error=InvalidTaxRate, field="rate")
        return cls(
            id=id,
            country_code=country_code,
            name=name,
            rate=value / HUNDRED,
            region_code=region_code,
            is_default=is_default,
        )


def select_tax_rate(
    tax_rate_id,
    tax_rates: Iterable[TaxRate],
    default: Optional[TaxRate] = None,
) -> Optional[TaxRate]:
    """
    Tax rate picked on a quote form.

    ``None`` means "No Tax" and an id that matches nothing yields no tax.
    ``default`` is looked up too, since the default endpoint may return a
    rate the list does not carry.
    """
    if tax_rate_id is None:
        return None
    wanted = str(tax_rate_id)
    candidates = list(tax_rates)
    if default is not None:
        candidates.append(default)
    for rate in candidates:
        if rate.id is not None and str(rate.id) == wanted:
            return rate
    return None
