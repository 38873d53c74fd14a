from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Currency:
    """
    A currency record as configured for an organization.

    ``code`` may be a plain ISO code (``"EUR"``) or a tenant-scoped variant
    (``"EUR_12"``, ``"EUR_CORE"``); see ``currency_resolver.normalize_code``.
    """

    code: str
    name: str = ""
    symbol: str = ""
    is_default: bool = False


@dataclass(frozen=True)
class ResolvedCurrency:
    normalized_code: str
    locale: str
    minor_unit_digits: int


CORE_CURRENCIES: tuple[Currency, ...] = (
    Currency(code="USD_CORE", name="US Dollar", symbol="$", is_default=True),
    Currency(code="EUR_CORE", name="Euro", symbol="€"),
    Currency(code="GBP_CORE", name="British Pound", symbol="£"),
    Currency(code="CAD_CORE", name="Canadian Dollar", symbol="C$"),
    Currency(code="AUD_CORE", name="Australian Dollar", symbol="A$"),
    Currency(code="JPY_CORE", name="Japanese Yen", symbol="¥"),
)
