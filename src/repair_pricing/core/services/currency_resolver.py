"""
Which currency applies to an amount.

There is no single authoritative "default currency": the organization's
currency list carries an ``is_default`` flag, and a separately fetched default
record may lag behind it. Resolution order, first match wins:

1. an explicitly supplied code,
2. the currency flagged ``is_default`` in the available list,
3. the cached default-currency record,
4. ``FALLBACK_CURRENCY``.

Tenant-scoped codes (``USD_3``, ``EUR_CORE``) reuse the ISO code as a prefix
and are truncated at the first underscore.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from repair_pricing.core.models.currency import Currency, ResolvedCurrency
from repair_pricing.utils.currency_format import locale_for, minor_unit_digits

logger = logging.getLogger(__name__)

FALLBACK_CURRENCY = "USD"

CurrencyRef = Union[Currency, str, None]


def normalize_code(code: Optional[str]) -> str:
    raw = (code or "").strip()
    normalized = raw.split("_", 1)[0].upper()
    if len(normalized) != 3:
        if raw:
            logger.debug("Malformed currency code %r, using %s", raw, FALLBACK_CURRENCY)
        return FALLBACK_CURRENCY
    return normalized


def _code_of(ref: CurrencyRef) -> str:
    if isinstance(ref, Currency):
        return ref.code or ""
    return (ref or "").strip()


def pick_code(
    explicit_code: Optional[str],
    available_currencies: Iterable[Currency] = (),
    cached_default: CurrencyRef = None,
) -> str:
    """Raw (not yet normalized) code chosen by the resolution order."""
    explicit = (explicit_code or "").strip()
    if explicit:
        return explicit
    for currency in available_currencies or ():
        if currency.is_default and currency.code:
            return currency.code
    cached = _code_of(cached_default)
    if cached:
        return cached
    return FALLBACK_CURRENCY


def resolve_currency(
    explicit_code: Optional[str] = None,
    available_currencies: Iterable[Currency] = (),
    cached_default: CurrencyRef = None,
) -> str:
    return normalize_code(pick_code(explicit_code, available_currencies, cached_default))


def describe(code: str) -> ResolvedCurrency:
    normalized = normalize_code(code)
    return ResolvedCurrency(
        normalized_code=normalized,
        locale=locale_for(normalized),
        minor_unit_digits=minor_unit_digits(normalized),
    )


class CurrencyResolver:
    """Resolves against the freshest snapshot of a reference cache; never fetches."""

    def __init__(self, cache):
        self.cache = cache

    def resolve(self, organization_id: Optional[str], explicit_code: Optional[str] = None) -> str:
        snapshot = self.cache.snapshot(organization_id)
        return resolve_currency(explicit_code, snapshot.currencies, snapshot.default_currency)

    def resolve_default(self, organization_id: Optional[str]) -> ResolvedCurrency:
        return describe(self.resolve(organization_id))

    def active_currency(self, organization_id: Optional[str], explicit_code: Optional[str] = None) -> Optional[Currency]:
        """The currency record behind the resolved code, if the snapshot has one."""
        snapshot = self.cache.snapshot(organization_id)
        code = resolve_currency(explicit_code, snapshot.currencies, snapshot.default_currency)
        for currency in snapshot.currencies:
            if normalize_code(currency.code) == code:
                return currency
        if snapshot.default_currency is not None and normalize_code(snapshot.default_currency.code) == code:
            return snapshot.default_currency
        return None
