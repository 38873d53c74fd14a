"""
Entry points used by quote/invoice screens and settings previews.

Currency lookups go through a process-wide ``ReferenceCache``; pass ``cache=``
to use another one, or swap the default with ``set_default_cache``.
"""

from __future__ import annotations

from typing import Optional

from repair_pricing.core.calculations.pricing_engine import PricingEngine
from repair_pricing.core.models.currency import ResolvedCurrency
from repair_pricing.core.models.pricing import PricingInput, PricingResult
from repair_pricing.core.services.currency_resolver import CurrencyResolver
from repair_pricing.core.services.reference_cache import ReferenceCache
from repair_pricing.utils.currency_format import format_money

_default_cache: Optional[ReferenceCache] = None


def get_default_cache() -> ReferenceCache:
    global _default_cache
    if _default_cache is None:
        _default_cache = ReferenceCache()
    return _default_cache


def set_default_cache(cache: Optional[ReferenceCache]) -> None:
    global _default_cache
    _default_cache = cache


def compute_quote_totals(pricing: PricingInput) -> PricingResult:
    return PricingEngine().quote(pricing)


def format_currency(
    amount,
    currency_code: Optional[str] = None,
    *,
    organization_id: Optional[str] = None,
    cache: Optional[ReferenceCache] = None,
) -> str:
    """
    Format ``amount`` in ``currency_code``, or in the organization's currency when none is given.

    Callers pass ``organization_id`` explicitly. ``None`` is a convenience for
    single-tenant host applications and means ``settings.DEFAULT_ORGANIZATION_ID``.
    """
    resolver = CurrencyResolver(cache or get_default_cache())
    return format_money(amount, resolver.resolve(organization_id, currency_code))


def resolve_default_currency(
    organization_id: Optional[str] = None,
    *,
    cache: Optional[ReferenceCache] = None,
) -> ResolvedCurrency:
    """Default currency of ``organization_id``; ``None`` falls back to the configured default organization."""
    return CurrencyResolver(cache or get_default_cache()).resolve_default(organization_id)
