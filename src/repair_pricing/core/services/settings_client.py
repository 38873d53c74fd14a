from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from repair_pricing.config import settings
from repair_pricing.core.errors import InvalidTaxRate, ReferenceDataError
from repair_pricing.core.models.currency import Currency
from repair_pricing.core.models.payloads import CurrencyPayload, TaxRatePayload
from repair_pricing.core.models.tax_rate import TaxRate

logger = logging.getLogger(__name__)

CURRENCIES_PATH = "/api/settings/currencies"
DEFAULT_CURRENCY_PATH = "/api/settings/currencies/default"
TAX_RATES_PATH = "/api/settings/tax-rates"
DEFAULT_TAX_RATE_PATH = "/api/settings/tax-rates/default"


class SettingsClient:
    """
    Reads currency and tax-rate reference data for one organization at a time.

    The organization is sent in the ``X-Organization-ID`` header on every
    request. Any transport, HTTP status or payload problem is raised as
    ``ReferenceDataError``; a 404 on a ``/default`` endpoint means "no default".
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.API_BASE_URL
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    def _headers(self, organization_id: Optional[str]) -> dict[str, str]:
        if organization_id is None:
            return {}
        return {settings.ORGANIZATION_HEADER: str(organization_id)}

    async def _get(self, path: str, organization_id: Optional[str], *, allow_missing: bool = False) -> Any:
        try:
            async with self._client() as client:
                response = await client.get(path, headers=self._headers(organization_id))
        except httpx.HTTPError as exc:
            raise ReferenceDataError(f"GET {path} failed: {exc}", organization_id=organization_id) from exc
        if allow_missing and response.status_code == 404:
            return None
        if response.is_error:
            raise ReferenceDataError(
                f"GET {path} returned {response.status_code}", organization_id=organization_id
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ReferenceDataError(f"GET {path} returned invalid JSON", organization_id=organization_id) from exc

    def _parse(self, model, data: Any, path: str, organization_id: Optional[str]):
        try:
            return model.model_validate(data).to_domain()
        except (ValidationError, InvalidTaxRate) as exc:
            raise ReferenceDataError(f"Unexpected payload from {path}: {exc}", organization_id=organization_id) from exc

    def _parse_list(self, model, data: Any, path: str, organization_id: Optional[str]) -> tuple:
        if not isinstance(data, list):
            raise ReferenceDataError(f"Expected a list from {path}", organization_id=organization_id)
        return tuple(self._parse(model, row, path, organization_id) for row in data)

    async def fetch_currencies(self, organization_id: Optional[str]) -> tuple[Currency, ...]:
        data = await self._get(CURRENCIES_PATH, organization_id)
        return self._parse_list(CurrencyPayload, data, CURRENCIES_PATH, organization_id)

    async def fetch_default_currency(self, organization_id: Optional[str]) -> Optional[Currency]:
        data = await self._get(DEFAULT_CURRENCY_PATH, organization_id, allow_missing=True)
        if not data:
            return None
        return self._parse(CurrencyPayload, data, DEFAULT_CURRENCY_PATH, organization_id)

    async def fetch_tax_rates(self, organization_id: Optional[str]) -> tuple[TaxRate, ...]:
        data = await self._get(TAX_RATES_PATH, organization_id)
        return self._parse_list(TaxRatePayload, data, TAX_RATES_PATH, organization_id)

    async def fetch_default_tax_rate(self, organization_id: Optional[str]) -> Optional[TaxRate]:
        data = await self._get(DEFAULT_TAX_RATE_PATH, organization_id, allow_missing=True)
        if not data:
            return None
        return self._parse(TaxRatePayload, data, DEFAULT_TAX_RATE_PATH, organization_id)
