"""
In-memory currency and tax-rate reference data, one snapshot per organization.

Snapshots are immutable. A refresh fetches the four sources concurrently and
replaces each part that arrived as a whole; a part whose fetch failed keeps its
previous value. Every refresh takes a ticket when it starts, and a part is only
replaced by a refresh whose ticket is newer than the one that produced the
current value, so a slow, older fetch cannot overwrite fresher data.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, replace
from typing import Optional

from repair_pricing.config import settings
from repair_pricing.core.errors import ReferenceDataError
from repair_pricing.core.models.currency import CORE_CURRENCIES, Currency
from repair_pricing.core.models.tax_rate import TaxRate, select_tax_rate
from repair_pricing.core.services.settings_client import SettingsClient

logger = logging.getLogger(__name__)

PARTS = ("currencies", "default_currency", "tax_rates", "default_tax_rate")


@dataclass(frozen=True)
class ReferenceSnapshot:
    currencies: tuple[Currency, ...] = ()
    default_currency: Optional[Currency] = None
    tax_rates: tuple[TaxRate, ...] = ()
    default_tax_rate: Optional[TaxRate] = None

    def tax_rate_for(self, tax_rate_id) -> Optional[TaxRate]:
        return select_tax_rate(tax_rate_id, self.tax_rates, self.default_tax_rate)


EMPTY_SNAPSHOT = ReferenceSnapshot()
CORE_SNAPSHOT = ReferenceSnapshot(currencies=CORE_CURRENCIES)


class ReferenceCache:
    def __init__(
        self,
        client: Optional[SettingsClient] = None,
        *,
        interval: Optional[float] = None,
        seed_core_currencies: bool = True,
    ):
        self.client = client or SettingsClient()
        self.interval = interval if interval is not None else settings.REFRESH_INTERVAL
        self._seed = CORE_SNAPSHOT if seed_core_currencies else EMPTY_SNAPSHOT
        self._snapshots: dict[Optional[str], ReferenceSnapshot] = {}
        self._applied: dict[tuple[Optional[str], str], int] = {}
        self._tickets = itertools.count(1)
        self._organizations: set[Optional[str]] = set()
        self._timer: Optional[asyncio.Task] = None
        self._pending: set[asyncio.Task] = set()

    @staticmethod
    def _key(organization_id) -> Optional[str]:
        if organization_id is None:
            organization_id = settings.DEFAULT_ORGANIZATION_ID
        return None if organization_id is None else str(organization_id)

    def snapshot(self, organization_id=None) -> ReferenceSnapshot:
        return self._snapshots.get(self._key(organization_id), self._seed)

    def put(self, organization_id, snapshot: ReferenceSnapshot) -> None:
        """Install a snapshot directly (bootstrapping from persisted data, tests)."""
        key = self._key(organization_id)
        self._organizations.add(key)
        self._snapshots[key] = snapshot

    def track(self, organization_id) -> None:
        self._organizations.add(self._key(organization_id))

    @property
    def organizations(self) -> frozenset:
        return frozenset(self._organizations)

    async def refresh(self, organization_id=None) -> ReferenceSnapshot:
        key = self._key(organization_id)
        self._organizations.add(key)
        ticket = next(self._tickets)
        results = await asyncio.gather(
            self.client.fetch_currencies(key),
            self.client.fetch_default_currency(key),
            self.client.fetch_tax_rates(key),
            self.client.fetch_default_tax_rate(key),
            return_exceptions=True,
        )

        updates = {}
        for part, result in zip(PARTS, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, ReferenceDataError):
                logger.warning("Keeping cached %s for organization %s: %s", part, key, result)
                continue
            if isinstance(result, Exception):
                logger.warning("Keeping cached %s for organization %s", part, key, exc_info=result)
                continue
            if ticket <= self._applied.get((key, part), 0):
                logger.debug("Discarding stale %s for organization %s (refresh #%d)", part, key, ticket)
                continue
            self._applied[(key, part)] = ticket
            updates[part] = result

        if updates:
            self._snapshots[key] = replace(self.snapshot(key), **updates)
            logger.debug("Refreshed %s for organization %s", ", ".join(updates), key)
        return self.snapshot(key)

    def refresh_in_background(self, organization_id=None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.refresh(organization_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def on_focus_regained(self) -> list[asyncio.Task]:
        return [self.refresh_in_background(key) for key in list(self._organizations)]

    async def _run_periodic(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            for key in list(self._organizations):
                self.refresh_in_background(key)

    def start(self) -> None:
        if self._timer is None or self._timer.done():
            self._timer = asyncio.get_running_loop().create_task(self._run_periodic())

    async def stop(self) -> None:
        tasks = list(self._pending)
        if self._timer is not None:
            tasks.append(self._timer)
            self._timer = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
