"""Country info aggregation and the cache-aside flow around it."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable

from country_info.core.metrics import observe_aggregation
from country_info.services.cache import TTLCache, normalize_country_key
from country_info.services.dto import CompositeRecord
from country_info.services.providers import ProviderSet

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CountryInfoAggregator:
    """Combine the four provider lookups for one country key."""

    def __init__(
        self,
        providers: ProviderSet,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._providers = providers
        self._now = now

    async def aggregate(self, country_key: str) -> CompositeRecord:
        """Build a fresh composite record.

        Raises:
            CountryNotFoundError: the country could not be resolved.
            UpstreamError: the country provider itself failed.
        """
        start = time.perf_counter()
        country = await self._providers.country.lookup(country_key)
        weather, exchange, air_quality = await self._providers.fetch_secondary(country)
        record = CompositeRecord(
            country=country,
            weather=weather,
            exchange=exchange,
            air_quality=air_quality,
            fetched_at=self._now(),
        )
        observe_aggregation(time.perf_counter() - start)
        return record


class CountryInfoService:
    """Serve composite records from the cache, aggregating on a miss."""

    def __init__(
        self,
        aggregator: CountryInfoAggregator,
        cache: TTLCache[CompositeRecord],
        *,
        coalesce_misses: bool = False,
    ) -> None:
        self._aggregator = aggregator
        self._cache = cache
        self._coalesce_misses = coalesce_misses

    @property
    def cache(self) -> TTLCache[CompositeRecord]:
        return self._cache

    async def get_country_info(self, raw_name: str) -> tuple[CompositeRecord, bool]:
        """Return ``(record, from_cache)`` for a free-text country name."""
        key = normalize_country_key(raw_name)

        cached = await self._cache.get(key)
        if cached is not None:
            return cached, True

        if not self._coalesce_misses:
            return await self._refresh(key), False

        async with self._cache.single_flight(key):
            cached = await self._cache.get(key)
            if cached is not None:
                return cached, True
            return await self._refresh(key), False

    async def _refresh(self, key: str) -> CompositeRecord:
        # Not-found and country-provider failures propagate and are not cached.
        record = await self._aggregator.aggregate(key)
        await self._cache.set(key, record)
        logger.info("Cached country info for '%s'", key)
        return record


__all__ = ["CountryInfoAggregator", "CountryInfoService"]
