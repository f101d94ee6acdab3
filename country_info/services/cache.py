"""
In-process TTL cache for composite country records.

Provides:
- Namespaced keys so entries of different kinds can never collide
- Fixed TTL applied at write time, lazy eviction on lookup
- Periodic sweep hook for the background cleanup job
- Optional per-key single-flight guard for concurrent misses
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Generic, TypeVar

from country_info.core.config import Settings
from country_info.core.metrics import record_cache_event
from country_info.services.dto import CompositeRecord
from country_info.services.errors import CountryQueryError

logger = logging.getLogger(__name__)
T = TypeVar("T")

COUNTRY_NAMESPACE = "country"


def normalize_country_key(raw: str | None) -> str:
    """Trim and lower-case a country name, rejecting empty input."""
    key = (raw or "").strip().lower()
    if not key:
        raise CountryQueryError("Country name required")
    return key


class TTLCache(Generic[T]):
    """
    Async-safe in-memory store with a fixed time-to-live.

    Values are stored by reference and must be immutable. ``clock`` returns
    seconds on a monotonic scale and can be swapped for a fake in tests.
    A TTL of 0 keeps entries until they are overwritten.
    """

    def __init__(
        self,
        ttl_seconds: int,
        *,
        namespace: str = COUNTRY_NAMESPACE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError(f"TTL cannot be negative: {ttl_seconds}")
        self._ttl = ttl_seconds
        self._namespace = namespace
        self._clock = clock
        self._store: dict[str, tuple[T, float | None]] = {}
        self._lock = asyncio.Lock()
        self._inflight: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    @property
    def namespace(self) -> str:
        return self._namespace

    def cache_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def __len__(self) -> int:
        return len(self._store)

    async def get(self, key: str) -> T | None:
        """Retrieve a value, returning None if expired or not found."""
        cache_key = self.cache_key(key)
        async with self._lock:
            entry = self._store.get(cache_key)
            if entry is None:
                record_cache_event(self._namespace, "miss")
                return None

            value, expires_at = entry
            if expires_at is not None and expires_at <= self._clock():
                del self._store[cache_key]
                record_cache_event(self._namespace, "expired")
                return None

        record_cache_event(self._namespace, "hit")
        return value

    async def set(self, key: str, value: T) -> None:
        """Store a value; its expiry is fixed now and never extended by reads."""
        expires_at = self._clock() + self._ttl if self._ttl > 0 else None
        async with self._lock:
            self._store[self.cache_key(key)] = (value, expires_at)
        record_cache_event(self._namespace, "store")

    async def sweep(self) -> int:
        """Remove all expired entries, returning how many were dropped."""
        now = self._clock()
        async with self._lock:
            expired_keys = [
                key
                for key, (_, expires_at) in self._store.items()
                if expires_at is not None and expires_at <= now
            ]
            for key in expired_keys:
                del self._store[key]

        if expired_keys:
            record_cache_event(self._namespace, "swept")
            logger.debug("Swept %d expired cache entries", len(expired_keys))
        return len(expired_keys)

    @asynccontextmanager
    async def single_flight(self, key: str) -> AsyncIterator[None]:
        """Serialize fills of one key so only the first miss hits upstream."""
        cache_key = self.cache_key(key)
        lock = self._inflight.setdefault(cache_key, asyncio.Lock())
        self._waiters[cache_key] = self._waiters.get(cache_key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._waiters[cache_key] - 1
            if remaining:
                self._waiters[cache_key] = remaining
            else:
                del self._waiters[cache_key]
                self._inflight.pop(cache_key, None)


CompositeCache = TTLCache[CompositeRecord]


def build_composite_cache(settings: Settings) -> TTLCache[CompositeRecord]:
    """Create the process-wide composite cache from settings."""
    return TTLCache(settings.cache_ttl_seconds, namespace=COUNTRY_NAMESPACE)


__all__ = [
    "COUNTRY_NAMESPACE",
    "CompositeCache",
    "TTLCache",
    "build_composite_cache",
    "normalize_country_key",
]
