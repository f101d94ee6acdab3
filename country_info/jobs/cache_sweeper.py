"""
Background cache sweeper.

Expired entries are already dropped lazily on lookup; this job also clears
keys nobody asks for again so the store does not grow without bound.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from country_info.services.cache import TTLCache

logger = logging.getLogger(__name__)


class CacheSweeper:
    """Periodically evict expired cache entries."""

    def __init__(self, cache: TTLCache, interval_seconds: float) -> None:
        self.cache = cache
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None
        self._shutdown_event = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the sweep loop."""
        if self.cache.ttl_seconds <= 0:
            logger.info("Cache TTL disabled, sweeper not started")
            return

        logger.info("Starting cache sweeper (every %ss)", self.interval_seconds)
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Stop the sweep loop."""
        if self._task:
            logger.info("Stopping cache sweeper")
            self._shutdown_event.set()
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _sweep_loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(), timeout=self.interval_seconds
                )
                break
            except asyncio.TimeoutError:
                pass

            try:
                removed = await self.cache.sweep()
                if removed:
                    logger.debug("Cache sweep removed %d entries", removed)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Unexpected error during cache sweep")


@asynccontextmanager
async def cache_sweeper_lifespan(
    cache: TTLCache, interval_seconds: float
) -> AsyncIterator[CacheSweeper]:
    """Context manager for the sweeper lifecycle."""
    sweeper = CacheSweeper(cache, interval_seconds)
    try:
        await sweeper.start()
        yield sweeper
    finally:
        await sweeper.stop()
