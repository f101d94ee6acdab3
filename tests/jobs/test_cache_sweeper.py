"""Tests for the background cache sweeper."""

from __future__ import annotations

import asyncio

import pytest

from country_info.jobs.cache_sweeper import CacheSweeper, cache_sweeper_lifespan
from country_info.services.cache import TTLCache


@pytest.mark.asyncio
async def test_start_and_stop(composite_cache):
    sweeper = CacheSweeper(composite_cache, interval_seconds=60)

    await sweeper.start()
    assert sweeper.running is True

    await sweeper.stop()
    assert sweeper.running is False


@pytest.mark.asyncio
async def test_not_started_when_ttl_disabled(clock):
    sweeper = CacheSweeper(TTLCache(0, clock=clock), interval_seconds=60)

    await sweeper.start()

    assert sweeper.running is False
    await sweeper.stop()


@pytest.mark.asyncio
async def test_loop_evicts_expired_entries(composite_cache, clock):
    await composite_cache.set("france", "record")
    clock.advance(composite_cache.ttl_seconds + 1)

    async with cache_sweeper_lifespan(composite_cache, 0.01) as sweeper:
        for _ in range(50):
            if len(composite_cache) == 0:
                break
            await asyncio.sleep(0.01)
        assert sweeper.running is True

    assert len(composite_cache) == 0
    assert sweeper.running is False


@pytest.mark.asyncio
async def test_sweep_errors_do_not_stop_the_loop(composite_cache):
    calls = 0

    async def flaky_sweep() -> int:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("boom")
        return 0

    composite_cache.sweep = flaky_sweep
    async with cache_sweeper_lifespan(composite_cache, 0.01):
        for _ in range(50):
            if calls >= 2:
                break
            await asyncio.sleep(0.01)

    assert calls >= 2
