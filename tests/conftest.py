from __future__ import annotations

import sys
from pathlib import Path
from typing import AsyncIterator, Iterator

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from country_info.api.dependencies import get_country_info_service  # noqa: E402
from country_info.core.config import Settings  # noqa: E402
from country_info.main import create_app  # noqa: E402
from country_info.services.aggregator import (  # noqa: E402
    CountryInfoAggregator,
    CountryInfoService,
)
from country_info.services.cache import TTLCache  # noqa: E402
from country_info.services.providers import ProviderSet  # noqa: E402
from country_info.services.upstream_client import UpstreamClient  # noqa: E402
from tests.provider_payloads import ProviderStub  # noqa: E402


class FakeClock:
    """Monotonic clock the tests can move forward by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        OPENWEATHER_API_KEY="test-weather-key",
        OPENAQ_API_KEY="test-aq-key",
        CACHE_TTL_SECONDS=300,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture()
def http_client(provider_stub: ProviderStub) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=provider_stub.transport())


@pytest_asyncio.fixture()
async def upstream_client(
    settings: Settings, http_client: httpx.AsyncClient
) -> AsyncIterator[UpstreamClient]:
    client = UpstreamClient(settings, client=http_client)
    yield client
    await http_client.aclose()


@pytest.fixture()
def composite_cache(settings: Settings, clock: FakeClock) -> TTLCache:
    return TTLCache(settings.cache_ttl_seconds, clock=clock)


def build_service(
    settings: Settings,
    http_client: httpx.AsyncClient,
    cache: TTLCache,
    *,
    coalesce_misses: bool = False,
) -> CountryInfoService:
    client = UpstreamClient(settings, client=http_client)
    return CountryInfoService(
        CountryInfoAggregator(ProviderSet(client, settings)),
        cache,
        coalesce_misses=coalesce_misses,
    )


@pytest.fixture()
def country_info_service(
    settings: Settings, http_client: httpx.AsyncClient, composite_cache: TTLCache
) -> CountryInfoService:
    return build_service(settings, http_client, composite_cache)


@pytest.fixture()
def api_client(country_info_service: CountryInfoService) -> Iterator[TestClient]:
    """Test client wired to stubbed providers; lifespan is not run."""
    app = create_app()
    app.dependency_overrides[get_country_info_service] = lambda: country_info_service
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.clear()
