"""Provider adapters: one per upstream data source.

The country adapter raises on failure because nothing else can be computed
without it. The weather, exchange and air-quality adapters never raise for an
upstream problem; they return a sub-record carrying a ``ProviderFailure``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence
from urllib.parse import quote

from country_info.core.config import Settings
from country_info.core.metrics import record_provider_outcome
from country_info.services.dto import (
    AirQualityRecord,
    CountryRecord,
    ExchangeRecord,
    ProviderFailure,
    WeatherRecord,
)
from country_info.services.errors import (
    CountryNotFoundError,
    UpstreamError,
    UpstreamHTTPError,
)
from country_info.services.provider_mapping import (
    FORECAST_SAMPLE_COUNT,
    decode_air_quality,
    decode_country,
    decode_current_conditions,
    decode_exchange,
    decode_forecast,
)
from country_info.services.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)

PRECONDITION = "precondition"


def _failure_from(exc: UpstreamError) -> ProviderFailure:
    return ProviderFailure(kind=exc.kind, message=str(exc) or exc.__class__.__name__)


class CountryProvider:
    """Resolve a free-text country name against RestCountries."""

    name = "country"

    def __init__(self, client: UpstreamClient, settings: Settings) -> None:
        self._client = client
        self._base_url = settings.restcountries_base_url.rstrip("/")

    async def lookup(self, country_name: str) -> CountryRecord:
        url = f"{self._base_url}/name/{quote(country_name, safe='')}"
        try:
            payload = await self._client.get_json(
                url, provider=self.name, params={"fullText": "false"}
            )
        except UpstreamHTTPError as exc:
            # RestCountries answers 404 when nothing matches.
            if exc.status_code == 404:
                raise CountryNotFoundError(
                    f"Country not found: '{country_name}'"
                ) from exc
            raise

        if not isinstance(payload, list) or not payload:
            raise CountryNotFoundError(f"Country not found: '{country_name}'")

        # First match wins; provider order is the only ranking.
        return decode_country(payload[0], fallback_name=country_name)


class WeatherProvider:
    """Current conditions and a 24h forecast sample from OpenWeatherMap."""

    name = "weather"

    def __init__(self, client: UpstreamClient, settings: Settings) -> None:
        self._client = client
        self._base_url = settings.openweather_base_url.rstrip("/")
        self._api_key = settings.openweather_api_key

    async def fetch(self, latlng: Sequence[float] | None) -> WeatherRecord:
        if not latlng or len(latlng) < 2 or not self._api_key:
            record_provider_outcome(self.name, PRECONDITION)
            return WeatherRecord.failed(
                ProviderFailure(
                    kind=PRECONDITION,
                    message="No lat/lon or OpenWeather API key not set",
                )
            )

        params = {
            "lat": latlng[0],
            "lon": latlng[1],
            "appid": self._api_key,
            "units": "metric",
        }
        try:
            current_payload = await self._client.get_json(
                f"{self._base_url}/weather", provider=self.name, params=params
            )
            forecast_payload = await self._client.get_json(
                f"{self._base_url}/forecast", provider=self.name, params=params
            )
            record = WeatherRecord(
                current=decode_current_conditions(current_payload),
                forecast=decode_forecast(forecast_payload, FORECAST_SAMPLE_COUNT),
            )
        except UpstreamError as exc:
            logger.warning("Weather lookup failed (%s): %s", exc.kind, exc)
            record_provider_outcome(self.name, exc.kind)
            return WeatherRecord.failed(_failure_from(exc))

        record_provider_outcome(self.name, "success")
        return record


class ExchangeProvider:
    """Latest rates from the country's primary currency to the major ones."""

    name = "exchange"

    def __init__(self, client: UpstreamClient, settings: Settings) -> None:
        self._client = client
        self._base_url = settings.exchange_rate_base_url.rstrip("/")
        self._fallback_base = settings.exchange_fallback_base
        self._symbols = list(settings.exchange_target_symbols)

    def select_base(self, currency_codes: Sequence[str]) -> str:
        return currency_codes[0] if currency_codes else self._fallback_base

    async def fetch(self, currency_codes: Sequence[str]) -> ExchangeRecord:
        base = self.select_base(currency_codes)
        try:
            payload = await self._client.get_json(
                f"{self._base_url}/latest",
                provider=self.name,
                params={"base": base, "symbols": ",".join(self._symbols)},
            )
            record = decode_exchange(payload, base)
        except UpstreamError as exc:
            logger.warning("Exchange lookup for %s failed (%s): %s", base, exc.kind, exc)
            record_provider_outcome(self.name, exc.kind)
            return ExchangeRecord.failed(_failure_from(exc))

        record_provider_outcome(self.name, "success")
        return record


class AirQualityProvider:
    """Nearby OpenAQ monitoring locations with their latest readings."""

    name = "air_quality"

    def __init__(self, client: UpstreamClient, settings: Settings) -> None:
        self._client = client
        self._base_url = settings.openaq_base_url.rstrip("/")
        self._radius = settings.air_quality_radius_meters
        self._limit = settings.air_quality_limit

    @staticmethod
    def has_coordinates(latlng: Sequence[float] | None) -> bool:
        # A latitude or longitude of exactly 0 counts as missing.
        return bool(latlng) and len(latlng) >= 2 and bool(latlng[0]) and bool(latlng[1])

    async def fetch(self, latlng: Sequence[float] | None) -> AirQualityRecord:
        if not self.has_coordinates(latlng):
            record_provider_outcome(self.name, PRECONDITION)
            return AirQualityRecord.failed(
                ProviderFailure(
                    kind=PRECONDITION,
                    message="No coordinates available for OpenAQ query.",
                )
            )

        lat, lon = latlng[0], latlng[1]
        try:
            payload = await self._client.get_json(
                f"{self._base_url}/locations",
                provider=self.name,
                params={
                    "coordinates": f"{lat},{lon}",
                    "radius": self._radius,
                    "limit": self._limit,
                },
            )
            record = AirQualityRecord(results=decode_air_quality(payload, self._limit))
        except UpstreamError as exc:
            logger.warning("Air quality lookup failed (%s): %s", exc.kind, exc)
            record_provider_outcome(self.name, exc.kind)
            return AirQualityRecord.failed(_failure_from(exc))

        record_provider_outcome(self.name, "success")
        return record


class ProviderSet:
    """The four adapters sharing one upstream client."""

    def __init__(self, client: UpstreamClient, settings: Settings) -> None:
        self.country = CountryProvider(client, settings)
        self.weather = WeatherProvider(client, settings)
        self.exchange = ExchangeProvider(client, settings)
        self.air_quality = AirQualityProvider(client, settings)

    async def fetch_secondary(
        self, country: CountryRecord
    ) -> tuple[WeatherRecord, ExchangeRecord, AirQualityRecord]:
        """Run the three independent adapters concurrently."""
        weather, exchange, air_quality = await asyncio.gather(
            self.weather.fetch(country.latlng),
            self.exchange.fetch(country.currency_codes),
            self.air_quality.fetch(country.latlng),
        )
        return weather, exchange, air_quality


__all__ = [
    "AirQualityProvider",
    "CountryProvider",
    "ExchangeProvider",
    "ProviderSet",
    "WeatherProvider",
]
