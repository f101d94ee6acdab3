"""Data transfer objects produced by the provider adapters.

Every record is a frozen dataclass holding only tuples and other frozen
records, so a composite stored in the cache can be handed to any number of
concurrent requests without copying.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ProviderFailure:
    """In-band error marker carried by a secondary sub-record."""

    kind: str
    message: str


@dataclass(frozen=True)
class Currency:
    code: str
    name: str | None
    symbol: str | None


@dataclass(frozen=True)
class Flags:
    png: str | None
    svg: str | None
    alt: str | None


@dataclass(frozen=True)
class CountryRecord:
    """Resolved country metadata."""

    name: str
    official_name: str | None
    capital: str | None
    population: int | None
    region: str | None
    subregion: str | None
    flags: Flags | None
    latlng: tuple[float, float] | None
    currencies: tuple[Currency, ...]

    @property
    def currency_codes(self) -> tuple[str, ...]:
        return tuple(currency.code for currency in self.currencies)


@dataclass(frozen=True)
class CurrentConditions:
    temp: float | None
    humidity: float | None
    pressure: float | None
    wind_speed: float | None
    description: str | None
    icon: str | None
    timezone: int | None


@dataclass(frozen=True)
class ForecastSample:
    dt: int | None
    temp: float | None
    description: str | None
    wind_speed: float | None


@dataclass(frozen=True)
class WeatherRecord:
    """Current conditions plus a short forecast, or an error marker."""

    current: CurrentConditions | None = None
    forecast: tuple[ForecastSample, ...] = ()
    error: ProviderFailure | None = None

    @classmethod
    def failed(cls, failure: ProviderFailure) -> "WeatherRecord":
        return cls(error=failure)


@dataclass(frozen=True)
class Rate:
    currency: str
    value: float


@dataclass(frozen=True)
class ExchangeRecord:
    """Latest rates from ``base`` to the configured target currencies."""

    base: str | None = None
    rates: tuple[Rate, ...] = ()
    date: str | None = None
    error: ProviderFailure | None = None

    @classmethod
    def failed(cls, failure: ProviderFailure) -> "ExchangeRecord":
        return cls(error=failure)


@dataclass(frozen=True)
class Measurement:
    parameter: str
    value: float | None
    unit: str | None


@dataclass(frozen=True)
class AirQualityLocation:
    location: int | str | None
    name: str | None
    measurements: tuple[Measurement, ...]
    aqi_status: str


@dataclass(frozen=True)
class AirQualityRecord:
    """Nearby monitoring locations, or an error marker."""

    results: tuple[AirQualityLocation, ...] = ()
    error: ProviderFailure | None = None

    @classmethod
    def failed(cls, failure: ProviderFailure) -> "AirQualityRecord":
        return cls(error=failure)


@dataclass(frozen=True)
class CompositeRecord:
    """All four lookups for one country key; the unit stored in the cache."""

    country: CountryRecord
    weather: WeatherRecord
    exchange: ExchangeRecord
    air_quality: AirQualityRecord
    fetched_at: datetime


__all__ = [
    "AirQualityLocation",
    "AirQualityRecord",
    "CompositeRecord",
    "CountryRecord",
    "Currency",
    "CurrentConditions",
    "ExchangeRecord",
    "Flags",
    "ForecastSample",
    "Measurement",
    "ProviderFailure",
    "Rate",
    "WeatherRecord",
]
