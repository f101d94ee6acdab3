"""Response schemas for the country info API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from country_info.services.dto import (
    AirQualityRecord,
    CompositeRecord,
    CountryRecord,
    ExchangeRecord,
    ProviderFailure,
    WeatherRecord,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid"
    )


class CurrencyInfo(CamelModel):
    name: str | None = None
    symbol: str | None = None


class FlagsInfo(CamelModel):
    png: str | None = None
    svg: str | None = None
    alt: str | None = None


class Country(CamelModel):
    name: str
    official_name: str | None = None
    capital: str | None = None
    population: int | None = None
    region: str | None = None
    subregion: str | None = None
    flags: FlagsInfo | None = None
    latlng: list[float] | None = Field(None, description="[latitude, longitude]")
    currencies: dict[str, CurrencyInfo] = Field(
        default_factory=dict, description="Currency code to name/symbol."
    )

    @classmethod
    def from_dto(cls, dto: CountryRecord) -> "Country":
        return cls(
            name=dto.name,
            official_name=dto.official_name,
            capital=dto.capital,
            population=dto.population,
            region=dto.region,
            subregion=dto.subregion,
            flags=FlagsInfo(**dto.flags.__dict__) if dto.flags else None,
            latlng=list(dto.latlng) if dto.latlng else None,
            currencies={
                currency.code: CurrencyInfo(name=currency.name, symbol=currency.symbol)
                for currency in dto.currencies
            },
        )


class ErrorMarker(CamelModel):
    """Present instead of data when a provider failed."""

    error: str = Field(..., description="Human-readable failure cause.")
    error_kind: str = Field(..., description="Failure category, e.g. 'timeout'.")

    @classmethod
    def from_failure(cls, failure: ProviderFailure) -> "ErrorMarker":
        return cls(error=failure.message, error_kind=failure.kind)


class CurrentWeather(CamelModel):
    temp: float | None = None
    humidity: float | None = None
    pressure: float | None = None
    wind_speed: float | None = None
    description: str | None = None
    icon: str | None = None
    timezone: int | None = Field(None, description="Offset from UTC in seconds.")


class ForecastEntry(CamelModel):
    dt: int | None = None
    temp: float | None = None
    description: str | None = None
    wind_speed: float | None = None


class Forecast(CamelModel):
    entries: list[ForecastEntry] = Field(default_factory=list, alias="list")


class Weather(CamelModel):
    current: CurrentWeather
    forecast: Forecast

    @classmethod
    def from_dto(cls, dto: WeatherRecord) -> "Weather | ErrorMarker":
        if dto.error is not None or dto.current is None:
            return ErrorMarker.from_failure(
                dto.error or ProviderFailure("invalid_body", "Missing weather data")
            )
        return cls(
            current=CurrentWeather(**dto.current.__dict__),
            forecast=Forecast(
                entries=[ForecastEntry(**sample.__dict__) for sample in dto.forecast]
            ),
        )


class Exchange(CamelModel):
    base: str | None = None
    rates: dict[str, float] = Field(default_factory=dict)
    date: str | None = None

    @classmethod
    def from_dto(cls, dto: ExchangeRecord) -> "Exchange | ErrorMarker":
        if dto.error is not None:
            return ErrorMarker.from_failure(dto.error)
        return cls(
            base=dto.base,
            rates={rate.currency: rate.value for rate in dto.rates},
            date=dto.date,
        )


class MeasurementInfo(CamelModel):
    parameter: str
    value: float | None = None
    unit: str | None = None


class AirQualityLocationInfo(CamelModel):
    location: int | str | None = None
    name: str | None = None
    measurements: list[MeasurementInfo] = Field(default_factory=list)
    aqi_status: str = Field(..., description="PM2.5 based AQI band.")


class AirQuality(CamelModel):
    results: list[AirQualityLocationInfo] = Field(default_factory=list, max_length=5)

    @classmethod
    def from_dto(cls, dto: AirQualityRecord) -> "AirQuality | ErrorMarker":
        if dto.error is not None:
            return ErrorMarker.from_failure(dto.error)
        return cls(
            results=[
                AirQualityLocationInfo(
                    location=location.location,
                    name=location.name,
                    measurements=[
                        MeasurementInfo(**measurement.__dict__)
                        for measurement in location.measurements
                    ],
                    aqi_status=location.aqi_status,
                )
                for location in dto.results
            ]
        )


class CountryInfoResponse(CamelModel):
    from_cache: bool = Field(..., description="True when served from the cache.")
    country: Country
    weather: Weather | ErrorMarker
    exchange: Exchange | ErrorMarker
    air_quality: AirQuality | ErrorMarker
    fetched_at: datetime = Field(..., description="When the record was aggregated.")

    @classmethod
    def from_record(
        cls, record: CompositeRecord, *, from_cache: bool
    ) -> "CountryInfoResponse":
        return cls(
            from_cache=from_cache,
            country=Country.from_dto(record.country),
            weather=Weather.from_dto(record.weather),
            exchange=Exchange.from_dto(record.exchange),
            air_quality=AirQuality.from_dto(record.air_quality),
            fetched_at=record.fetched_at,
        )


class HealthResponse(BaseModel):
    status: str
    uptime: float = Field(..., description="Seconds since the process started.")


class ErrorResponse(BaseModel):
    error: str
