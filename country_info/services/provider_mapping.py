"""Pure decoding utilities for upstream provider payloads.

Each ``decode_*`` function turns raw JSON into a DTO. Optional fields that are
missing or malformed become ``None``; a payload whose overall shape is wrong
raises :class:`InvalidResponseBody` so the caller can treat it like any other
upstream failure. Anything else a decoder trips over is reported the same way.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from country_info.services.dto import (
    AirQualityLocation,
    CountryRecord,
    Currency,
    CurrentConditions,
    ExchangeRecord,
    Flags,
    ForecastSample,
    Measurement,
    Rate,
)
from country_info.services.errors import InvalidResponseBody

D = TypeVar("D")

FORECAST_SAMPLE_COUNT = 8
PM25_PARAMETERS = ("pm25", "pm2.5")

# Upper bound of each US EPA PM2.5 band (simplified), in ug/m3.
AQI_BANDS: tuple[tuple[float, str], ...] = (
    (12.0, "Good"),
    (35.4, "Moderate"),
    (55.4, "Unhealthy for Sensitive Groups"),
    (150.4, "Unhealthy"),
    (250.4, "Very Unhealthy"),
)


def get_path(data: Any, *keys: str | int) -> Any:
    """Walk nested dicts/lists, returning None as soon as a step is missing."""
    current = data
    for key in keys:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        elif isinstance(current, dict):
            current = current.get(key)
        else:
            return None
        if current is None:
            return None
    return current


def to_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return None


def to_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def to_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def _require_dict(payload: Any, what: str, provider: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise InvalidResponseBody(
            f"Expected a JSON object for {what}, got {type(payload).__name__}.",
            provider=provider,
        )
    return payload


DECODE_ERRORS = (
    AttributeError,
    IndexError,
    KeyError,
    OverflowError,
    TypeError,
    ValueError,
)


def decoder(provider: str) -> Callable[[Callable[..., D]], Callable[..., D]]:
    """Re-raise anything a decoder trips over as :class:`InvalidResponseBody`."""

    def decorate(func: Callable[..., D]) -> Callable[..., D]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> D:
            try:
                return func(*args, **kwargs)
            except DECODE_ERRORS as exc:
                raise InvalidResponseBody(
                    f"Could not decode {provider} payload: {exc!r}",
                    provider=provider,
                ) from exc

        return wrapper

    return decorate


# =============================================================================
# Country metadata
# =============================================================================


def _decode_latlng(value: Any) -> tuple[float, float] | None:
    if not isinstance(value, list) or len(value) < 2:
        return None
    lat, lon = to_float(value[0]), to_float(value[1])
    if lat is None or lon is None:
        return None
    return (lat, lon)


def _decode_capital(value: Any) -> str | None:
    if isinstance(value, list):
        return to_str(value[0]) if value else None
    return to_str(value)


def _decode_flags(value: Any) -> Flags | None:
    if not isinstance(value, dict):
        return None
    return Flags(
        png=to_str(value.get("png")),
        svg=to_str(value.get("svg")),
        alt=to_str(value.get("alt")),
    )


def _decode_currencies(value: Any) -> tuple[Currency, ...]:
    if not isinstance(value, dict):
        return ()
    currencies = []
    for code, details in value.items():
        details = details if isinstance(details, dict) else {}
        currencies.append(
            Currency(
                code=str(code),
                name=to_str(details.get("name")),
                symbol=to_str(details.get("symbol")),
            )
        )
    return tuple(currencies)


@decoder("country")
def decode_country(data: Any, fallback_name: str) -> CountryRecord:
    """Map one RestCountries v3.1 entry to a CountryRecord."""
    data = _require_dict(data, "country entry", "country")
    common = to_str(get_path(data, "name", "common"))
    official = to_str(get_path(data, "name", "official"))
    return CountryRecord(
        name=common or official or fallback_name,
        official_name=official,
        capital=_decode_capital(data.get("capital")),
        population=to_int(data.get("population")),
        region=to_str(data.get("region")),
        subregion=to_str(data.get("subregion")),
        flags=_decode_flags(data.get("flags")),
        latlng=_decode_latlng(data.get("latlng")),
        currencies=_decode_currencies(data.get("currencies")),
    )


# =============================================================================
# Weather
# =============================================================================


@decoder("weather")
def decode_current_conditions(payload: Any) -> CurrentConditions:
    """Map an OpenWeatherMap /weather response."""
    payload = _require_dict(payload, "current weather", "weather")
    return CurrentConditions(
        temp=to_float(get_path(payload, "main", "temp")),
        humidity=to_float(get_path(payload, "main", "humidity")),
        pressure=to_float(get_path(payload, "main", "pressure")),
        wind_speed=to_float(get_path(payload, "wind", "speed")),
        description=to_str(get_path(payload, "weather", 0, "description")),
        icon=to_str(get_path(payload, "weather", 0, "icon")),
        timezone=to_int(payload.get("timezone")),
    )


@decoder("weather")
def decode_forecast(
    payload: Any, limit: int = FORECAST_SAMPLE_COUNT
) -> tuple[ForecastSample, ...]:
    """Map the first ``limit`` entries of an OpenWeatherMap /forecast response."""
    payload = _require_dict(payload, "forecast", "weather")
    entries = payload.get("list")
    if not isinstance(entries, list):
        return ()
    return tuple(
        ForecastSample(
            dt=to_int(get_path(item, "dt")),
            temp=to_float(get_path(item, "main", "temp")),
            description=to_str(get_path(item, "weather", 0, "description")),
            wind_speed=to_float(get_path(item, "wind", "speed")),
        )
        for item in entries[:limit]
    )


# =============================================================================
# Exchange rates
# =============================================================================


@decoder("exchange")
def decode_exchange(payload: Any, base: str) -> ExchangeRecord:
    """Map an exchangerate.host /latest response."""
    payload = _require_dict(payload, "exchange rates", "exchange")
    raw_rates = payload.get("rates")
    if not isinstance(raw_rates, dict):
        detail = to_str(get_path(payload, "error", "info")) or to_str(
            payload.get("error")
        )
        message = "Exchange provider returned no rates"
        raise InvalidResponseBody(
            f"{message}: {detail}" if detail else message, provider="exchange"
        )

    rates = []
    for currency, value in raw_rates.items():
        numeric = to_float(value)
        if numeric is not None:
            rates.append(Rate(currency=str(currency), value=numeric))

    return ExchangeRecord(
        base=to_str(payload.get("base")) or base,
        rates=tuple(rates),
        date=to_str(payload.get("date")),
    )


# =============================================================================
# Air quality
# =============================================================================


def aqi_status(pm25: float | None) -> str:
    """Classify a PM2.5 reading into a simplified US EPA AQI band."""
    if pm25 is None:
        return "Not Reported"
    for upper_bound, label in AQI_BANDS:
        if pm25 <= upper_bound:
            return label
    return "Hazardous"


def _decode_measurement(item: Any) -> Measurement | None:
    if not isinstance(item, dict):
        return None
    parameter = item.get("parameter")
    unit = item.get("unit")
    if isinstance(parameter, dict):
        unit = unit or parameter.get("units")
        parameter = parameter.get("name")
    name = to_str(parameter)
    if not name:
        return None
    value = item.get("value")
    if value is None:
        value = get_path(item, "latest", "value")
    return Measurement(parameter=name, value=to_float(value), unit=to_str(unit))


def _decode_measurements(location: dict[str, Any]) -> tuple[Measurement, ...]:
    raw = location.get("latest")
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list) or not raw:
        # v3 /locations only lists sensors; readings may be absent.
        raw = location.get("sensors")
    if not isinstance(raw, list):
        return ()
    decoded = (_decode_measurement(item) for item in raw)
    return tuple(item for item in decoded if item is not None)


def _pm25_value(measurements: tuple[Measurement, ...]) -> float | None:
    for measurement in measurements:
        if measurement.parameter.lower() in PM25_PARAMETERS:
            return measurement.value
    return None


@decoder("air_quality")
def decode_air_quality(payload: Any, limit: int) -> tuple[AirQualityLocation, ...]:
    """Map an OpenAQ v3 /locations response, keeping at most ``limit`` entries."""
    payload = _require_dict(payload, "air quality locations", "air_quality")
    results = payload.get("results")
    if not isinstance(results, list):
        return ()

    locations = []
    for item in results[:limit]:
        if not isinstance(item, dict):
            continue
        measurements = _decode_measurements(item)
        locations.append(
            AirQualityLocation(
                location=item.get("id") if isinstance(item.get("id"), (int, str)) else None,
                name=to_str(item.get("name")),
                measurements=measurements,
                aqi_status=aqi_status(_pm25_value(measurements)),
            )
        )
    return tuple(locations)


__all__ = [
    "AQI_BANDS",
    "DECODE_ERRORS",
    "FORECAST_SAMPLE_COUNT",
    "aqi_status",
    "decode_air_quality",
    "decode_country",
    "decode_current_conditions",
    "decode_exchange",
    "decode_forecast",
    "decoder",
    "get_path",
    "to_float",
    "to_int",
    "to_str",
]
