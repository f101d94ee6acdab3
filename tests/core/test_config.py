"""Tests for Settings validation and parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from country_info.core.config import Settings


def test_defaults_match_documented_values(monkeypatch):
    for name in ("PORT", "CACHE_TTL_SECONDS", "CACHE_TTL", "EXCHANGE_TARGET_SYMBOLS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.port == 3000
    assert settings.cache_ttl_seconds == 300
    assert settings.upstream_timeout_seconds == 10.0
    assert settings.exchange_fallback_base == "USD"
    assert settings.exchange_target_symbols == ["USD", "EUR", "GBP"]
    assert settings.air_quality_radius_meters == 25000
    assert settings.air_quality_limit == 5


def test_cors_parsing_accepts_comma_separated():
    settings = Settings(
        CORS_ALLOW_ORIGINS="https://app.example.com, http://localhost:9000"
    )

    assert settings.cors_allow_origins == [
        "https://app.example.com",
        "http://localhost:9000",
    ]


def test_cors_parsing_from_environment(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example.com,https://b.example.com")

    assert Settings().cors_allow_origins == [
        "https://a.example.com",
        "https://b.example.com",
    ]


def test_cors_parsing_rejects_wildcard():
    with pytest.raises(ValidationError):
        Settings(CORS_ALLOW_ORIGINS="http://localhost:3000, *")


def test_target_symbols_are_upper_cased(monkeypatch):
    monkeypatch.setenv("EXCHANGE_TARGET_SYMBOLS", "usd, chf ,,jpy")

    assert Settings().exchange_target_symbols == ["USD", "CHF", "JPY"]


def test_fallback_base_is_normalized():
    assert Settings(EXCHANGE_FALLBACK_BASE=" eur ").exchange_fallback_base == "EUR"


def test_legacy_env_aliases(monkeypatch):
    monkeypatch.delenv("OPENAQ_API_KEY", raising=False)
    monkeypatch.delenv("CACHE_TTL_SECONDS", raising=False)
    monkeypatch.setenv("OPENAQS_API_KEY", "legacy-key")
    monkeypatch.setenv("CACHE_TTL", "45")

    settings = Settings()

    assert settings.openaq_api_key == "legacy-key"
    assert settings.cache_ttl_seconds == 45


def test_sweep_interval_defaults_from_ttl():
    assert Settings(CACHE_TTL_SECONDS=600).effective_sweep_interval_seconds == 300
    assert Settings(CACHE_TTL_SECONDS=30).effective_sweep_interval_seconds == 60
    assert (
        Settings(
            CACHE_TTL_SECONDS=600, CACHE_SWEEP_INTERVAL_SECONDS=15
        ).effective_sweep_interval_seconds
        == 15
    )


def test_missing_provider_keys_lists_env_names():
    settings = Settings(OPENWEATHER_API_KEY="", OPENAQ_API_KEY="")
    assert settings.missing_provider_keys() == ["OPENWEATHER_API_KEY", "OPENAQ_API_KEY"]

    settings = Settings(OPENWEATHER_API_KEY="k", OPENAQ_API_KEY="k")
    assert settings.missing_provider_keys() == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"CACHE_TTL_SECONDS": -1},
        {"AIR_QUALITY_LIMIT": 6},
        {"UPSTREAM_TIMEOUT_SECONDS": 0},
        {"PORT": 0},
    ],
)
def test_bounds_enforced(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)
