"""Application configuration.

Environment variables are loaded from .env file and can be overridden.
All settings have sensible defaults for local development.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # Server
    # ==========================================================================

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT", ge=1, le=65535)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # ==========================================================================
    # Provider credentials
    # ==========================================================================

    openweather_api_key: str | None = Field(
        default=None,
        alias="OPENWEATHER_API_KEY",
        description="Query-string key for the OpenWeatherMap API.",
    )
    openaq_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAQ_API_KEY", "OPENAQS_API_KEY"),
        description="X-API-Key header value for the OpenAQ v3 API.",
    )

    # ==========================================================================
    # Provider endpoints
    # ==========================================================================

    restcountries_base_url: str = Field(
        default="https://restcountries.com/v3.1", alias="RESTCOUNTRIES_BASE_URL"
    )
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        alias="OPENWEATHER_BASE_URL",
    )
    exchange_rate_base_url: str = Field(
        default="https://api.exchangerate.host", alias="EXCHANGE_RATE_BASE_URL"
    )
    openaq_base_url: str = Field(
        default="https://api.openaq.org/v3", alias="OPENAQ_BASE_URL"
    )
    upstream_timeout_seconds: float = Field(
        default=10.0, alias="UPSTREAM_TIMEOUT_SECONDS", gt=0
    )

    # ==========================================================================
    # Provider behaviour
    # ==========================================================================

    exchange_fallback_base: str = Field(default="USD", alias="EXCHANGE_FALLBACK_BASE")
    exchange_target_symbols: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["USD", "EUR", "GBP"],
        alias="EXCHANGE_TARGET_SYMBOLS",
    )
    air_quality_radius_meters: int = Field(
        default=25000, alias="AIR_QUALITY_RADIUS_METERS", gt=0
    )
    air_quality_limit: int = Field(default=5, alias="AIR_QUALITY_LIMIT", ge=1, le=5)

    # ==========================================================================
    # Cache
    # ==========================================================================

    cache_ttl_seconds: int = Field(
        default=300,
        validation_alias=AliasChoices("CACHE_TTL_SECONDS", "CACHE_TTL"),
        ge=0,
    )
    cache_sweep_interval_seconds: int | None = Field(
        default=None, alias="CACHE_SWEEP_INTERVAL_SECONDS", gt=0
    )
    cache_coalesce_misses: bool = Field(default=False, alias="CACHE_COALESCE_MISSES")

    # ==========================================================================
    # CORS
    # ==========================================================================

    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )

    # ==========================================================================
    # OpenTelemetry (optional)
    # ==========================================================================

    otel_enabled: bool = Field(default=False, alias="OTEL_ENABLED")
    otel_service_name: str = Field(default="country-info", alias="OTEL_SERVICE_NAME")
    otel_service_version: str = Field(default="0.1.0", alias="OTEL_SERVICE_VERSION")
    otel_exporter_otlp_endpoint: str = Field(
        default="http://localhost:4317", alias="OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    otel_exporter_otlp_headers: str | None = Field(
        default=None, alias="OTEL_EXPORTER_OTLP_HEADERS"
    )

    # ==========================================================================
    # Pydantic Settings Config
    # ==========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: Any) -> list[str]:
        """Parse comma-separated CORS origins, rejecting wildcard '*'."""
        if isinstance(value, str):
            if not value:
                return []
            parsed = [item.strip() for item in value.split(",") if item.strip()]
        else:
            parsed = list(value) if value is not None else []

        if "*" in parsed:
            raise ValueError(
                "Wildcard CORS origin '*' is not allowed. "
                "Specify explicit origins like 'http://localhost:3000'."
            )
        return parsed

    @field_validator("exchange_target_symbols", mode="before")
    @classmethod
    def parse_target_symbols(cls, value: Any) -> list[str]:
        """Parse comma-separated currency codes into upper-case symbols."""
        if isinstance(value, str):
            items = value.split(",")
        else:
            items = list(value) if value else []
        return [item.strip().upper() for item in items if item.strip()]

    @field_validator("exchange_fallback_base")
    @classmethod
    def normalize_fallback_base(cls, value: str) -> str:
        return value.strip().upper()

    # ==========================================================================
    # Derived values
    # ==========================================================================

    @property
    def effective_sweep_interval_seconds(self) -> int:
        """Sweep period, defaulting to half the TTL but never under a minute."""
        if self.cache_sweep_interval_seconds is not None:
            return self.cache_sweep_interval_seconds
        return max(60, self.cache_ttl_seconds // 2)

    def missing_provider_keys(self) -> list[str]:
        """Return env var names of provider keys that are not configured."""
        missing = []
        if not self.openweather_api_key:
            missing.append("OPENWEATHER_API_KEY")
        if not self.openaq_api_key:
            missing.append("OPENAQ_API_KEY")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
