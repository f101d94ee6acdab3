from contextlib import asynccontextmanager
import logging

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from country_info.api.errors import REQUEST_ID_HEADER, install_error_handlers
from country_info.api.metrics import router as metrics_router
from country_info.api.routes import api_router
from country_info.core.config import Settings, get_settings
from country_info.core.telemetry import (
    configure_opentelemetry,
    instrument_fastapi,
    instrument_upstream_client,
)
from country_info.jobs.cache_sweeper import cache_sweeper_lifespan
from country_info.services.aggregator import CountryInfoAggregator, CountryInfoService
from country_info.services.cache import build_composite_cache
from country_info.services.providers import ProviderSet
from country_info.services.upstream_client import UpstreamClient

logger = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """
    Set the root log level.

    httpx and httpcore stay at WARNING unless DEBUG is requested; their
    request lines include the weather API key.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(
            logging.DEBUG if level <= logging.DEBUG else logging.WARNING
        )


def _warn_missing_provider_keys(settings: Settings) -> None:
    for env_name in settings.missing_provider_keys():
        logger.warning(
            "%s is not set. Requests to that provider will return an error record.",
            env_name,
        )


def _install_request_id_middleware(app: FastAPI) -> None:
    """Ensure each response includes a stable X-Request-Id header."""

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER, str(uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def build_country_info_service(
    settings: Settings, client: UpstreamClient
) -> CountryInfoService:
    """Wire adapters, aggregator and cache into the request-facing service."""
    return CountryInfoService(
        CountryInfoAggregator(ProviderSet(client, settings)),
        build_composite_cache(settings),
        coalesce_misses=settings.cache_coalesce_misses,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    settings = get_settings()

    configure_opentelemetry(
        service_name=settings.otel_service_name,
        service_version=settings.otel_service_version,
        otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        otlp_headers=settings.otel_exporter_otlp_headers,
        enabled=settings.otel_enabled,
    )
    _warn_missing_provider_keys(settings)

    async with UpstreamClient(settings) as client:
        instrument_upstream_client(client.http_client, enabled=settings.otel_enabled)
        service = build_country_info_service(settings, client)
        app.state.country_info_service = service
        async with cache_sweeper_lifespan(
            service.cache, settings.effective_sweep_interval_seconds
        ):
            logger.info("Country info service ready on port %s", settings.port)
            yield


def create_app() -> FastAPI:
    """Application factory for FastAPI."""
    settings = get_settings()
    app = FastAPI(
        title="Country Info API",
        description="Aggregates country metadata, weather, exchange rates and air quality.",
        version="0.1.0",
        lifespan=lifespan,
    )

    _configure_logging(settings.log_level)

    instrument_fastapi(app, enabled=settings.otel_enabled)
    _install_request_id_middleware(app)
    install_error_handlers(app)

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(metrics_router)
    app.include_router(api_router)

    return app


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "country_info.main:app",
        host=settings.host,
        port=settings.port,
    )


app = create_app()
