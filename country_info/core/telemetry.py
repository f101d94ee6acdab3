"""OpenTelemetry configuration and initialization."""

from __future__ import annotations

import logging
from typing import Any, ContextManager

import httpx
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.b3 import B3MultiFormat
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span

logger = logging.getLogger(__name__)

PROVIDER_ATTRIBUTE = "country_info.provider"
ERROR_KIND_ATTRIBUTE = "country_info.error_kind"


def configure_opentelemetry(
    service_name: str,
    service_version: str,
    otlp_endpoint: str,
    otlp_headers: str | None = None,
    enabled: bool = False,
) -> None:
    """Configure OpenTelemetry tracing for the application.

    Args:
        service_name: Name of the service
        service_version: Version of the service
        otlp_endpoint: OTLP collector endpoint
        otlp_headers: Optional OTLP headers
        enabled: Whether tracing is enabled
    """
    if not enabled:
        logger.info("OpenTelemetry tracing is disabled")
        return

    try:
        set_global_textmap(B3MultiFormat())

        resource = Resource.create(
            {
                "service.name": service_name,
                "service.version": service_version,
                "service.namespace": "country-info",
            }
        )

        tracer_provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(tracer_provider)

        otlp_exporter = OTLPSpanExporter(
            endpoint=otlp_endpoint,
            headers=otlp_headers,
        )
        tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

        logger.info("OpenTelemetry configured for service '%s'", service_name)
        logger.info("OTLP endpoint: %s", otlp_endpoint)

    except Exception as e:
        logger.warning("Failed to configure OpenTelemetry: %s", e)
        logger.info("Application will continue without tracing")


def instrument_fastapi(app: Any, enabled: bool = False) -> None:
    """Instrument FastAPI application for tracing."""
    if not enabled:
        return

    try:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("FastAPI instrumentation enabled")
    except Exception as e:
        logger.warning("Failed to instrument FastAPI: %s", e)


def instrument_upstream_client(client: httpx.AsyncClient, enabled: bool = False) -> None:
    """Trace requests made through the shared upstream client only."""
    if not enabled:
        return

    try:
        HTTPXClientInstrumentor.instrument_client(client)
        logger.info("Upstream HTTPX client instrumentation enabled")
    except Exception as e:
        logger.warning("Failed to instrument HTTPX: %s", e)


def upstream_span(
    provider: str,
    method: str,
    tracer_provider: TracerProvider | None = None,
) -> ContextManager[Span]:
    """Open a span around one provider call, tagged with the provider name."""
    tracer = trace.get_tracer(__name__, tracer_provider=tracer_provider)
    return tracer.start_as_current_span(
        f"upstream {provider}",
        attributes={PROVIDER_ATTRIBUTE: provider, "http.request.method": method},
    )
