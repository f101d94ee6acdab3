from __future__ import annotations

from prometheus_client import Counter, Histogram

CACHE_EVENTS = Counter(
    "country_info_cache_events_total",
    "Cache operations recorded by the country info service.",
    labelnames=("cache", "event"),
)
UPSTREAM_REQUESTS = Counter(
    "country_info_upstream_requests_total",
    "Outbound upstream provider requests.",
    labelnames=("provider", "result"),
)
UPSTREAM_REQUEST_LATENCY = Histogram(
    "country_info_upstream_request_seconds",
    "Latency of outbound upstream provider requests.",
    labelnames=("provider",),
)
PROVIDER_OUTCOMES = Counter(
    "country_info_provider_outcomes_total",
    "Sub-record outcomes produced by provider adapters.",
    labelnames=("provider", "outcome"),
)
AGGREGATION_LATENCY = Histogram(
    "country_info_aggregation_seconds",
    "Latency of a full country aggregation on cache miss.",
)


def record_cache_event(cache: str, event: str) -> None:
    """Increment a cache event counter."""
    CACHE_EVENTS.labels(cache=cache, event=event).inc()


def observe_upstream_request(
    provider: str, result: str, duration_seconds: float
) -> None:
    """Record upstream request result and latency."""
    UPSTREAM_REQUESTS.labels(provider=provider, result=result).inc()
    UPSTREAM_REQUEST_LATENCY.labels(provider=provider).observe(duration_seconds)


def record_provider_outcome(provider: str, outcome: str) -> None:
    """Record whether an adapter produced a populated or error sub-record."""
    PROVIDER_OUTCOMES.labels(provider=provider, outcome=outcome).inc()


def observe_aggregation(duration_seconds: float) -> None:
    """Record end-to-end aggregation latency."""
    AGGREGATION_LATENCY.observe(duration_seconds)
