"""Shared HTTP client for the upstream data providers."""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping
from urllib.parse import urlsplit

import httpx

from country_info.core.config import Settings
from country_info.core.metrics import observe_upstream_request
from country_info.core.telemetry import ERROR_KIND_ATTRIBUTE, upstream_span
from country_info.services.errors import (
    InvalidResponseBody,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamTimeout,
)

logger = logging.getLogger(__name__)

OPENAQ_API_KEY_HEADER = "X-API-Key"
USER_AGENT = "country-info/0.1"


class UpstreamClient:
    """Issue single-attempt, time-bounded JSON requests to provider APIs.

    Failures surface as the ``Upstream*`` exceptions so adapters only need to
    catch one hierarchy. Requests to the air-quality host get the OpenAQ key
    attached here, so the adapter never handles credentials itself.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = settings.upstream_timeout_seconds
        self._openaq_api_key = settings.openaq_api_key
        self._openaq_host = urlsplit(settings.openaq_base_url).hostname
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            headers={"User-Agent": USER_AGENT},
        )

    async def __aenter__(self) -> "UpstreamClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _auth_headers(self, url: str, headers: Mapping[str, str] | None) -> dict[str, str]:
        merged = dict(headers or {})
        if self._openaq_api_key and urlsplit(url).hostname == self._openaq_host:
            merged[OPENAQ_API_KEY_HEADER] = self._openaq_api_key
        return merged

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._client

    async def get_json(
        self,
        url: str,
        *,
        provider: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        method: str = "GET",
    ) -> Any:
        """Fetch ``url`` and return its decoded JSON body."""
        with upstream_span(provider, method) as span:
            try:
                return await self._request_json(
                    url, provider=provider, params=params, headers=headers, method=method
                )
            except UpstreamError as exc:
                span.set_attribute(ERROR_KIND_ATTRIBUTE, exc.kind)
                raise

    async def _request_json(
        self,
        url: str,
        *,
        provider: str,
        params: Mapping[str, Any] | None,
        headers: Mapping[str, str] | None,
        method: str,
    ) -> Any:
        start = time.perf_counter()
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                headers=self._auth_headers(url, headers),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            observe_upstream_request(provider, "timeout", time.perf_counter() - start)
            raise UpstreamTimeout(
                f"Request to {provider} timed out after {self._timeout:g}s",
                provider=provider,
            ) from exc
        except httpx.HTTPError as exc:
            observe_upstream_request(provider, "error", time.perf_counter() - start)
            raise UpstreamConnectionError(
                f"Request to {provider} failed: {exc}", provider=provider
            ) from exc

        if not response.is_success:
            observe_upstream_request(
                provider, "http_error", time.perf_counter() - start
            )
            logger.debug(
                "Upstream %s answered %s", provider, response.status_code
            )
            raise UpstreamHTTPError(
                response.status_code,
                response.reason_phrase,
                response.text,
                provider=provider,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            observe_upstream_request(
                provider, "invalid_body", time.perf_counter() - start
            )
            raise InvalidResponseBody(
                f"{provider} returned a non-JSON body", provider=provider
            ) from exc

        observe_upstream_request(provider, "success", time.perf_counter() - start)
        return payload


__all__ = ["OPENAQ_API_KEY_HEADER", "UpstreamClient"]
