"""Exception taxonomy for country lookups and upstream provider calls."""

from __future__ import annotations

BODY_SNIPPET_LIMIT = 500


class CountryQueryError(ValueError):
    """Raised when the inbound country name is empty or whitespace."""


class CountryNotFoundError(Exception):
    """Raised when the country provider cannot resolve a country."""


class UpstreamError(Exception):
    """Base class for failures of a single upstream call."""

    kind = "upstream"

    def __init__(self, message: str, *, provider: str = "unknown") -> None:
        super().__init__(message)
        self.provider = provider


class UpstreamTimeout(UpstreamError):
    """The provider did not answer within the request timeout."""

    kind = "timeout"


class UpstreamConnectionError(UpstreamError):
    """The request never produced a response (DNS, refused, reset...)."""

    kind = "connection"


class UpstreamHTTPError(UpstreamError):
    """The provider answered with a non-2xx status."""

    kind = "http_status"

    def __init__(
        self,
        status_code: int,
        reason: str,
        body: str,
        *,
        provider: str = "unknown",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body[:BODY_SNIPPET_LIMIT]
        message = f"HTTP {status_code} {reason}".rstrip()
        if self.body:
            message = f"{message} - {self.body}"
        super().__init__(message, provider=provider)


class InvalidResponseBody(UpstreamError):
    """The provider answered 2xx but the payload is not usable JSON."""

    kind = "invalid_body"


__all__ = [
    "BODY_SNIPPET_LIMIT",
    "CountryNotFoundError",
    "CountryQueryError",
    "InvalidResponseBody",
    "UpstreamConnectionError",
    "UpstreamError",
    "UpstreamHTTPError",
    "UpstreamTimeout",
]
