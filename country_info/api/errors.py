"""Exception handlers mapping domain failures onto JSON error responses.

Every error body has the shape ``{"error": <message>}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from country_info.services.errors import (
    CountryNotFoundError,
    CountryQueryError,
    UpstreamError,
)

logger = logging.getLogger(__name__)
REQUEST_ID_HEADER = "X-Request-Id"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def country_query_error_handler(
    request: Request, exc: CountryQueryError
) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def country_not_found_handler(
    request: Request, exc: CountryNotFoundError
) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, str(exc))


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Country lookup failed upstream (%s): %s", exc.kind, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    response = error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or exc.__class__.__name__
    )
    # Rendered outside the request-id middleware, so the header is set here.
    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        REQUEST_ID_HEADER
    )
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CountryQueryError, country_query_error_handler)
    app.add_exception_handler(CountryNotFoundError, country_not_found_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
