"""
Country info endpoint.

Serves the composite record for a country name, from the cache when fresh.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from country_info.api.dependencies import get_country_info_service
from country_info.models.country_info import CountryInfoResponse, ErrorResponse
from country_info.services.aggregator import CountryInfoService
from country_info.services.errors import CountryQueryError

router = APIRouter()


@router.get(
    "/country-info/{country_name}",
    response_model=CountryInfoResponse,
    summary="Aggregate country metadata, weather, exchange rates and air quality",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def get_country_info(
    country_name: str,
    response: Response,
    service: CountryInfoService = Depends(get_country_info_service),
) -> CountryInfoResponse:
    """Look up a country by (partial, case-insensitive) name."""
    record, from_cache = await service.get_country_info(country_name)
    response.headers["X-Cache-Status"] = "hit" if from_cache else "miss"
    return CountryInfoResponse.from_record(record, from_cache=from_cache)


@router.get("/country-info", include_in_schema=False)
@router.get("/country-info/", include_in_schema=False)
async def get_country_info_without_name() -> None:
    raise CountryQueryError("Country name required")
