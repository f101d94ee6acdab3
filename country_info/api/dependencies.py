"""
Shared dependency injection functions for API endpoints.
"""

from fastapi import Request

from country_info.services.aggregator import CountryInfoService


def get_country_info_service(request: Request) -> CountryInfoService:
    """Return the service built during application startup."""
    return request.app.state.country_info_service
