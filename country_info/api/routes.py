from fastapi import APIRouter

from country_info.api.endpoints.country_info import router as country_info_router
from country_info.api.endpoints.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["meta"])
api_router.include_router(country_info_router, tags=["country-info"])
