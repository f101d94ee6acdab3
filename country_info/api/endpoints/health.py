import time

from fastapi import APIRouter

from country_info.models.country_info import HealthResponse

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("/health-check", response_model=HealthResponse)
async def healthcheck() -> HealthResponse:
    """Lightweight liveness probe with process uptime."""
    return HealthResponse(status="ok", uptime=time.monotonic() - _STARTED_AT)
