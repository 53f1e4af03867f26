"""
Health check router.

Provides a simple health endpoint for liveness/readiness probes.
Reports this service only; see /health/upstream for the market API.
"""

from fastapi import APIRouter

from marketpulse.core.config import settings
from marketpulse.interfaces.market.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check() -> HealthResponse:
    """Return current application health status."""
    return HealthResponse(status="ok", version=settings.version)
