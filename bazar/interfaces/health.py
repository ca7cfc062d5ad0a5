"""
Health check router.

Provides a simple health endpoint for liveness/readiness probes.
Reports the application version and how many sessions are open.
"""

from fastapi import APIRouter, Request

from bazar.core.config import settings
from bazar.interfaces.marketplace.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check(request: Request) -> HealthResponse:
    """Return current application health status."""
    registry = getattr(request.app.state, "session_registry", None)
    return HealthResponse(
        status="ok",
        version=settings.version,
        open_sessions=len(registry) if registry is not None else 0,
    )
