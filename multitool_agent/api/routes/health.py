"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from ..schemas import HealthResponse
from ...tools import ToolRegistry

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check if the API server is running and how many tools are registered.",
)
def health_check() -> HealthResponse:
    """Return health status of the API server."""
    return HealthResponse(
        status="ok",
        tools=ToolRegistry.count(),
        timestamp=datetime.now(timezone.utc),
    )
