"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from procurement.api.dependencies import ContainerDep

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(container: ContainerDep) -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="procurement-api",
        version=container.settings.api_version,
    )


@router.get("/ready")
async def readiness_check(container: ContainerDep) -> JSONResponse:
    """Check if the store answers.

    Returns:
        Readiness status, 503 when the store is unreachable.
    """
    try:
        await container.store.keys("health:")
    except Exception as e:
        logger.warning("Readiness check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "error": type(e).__name__},
        )
    return JSONResponse(content={"status": "ready"})
