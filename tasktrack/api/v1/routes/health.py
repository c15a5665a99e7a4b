"""
Health check endpoints

- /health (liveness): process is up, no dependency checks
- /health/ready (readiness): database answers and the cache backend is known

Reference:
- https://kubernetes.io/docs/tasks/configure-pod-container/configure-liveness-readiness-startup-probes/
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.core.cache import Cache, get_cache
from tasktrack.core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["health"],
)


class HealthResponse(BaseModel):
    """Response model for health checks"""
    status: str
    message: str
    checks: Dict[str, str] = Field(default_factory=dict)


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check (liveness)",
    description="Returns the liveness status of the application. Does not check dependencies.",
    status_code=status.HTTP_200_OK,
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", message="Service is running")


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check",
    description="Checks database connectivity and reports the statistics cache backend.",
    status_code=status.HTTP_200_OK,
    responses={
        200: {"description": "Service is ready"},
        503: {"description": "Service is not ready (database unavailable)"},
    },
)
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    cache: Cache = Depends(get_cache),
) -> HealthResponse:
    """
    Readiness probe endpoint

    **Raises:**
        HTTPException: 503 if the database does not answer
    """
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Readiness check failed: {type(e).__name__}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready - database unavailable",
        ) from e

    return HealthResponse(
        status="ready",
        message="Service is ready to serve traffic",
        checks={"database": "ok", "cache": type(cache).__name__},
    )
