"""Health & Readiness Probes - liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the connection pool cannot reach the database
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from library.api.dependencies import get_data_source
from library.infrastructure.database import DataSource

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "library-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(
    data_source: DataSource | None = Depends(get_data_source),
):
    """Readiness probe - includes database connectivity."""
    db_ok = await data_source.health_check() if data_source else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
