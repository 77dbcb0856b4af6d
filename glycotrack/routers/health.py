"""Health check endpoints for load balancers and container probes."""

from typing import Any

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from glycotrack.database import check_database_connection

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=None)
async def health_check() -> Response:
    """Report overall health including database reachability.

    200 with ``{"status": "healthy"}`` when the database answers,
    503 with ``{"status": "degraded"}`` otherwise.
    """
    if await check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "healthy", "database": "connected"},
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "degraded", "database": "disconnected"},
    )


@router.get("/health/live")
async def liveness_probe() -> dict[str, Any]:
    """Process liveness only; never touches the database."""
    return {"status": "alive"}
