"""Health check endpoints for monitoring application status."""

import time

from fastapi import APIRouter, Depends, Request, status

from shortlink.api.dependencies import get_settings
from shortlink.core.config import Settings
from shortlink.db.base import DatabaseHealthCheck

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Get system health status",
    response_description="Health status of all system components"
)
async def health_check(request: Request, app_settings: Settings = Depends(get_settings)):
    """Check health of all system components."""
    database = await DatabaseHealthCheck.check_connection(request.app.state.session_factory)

    health_status = {
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "version": app_settings.APP_VERSION,
        "environment": app_settings.ENVIRONMENT.value,
        "timestamp": time.time(),
        "components": {
            # The raw error stays in the logs
            "database": {"status": database["status"], "latency_ms": database["latency_ms"]},
        },
    }
    return health_status


@router.get(
    "/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness probe",
    response_description="Application readiness status"
)
async def readiness_probe(request: Request):
    """Check if application is ready to handle requests."""
    database = await DatabaseHealthCheck.check_connection(request.app.state.session_factory)
    components_status = {"api": True, "database": database["status"] == "healthy"}

    return {
        "ready": all(components_status.values()),
        "components": components_status
    }


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    response_description="Application liveness status"
)
async def liveness_probe():
    """Simple check that application is running."""
    return {"alive": True}
