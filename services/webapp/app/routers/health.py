# =============================================================================
# Health Check Router
# =============================================================================
# Endpoints for container health checks and readiness checks.
# =============================================================================

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from hub_libs.job_manager import JobManager

from app.services.job_service import get_job_manager

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadyResponse(BaseModel):
    """Readiness check response model."""

    status: str
    services: dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the service is running.
    No authentication required for container health checks.
    """
    from app import __version__

    return HealthResponse(status="healthy", version=__version__)


@router.get("/ready", response_model=ReadyResponse)
def readiness_check(
    response: Response,
    manager: JobManager = Depends(get_job_manager),
) -> ReadyResponse:
    """
    Readiness check endpoint.

    Reaches both the job store and the trace store. Returns 503 when either
    is unavailable. No authentication required for container readiness checks.
    """
    services = {}
    for name, store in (("jobs", manager.job_store), ("traces", manager.trace_store)):
        try:
            store.count()
            services[name] = "ok"
        except PyMongoError:
            services[name] = "unavailable"

    if all(state == "ok" for state in services.values()):
        return ReadyResponse(status="ready", services=services)

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadyResponse(status="unavailable", services=services)
