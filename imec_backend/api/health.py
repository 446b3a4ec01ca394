"""
IMEC Backend Health Check Endpoints
Liveness, startup and readiness probes.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel

from imec_backend.core.rate_limit import enforce_rate_limit


# =============================================================================
# Health Status Models
# =============================================================================


class HealthResponse(BaseModel):
    """Basic health response."""

    status: str
    message: str
    mailer: Optional[str] = None


class LivenessResponse(BaseModel):
    """Simple liveness check response."""

    status: str


class StartupResponse(BaseModel):
    """Startup probe response."""

    status: str
    started_at: str


class ReadinessResponse(BaseModel):
    """Readiness probe response."""

    status: str
    mailer: Optional[str] = None
    version: str


def get_startup_time(request: Request) -> Optional[datetime]:
    """Set by the lifespan handler once the mail transport is verified."""
    return getattr(request.app.state, "started_at", None)


def get_mailer_mode(request: Request) -> Optional[str]:
    transport = getattr(request.app.state, "mail_transport", None)
    return transport.mode if transport is not None else None


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter(prefix="/health", tags=["Health"], dependencies=[Depends(enforce_rate_limit)])


@router.get("", response_model=HealthResponse, summary="Basic health check")
async def basic_health(request: Request) -> HealthResponse:
    """Returns OK if the service is reachable."""
    return HealthResponse(status="OK", message="IMEC Backend is running", mailer=get_mailer_mode(request))


@router.get("/live", response_model=LivenessResponse, summary="Liveness probe")
async def liveness_probe() -> LivenessResponse:
    return LivenessResponse(status="ok")


@router.get("/startup", response_model=StartupResponse, summary="Startup probe")
async def startup_probe(request: Request, response: Response) -> StartupResponse:
    """
    Startup probe.

    Returns 503 until the mail transport has been created and verified.
    """
    startup_time = get_startup_time(request)

    if startup_time is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return StartupResponse(status="starting", started_at="")

    return StartupResponse(status="started", started_at=startup_time.isoformat())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    responses={503: {"description": "Mail transport not initialized"}},
)
async def readiness_check(request: Request, response: Response) -> ReadinessResponse:
    """Ready once a mail transport is installed."""
    mailer = get_mailer_mode(request)
    if mailer is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if mailer else "unavailable",
        mailer=mailer,
        version=request.app.state.settings.app_version,
    )
