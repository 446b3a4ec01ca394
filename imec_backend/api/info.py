"""Service information endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from imec_backend.api.deps import AppSettings
from imec_backend.core.config import Settings
from imec_backend.core.rate_limit import enforce_rate_limit

AVAILABLE_ENDPOINTS: dict[str, str] = {
    "info": "GET /",
    "api_info": "GET /api/info",
    "health": "GET /health",
    "contact": "POST /contacts/",
}


class ServiceInfo(BaseModel):
    name: str
    version: str
    environment: str
    mailer: Optional[str] = None
    test_mode: bool
    endpoints: dict[str, str]


router = APIRouter(tags=["Info"], dependencies=[Depends(enforce_rate_limit)])


def build_service_info(request: Request, settings: Settings) -> ServiceInfo:
    transport = getattr(request.app.state, "mail_transport", None)
    mailer = transport.mode if transport is not None else None
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        mailer=mailer,
        test_mode=mailer == "test",
        endpoints=AVAILABLE_ENDPOINTS,
    )


@router.get("/", response_model=ServiceInfo, summary="API root")
async def root(request: Request, settings: AppSettings) -> ServiceInfo:
    """Service identity, version and mailer mode."""
    return build_service_info(request, settings)


@router.get("/api/info", response_model=ServiceInfo, summary="Service information")
async def api_info(request: Request, settings: AppSettings) -> ServiceInfo:
    return build_service_info(request, settings)
