"""
IMEC Backend FastAPI Application
Contact form backend for the IMEC school website.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from imec_backend.api import contact, dev, health, info
from imec_backend.api.info import AVAILABLE_ENDPOINTS
from imec_backend.core.config import Settings, get_settings
from imec_backend.core.exceptions import (
    ConfigurationError,
    NotFoundError,
    RateLimitError,
    TransportError,
    ValidationError,
)
from imec_backend.core.logging import configure_logging
from imec_backend.core.rate_limit import RateLimiter, RateLimitMiddleware, rate_limit_exception_handler
from imec_backend.core.security import SecurityHeadersMiddleware
from imec_backend.core.sentry import capture_exception, init_sentry
from imec_backend.delivery.transports import MailTransport, build_transport_config, create_transport

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================


async def init_mail_transport(settings: Settings, transport: Optional[MailTransport] = None) -> MailTransport:
    """
    Build and verify the mail transport.

    Raises:
        ConfigurationError: If the transport cannot be configured or verified.
            The application must not serve traffic in that case.
    """
    logger.info("Initializing mail transport...")
    if transport is None:
        transport = create_transport(build_transport_config(settings))

    try:
        await transport.verify()
    except TransportError as e:
        logger.critical(f"Mail transport verification failed during {e.phase}: {e}")
        raise ConfigurationError(f"Mail transport verification failed during {e.phase}") from e

    if transport.mode == "test":
        logger.warning("Using the in-memory test mail transport; no email will be delivered")
    else:
        logger.info("SMTP transport ready (production)")
    return transport


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.

    Startup:
    - Initialize Sentry when configured
    - Build and verify the mail transport (fail-fast)

    Shutdown:
    - Close the transport and the rate limiter
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.environment})")

    if init_sentry(settings):
        logger.info("Sentry error tracking enabled")

    app.state.mail_transport = await init_mail_transport(settings, app.state.transport_override)
    app.state.started_at = datetime.now(timezone.utc)
    logger.info("Application startup complete")

    try:
        yield
    finally:
        logger.info(f"Shutting down {settings.app_name}...")
        await app.state.mail_transport.close()
        app.state.mail_transport = None
        await app.state.rate_limiter.close()
        logger.info("Shutdown complete")


# =============================================================================
# Exception Handlers
# =============================================================================


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """A form field failed validation; the field and reason are safe to expose."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "error": "validation_failed", "field": exc.field, "message": exc.reason},
    )


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    """Mail could not be sent. Details are logged, never returned."""
    logger.error(f"Send mail error ({exc.phase}): {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "error": "internal_error", "message": "Failed to send email"},
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """The body is neither a JSON object nor form data."""
    logger.info(f"Invalid payload on {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "ok": False,
            "error": "invalid_payload",
            "message": "Request body must be a JSON object or form data with the contact form fields",
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions with a consistent format."""
    if exc.status_code == status.HTTP_404_NOT_FOUND and not isinstance(exc, NotFoundError):
        # No route matched
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "ok": False,
                "error": "endpoint_not_found",
                "message": f"Route {request.method} {request.url.path} not found",
                "available_endpoints": AVAILABLE_ENDPOINTS,
            },
        )

    errors = {
        status.HTTP_404_NOT_FOUND: "not_found",
        status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
        status.HTTP_503_SERVICE_UNAVAILABLE: "service_unavailable",
    }
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": errors.get(exc.status_code, "http_error"), "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def make_general_exception_handler(settings: Settings):
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error: {exc}")

        event_id = capture_exception(
            exc,
            extra={
                "request_method": request.method,
                "request_path": request.url.path,
            },
        )

        # Don't expose internal errors in production
        if settings.debug:
            message = str(exc)
        else:
            message = f"Internal server error (ref: {event_id})" if event_id else "Internal server error"

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": "internal_error", "message": message},
        )

    return general_exception_handler


# =============================================================================
# Application Factory
# =============================================================================


def create_app(settings: Optional[Settings] = None, transport: Optional[MailTransport] = None) -> FastAPI:
    """
    Application factory function.

    Args:
        settings: Settings to use instead of the environment.
        transport: Pre-built transport; skips transport selection, still verified at startup.
    """
    settings = settings or get_settings()
    configure_logging(settings.debug)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Contact form backend for the IMEC school website.",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.transport_override = transport
    app.state.mail_transport = None
    app.state.started_at = None
    app.state.rate_limiter = RateLimiter(settings)

    # Middleware (last added runs first)
    if settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(TransportError, transport_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(RateLimitError, rate_limit_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, make_general_exception_handler(settings))

    app.include_router(info.router)
    app.include_router(health.router)
    app.include_router(contact.router)
    app.include_router(dev.router)

    return app


app = create_app()


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "imec_backend.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


# For running with uvicorn directly
if __name__ == "__main__":
    run()
