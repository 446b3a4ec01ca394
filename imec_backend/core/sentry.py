"""
Sentry Error Tracking Configuration
Optional Sentry SDK initialization for the contact backend.
"""

import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from imec_backend.core.config import Settings

logger = logging.getLogger(__name__)

HEALTH_PATHS = ("/health", "/health/live", "/health/ready", "/health/startup")


def before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """
    Process events before sending to Sentry.

    Drops health check noise and redacts headers that may carry secrets.
    """
    request = event.get("request") or {}
    if request.get("url", "").endswith(HEALTH_PATHS):
        return None

    headers = request.get("headers")
    if headers:
        for header in ("authorization", "cookie", "x-api-key"):
            if header in headers:
                headers[header] = "[REDACTED]"

    return event


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry SDK with FastAPI integration.

    Returns:
        bool: True if Sentry was initialized successfully, False otherwise.
    """
    if not settings.sentry_dsn:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return False

    try:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.sentry_environment or settings.environment,
            release=f"imec-backend@{settings.app_version}",
            traces_sample_rate=settings.sentry_traces_sample_rate,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                StarletteIntegration(transaction_style="endpoint"),
                LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            ],
            before_send=before_send,
            # Submissions contain names, emails and phone numbers
            send_default_pii=False,
            attach_stacktrace=True,
            max_breadcrumbs=50,
        )
        sentry_sdk.set_tag("service", "imec-backend")
        logger.info(f"Sentry initialized (env={settings.sentry_environment or settings.environment})")
        return True

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")
        return False


def capture_exception(error: Exception, extra: dict[str, Any] | None = None) -> str | None:
    """
    Capture an exception and send to Sentry.

    Returns:
        Event ID if captured, None otherwise
    """
    with sentry_sdk.new_scope() as scope:
        if extra:
            for key, value in extra.items():
                scope.set_extra(key, value)
        return sentry_sdk.capture_exception(error)
