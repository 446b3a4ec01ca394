"""
Exception Classes for the IMEC Backend.

Domain errors raised by the validator, the mail transports and the startup
code, plus the HTTP exceptions used by the API layer.
"""
from typing import Literal, Optional

from fastapi import HTTPException, status

TransportPhase = Literal["connect", "auth", "send"]


class ContactBackendError(Exception):
    """Base class for domain errors."""


class ValidationError(ContactBackendError):
    """A submitted field failed validation. Safe to show to the client."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class TransportError(ContactBackendError):
    """The mail transport failed while connecting, authenticating or sending.

    The message may contain host or credential details, so it is only logged.
    """

    def __init__(self, phase: TransportPhase, cause: Optional[BaseException] = None, message: str = ""):
        self.phase = phase
        self.cause = cause
        detail = message or (str(cause) if cause else "unknown error")
        super().__init__(f"{phase} failed: {detail}")


class ConfigurationError(ContactBackendError):
    """Startup configuration is unusable; the service must not accept traffic."""


class NotFoundError(HTTPException):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource: str, id: str = None):
        detail = f"{resource} not found" + (f": {id}" if id else "")
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class RateLimitError(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again later.",
        retry_after: int = 60,
        headers: Optional[dict[str, str]] = None,
    ):
        self.retry_after = retry_after
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=message,
            headers={"Retry-After": str(retry_after), **(headers or {})},
        )
