"""
Contact form business logic: validation, email rendering and submission handling.
"""

from imec_backend.services.contact import (
    BadRequest,
    ContactSubmissionHandler,
    HandlerResult,
    ServerError,
    Success,
)
from imec_backend.services.templates import (
    Language,
    RenderedEmail,
    render_auto_reply,
    render_notification,
    select_language,
)
from imec_backend.services.validation import (
    Accepted,
    Rejected,
    ValidationResult,
    validate_submission,
)

__all__ = [
    # Handler
    "BadRequest",
    "ContactSubmissionHandler",
    "HandlerResult",
    "ServerError",
    "Success",
    # Templates
    "Language",
    "RenderedEmail",
    "render_auto_reply",
    "render_notification",
    "select_language",
    # Validation
    "Accepted",
    "Rejected",
    "ValidationResult",
    "validate_submission",
]
