"""Request and response schemas."""
from imec_backend.schemas.contact import (
    ContactSubmission,
    ContactSuccessResponse,
    ContactValidationErrorResponse,
    ErrorResponse,
)

__all__ = [
    "ContactSubmission",
    "ContactSuccessResponse",
    "ContactValidationErrorResponse",
    "ErrorResponse",
]
