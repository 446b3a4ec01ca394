"""Contact form API endpoints."""

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from imec_backend.api.deps import ContactHandler
from imec_backend.core.exceptions import ValidationError
from imec_backend.core.rate_limit import enforce_rate_limit
from imec_backend.schemas.contact import (
    ContactSubmission,
    ContactSuccessResponse,
    ContactValidationErrorResponse,
    ErrorResponse,
)
from imec_backend.services.contact import BadRequest, ServerError

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["contact"], dependencies=[Depends(enforce_rate_limit)])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

_submission_schema = ContactSubmission.model_json_schema()
SUBMISSION_REQUEST_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {"schema": _submission_schema},
            "application/x-www-form-urlencoded": {"schema": _submission_schema},
        },
    }
}


def _invalid_payload(body: Any) -> RequestValidationError:
    return RequestValidationError(
        [{"type": "model_attributes_type", "loc": ("body",), "msg": "Input should be an object", "input": body}]
    )


async def read_submission(request: Request) -> ContactSubmission:
    """
    Parse the submission from a JSON object or an HTML form post.

    Raises:
        RequestValidationError: If the body is neither a JSON object nor form data.
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        # Repeated keys keep the last value; uploaded files count as missing
        return ContactSubmission.model_validate(dict(form))

    try:
        body = await request.json()
    except ValueError as e:
        raise _invalid_payload(None) from e

    if not isinstance(body, dict):
        raise _invalid_payload(body)
    return ContactSubmission.model_validate(body)


Submission = Annotated[ContactSubmission, Depends(read_submission)]


@router.post(
    "/contacts/",
    response_model=ContactSuccessResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={
        400: {"model": ContactValidationErrorResponse, "description": "A field is missing or malformed"},
        429: {"model": ErrorResponse, "description": "Too many submissions from this client"},
        500: {"model": ErrorResponse, "description": "The email could not be sent"},
    },
    openapi_extra=SUBMISSION_REQUEST_BODY,
)
@router.post("/api/contact", include_in_schema=False)
async def submit_contact_form(submission: Submission, handler: ContactHandler) -> JSONResponse:
    """
    Submit the website contact form.

    Sends a notification to the school and a localized auto-reply to the
    submitter. Accepts a JSON object or an HTML form post. Validation
    errors name the failing field so the form can highlight it.
    """
    logger.info("contact_submission_received", interest=submission.interest, language=submission.language)

    result = await handler.handle(submission)

    if isinstance(result, BadRequest):
        raise ValidationError(result.field, result.reason)
    if isinstance(result, ServerError):
        raise result.cause

    body = ContactSuccessResponse(
        preview_url=result.admin_preview_url,
        auto_reply_preview_url=result.auto_reply_preview_url,
    )
    return JSONResponse(content=body.model_dump(by_alias=True, exclude_none=True))
