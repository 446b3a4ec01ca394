"""Contact form schemas."""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SubmissionField = Literal["name", "email", "phone", "interest", "message"]


class ContactSubmission(BaseModel):
    """
    Contact form submission.

    Every field is optional here; presence and format are checked by
    ``validate_submission`` so the client gets the first failing field back.
    Values that are not strings are treated as missing.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: Optional[str] = Field(None, examples=["Ada Lovelace"])
    email: Optional[str] = Field(None, examples=["ada@example.com"])
    phone: Optional[str] = Field(None, examples=["+14155550123"])
    interest: Optional[str] = Field(None, examples=["Group Lessons"])
    message: Optional[str] = Field(None, examples=["Please call me back"])
    language: Optional[str] = Field(None, description="Auto-reply language: en (default), az or ru")

    @field_validator("*", mode="before")
    @classmethod
    def non_strings_are_missing(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class ContactSuccessResponse(BaseModel):
    """Contact form submission response."""

    model_config = ConfigDict(populate_by_name=True)

    ok: Literal[True] = True
    message: str = "Email sent successfully"
    preview_url: Optional[str] = Field(None, serialization_alias="previewUrl")
    auto_reply_preview_url: Optional[str] = Field(None, serialization_alias="autoReplyPreviewUrl")


class ContactValidationErrorResponse(BaseModel):
    """Returned with 400 when a field is invalid."""

    ok: Literal[False] = False
    error: Literal["validation_failed"] = "validation_failed"
    field: SubmissionField
    message: str


class ErrorResponse(BaseModel):
    """Generic error body used for 4xx/5xx responses."""

    ok: Literal[False] = False
    error: str
    message: str
