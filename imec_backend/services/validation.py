"""
Contact form validation.

Fields are checked in a fixed order (name, email, phone, interest, message)
and only the first failure is reported. The message is optional: a blank
message is replaced by a placeholder when the notification is rendered.
"""
import re
from dataclasses import dataclass
from typing import Optional, Union

from imec_backend.schemas.contact import ContactSubmission, SubmissionField

NAME_MIN_LENGTH = 3
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# "+", a 1-3 digit country code, then at least 7 more digits
PHONE_RE = re.compile(r"^\+\d{1,3}[0-9]{7,}$")


@dataclass(frozen=True)
class Accepted:
    ok: bool = True


@dataclass(frozen=True)
class Rejected:
    field: SubmissionField
    reason: str
    ok: bool = False


ValidationResult = Union[Accepted, Rejected]


def _clean(value: Optional[str]) -> str:
    return value.strip() if value else ""


def check_name(value: Optional[str]) -> Optional[str]:
    if len(_clean(value)) < NAME_MIN_LENGTH:
        return f"Name must be at least {NAME_MIN_LENGTH} characters long"
    return None


def check_email(value: Optional[str]) -> Optional[str]:
    if not EMAIL_RE.match(_clean(value)):
        return "Please provide a valid email address"
    return None


def check_phone(value: Optional[str]) -> Optional[str]:
    if not PHONE_RE.match(_clean(value)):
        return "Phone must start with + and a country code followed by at least 7 digits, with no spaces or dashes"
    return None


def check_interest(value: Optional[str]) -> Optional[str]:
    if not _clean(value):
        return "Please select a course or program"
    return None


def check_message(value: Optional[str]) -> Optional[str]:
    # Optional; blank messages are rendered with a placeholder
    return None


CHECKS = (
    ("name", check_name),
    ("email", check_email),
    ("phone", check_phone),
    ("interest", check_interest),
    ("message", check_message),
)


def validate_submission(submission: ContactSubmission) -> ValidationResult:
    """Return Accepted, or Rejected for the first invalid field."""
    for field, check in CHECKS:
        reason = check(getattr(submission, field))
        if reason is not None:
            return Rejected(field=field, reason=reason)
    return Accepted()
