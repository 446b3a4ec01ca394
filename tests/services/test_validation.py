"""
Tests for contact form validation.
"""
import pytest

from imec_backend.schemas.contact import ContactSubmission
from imec_backend.services.validation import (
    NAME_MIN_LENGTH,
    Accepted,
    Rejected,
    validate_submission,
)


def make_submission(submission_data, **changes) -> ContactSubmission:
    return ContactSubmission(**{**submission_data, **changes})


class TestAcceptedSubmissions:
    """Valid input passes."""

    def test_full_submission_is_accepted(self, submission):
        assert validate_submission(submission) == Accepted()

    def test_surrounding_whitespace_is_ignored(self, submission_data):
        submission = make_submission(
            submission_data,
            name="  Ada  ",
            email=" ada@example.com ",
            phone=" +994501234567 ",
            interest="  IELTS ",
        )

        assert isinstance(validate_submission(submission), Accepted)

    @pytest.mark.parametrize("message", [None, "", "   ", "hi"])
    def test_message_is_optional(self, submission_data, message):
        submission = make_submission(submission_data, message=message)

        assert isinstance(validate_submission(submission), Accepted)

    def test_language_is_not_validated(self, submission_data):
        submission = make_submission(submission_data, language="fr")

        assert isinstance(validate_submission(submission), Accepted)

    @pytest.mark.parametrize("phone", ["+14155550123", "+9941234567", "+1234567890123"])
    def test_phone_formats_accepted(self, submission_data, phone):
        assert isinstance(validate_submission(make_submission(submission_data, phone=phone)), Accepted)


class TestRejectedFields:
    """Each field is rejected with its own name."""

    @pytest.mark.parametrize("name", [None, "", "  ", "Al", " Al "])
    def test_short_or_missing_name(self, submission_data, name):
        result = validate_submission(make_submission(submission_data, name=name))

        assert isinstance(result, Rejected)
        assert result.field == "name"
        assert str(NAME_MIN_LENGTH) in result.reason

    def test_name_at_minimum_length(self, submission_data):
        result = validate_submission(make_submission(submission_data, name="Ada"))

        assert isinstance(result, Accepted)

    @pytest.mark.parametrize(
        "email",
        [None, "", "ada", "ada@example", "@example.com", "ada@@example.com", "ada lovelace@example.com"],
    )
    def test_malformed_email(self, submission_data, email):
        result = validate_submission(make_submission(submission_data, email=email))

        assert isinstance(result, Rejected)
        assert result.field == "email"

    @pytest.mark.parametrize(
        "phone",
        [None, "", "123456", "14155550123", "+1 415 555 0123", "+1-415-555-0123", "+(1)4155550123", "+123456"],
    )
    def test_malformed_phone(self, submission_data, phone):
        result = validate_submission(make_submission(submission_data, phone=phone))

        assert isinstance(result, Rejected)
        assert result.field == "phone"

    @pytest.mark.parametrize("interest", [None, "", "   "])
    def test_missing_interest(self, submission_data, interest):
        result = validate_submission(make_submission(submission_data, interest=interest))

        assert isinstance(result, Rejected)
        assert result.field == "interest"

    def test_non_string_values_count_as_missing(self, submission_data):
        submission = ContactSubmission.model_validate({**submission_data, "name": 12345})

        result = validate_submission(submission)

        assert isinstance(result, Rejected)
        assert result.field == "name"


class TestCheckingOrder:
    """Only the first failing field is reported."""

    def test_name_reported_before_email_and_phone(self, submission_data):
        submission = make_submission(submission_data, name="", email="bad", phone="bad")

        assert validate_submission(submission).field == "name"

    def test_email_reported_before_phone(self, submission_data):
        submission = make_submission(submission_data, email="bad", phone="bad", interest="")

        assert validate_submission(submission).field == "email"

    def test_phone_reported_before_interest(self, submission_data):
        submission = make_submission(submission_data, phone="123456", interest="")

        assert validate_submission(submission).field == "phone"

    def test_empty_submission_reports_name(self):
        assert validate_submission(ContactSubmission()).field == "name"


class TestPurity:
    """Validation is deterministic and does not modify its input."""

    def test_same_input_same_result(self, submission_data):
        submission = make_submission(submission_data, phone="123456")

        assert validate_submission(submission) == validate_submission(submission)

    def test_input_is_unchanged(self, submission_data):
        submission = make_submission(submission_data, name="  Ada Lovelace  ")
        before = submission.model_dump()

        validate_submission(submission)

        assert submission.model_dump() == before
