"""
Tests for email rendering.
"""
import pytest

from imec_backend.schemas.contact import ContactSubmission
from imec_backend.services.templates import (
    AUTO_REPLY_COPY,
    NO_MESSAGE_PLACEHOLDER,
    Language,
    render_auto_reply,
    render_notification,
    select_language,
)


class TestSelectLanguage:
    """Exact match on az/ru, English otherwise."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("az", Language.AZ),
            ("ru", Language.RU),
            ("en", Language.EN),
            (None, Language.EN),
            ("", Language.EN),
            ("RU", Language.EN),
            (" ru", Language.EN),
            ("de", Language.EN),
        ],
    )
    def test_selection(self, value, expected):
        assert select_language(value) is expected


class TestNotification:
    """Administrator notification content."""

    def test_subject_contains_name(self, submission):
        rendered = render_notification(submission)

        assert rendered.subject == "New Contact Form - Ada Lovelace"

    def test_html_lists_all_fields(self, submission):
        html = render_notification(submission).html

        for value in ("Ada Lovelace", "ada@example.com", "+14155550123", "Group Lessons", "Please call me back"):
            assert value in html

    def test_text_body_mirrors_fields(self, submission):
        text = render_notification(submission).text

        assert "Name: Ada Lovelace" in text
        assert "Email: ada@example.com" in text
        assert "Phone: +14155550123" in text
        assert "Interest: Group Lessons" in text
        assert "Please call me back" in text

    @pytest.mark.parametrize("name", ["Ada\nLovelace", "Ada\r\nLovelace", "Ada \t Lovelace"])
    def test_subject_is_single_line(self, submission_data, name):
        submission = ContactSubmission(**{**submission_data, "name": name})

        rendered = render_notification(submission)

        assert rendered.subject == "New Contact Form - Ada Lovelace"

    def test_newlines_become_line_breaks(self, submission_data):
        submission = ContactSubmission(**{**submission_data, "message": "line one\nline two\r\nline three"})

        html = render_notification(submission).html

        assert "line one<br>line two<br>line three" in html

    @pytest.mark.parametrize("message", [None, "", "   "])
    def test_missing_message_uses_placeholder(self, submission_data, message):
        submission = ContactSubmission(**{**submission_data, "message": message})

        rendered = render_notification(submission)

        assert NO_MESSAGE_PLACEHOLDER in rendered.html
        assert NO_MESSAGE_PLACEHOLDER in rendered.text

    def test_user_input_is_escaped(self, submission_data):
        submission = ContactSubmission(
            **{**submission_data, "name": "<script>alert(1)</script>", "message": "<b>hi</b>"}
        )

        html = render_notification(submission).html

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;hi&lt;/b&gt;" in html


class TestAutoReply:
    """Localized auto-reply content."""

    def test_english_subject(self, submission):
        rendered = render_auto_reply(submission, Language.EN)

        assert rendered.subject == "Thank you for contacting IMEC!"

    @pytest.mark.parametrize("language", list(Language))
    def test_language_marker(self, submission, language):
        rendered = render_auto_reply(submission, language)

        assert rendered.html.startswith(f'<div data-lang="{language.value}"')
        assert rendered.subject == AUTO_REPLY_COPY[language].subject

    @pytest.mark.parametrize("language", list(Language))
    def test_greets_by_name_and_restates_interest(self, submission, language):
        rendered = render_auto_reply(submission, language)

        assert "Ada Lovelace" in rendered.html
        assert "Group Lessons" in rendered.html
        assert "Ada Lovelace" in rendered.text
        assert "Group Lessons" in rendered.text

    @pytest.mark.parametrize("language", list(Language))
    def test_static_details_present(self, submission, language):
        rendered = render_auto_reply(submission, language)

        for label, value in AUTO_REPLY_COPY[language].details:
            assert label in rendered.html
            assert value in rendered.text

    def test_details_do_not_depend_on_submission(self, submission_data):
        first = ContactSubmission(**submission_data)
        second = ContactSubmission(**{**submission_data, "name": "Grace Hopper", "interest": "IELTS"})

        first_html = render_auto_reply(first, Language.RU).html
        second_html = render_auto_reply(second, Language.RU).html

        table = first_html[first_html.index("<table") : first_html.index("</table>")]
        assert table in second_html

    def test_name_is_escaped(self, submission_data):
        submission = ContactSubmission(**{**submission_data, "name": "Ada <img src=x>"})

        html = render_auto_reply(submission, Language.EN).html

        assert "<img" not in html
        assert "Ada &lt;img src=x&gt;" in html

    def test_text_signature_has_no_markup(self, submission):
        text = render_auto_reply(submission, Language.AZ).text

        assert "<br>" not in text
        assert "IMEC komandası" in text
