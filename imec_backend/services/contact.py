"""
Contact submission handling.

Validates a submission, sends the administrator notification and then the
localized auto-reply through the injected mail transport, and reports a
single outcome per request. Nothing is retried; if the auto-reply fails
after the notification went out, the notification is not undone.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import structlog

from imec_backend.core.config import Settings
from imec_backend.core.exceptions import TransportError
from imec_backend.delivery.models import OutboundMessage, SendReceipt
from imec_backend.delivery.transports import MailTransport
from imec_backend.schemas.contact import ContactSubmission, SubmissionField
from imec_backend.services.templates import render_auto_reply, render_notification, select_language
from imec_backend.services.validation import Rejected, validate_submission


logger = structlog.get_logger(__name__)


# =============================================================================
# Handler Results
# =============================================================================


@dataclass(frozen=True)
class BadRequest:
    field: SubmissionField
    reason: str


@dataclass(frozen=True)
class ServerError:
    cause: TransportError


@dataclass(frozen=True)
class Success:
    admin_preview_url: Optional[str] = None
    auto_reply_preview_url: Optional[str] = None


HandlerResult = Union[BadRequest, ServerError, Success]


# =============================================================================
# Handler
# =============================================================================


class ContactSubmissionHandler:
    """
    Turns one contact form submission into at most two emails.

    The transport is created once at startup and shared; the handler keeps
    no per-request state.
    """

    def __init__(self, transport: MailTransport, settings: Settings):
        self.transport = transport
        self.settings = settings

    @property
    def sender(self) -> str:
        """SMTP_FROM, then the SMTP account, then the fallback address."""
        return self.settings.smtp_from or self.settings.smtp_user or self.settings.fallback_email

    @property
    def admin_recipient(self) -> str:
        """TO_EMAIL, then the SMTP account, then the fallback address."""
        return self.settings.to_email or self.settings.smtp_user or self.settings.fallback_email

    def build_notification(self, submission: ContactSubmission) -> OutboundMessage:
        rendered = render_notification(submission)
        return OutboundMessage(
            from_address=self.sender,
            to_address=self.admin_recipient,
            subject=rendered.subject,
            html_body=rendered.html,
            text_body=rendered.text,
            reply_to=submission.email.strip(),
        )

    def build_auto_reply(self, submission: ContactSubmission) -> OutboundMessage:
        rendered = render_auto_reply(submission, select_language(submission.language))
        return OutboundMessage(
            from_address=self.sender,
            to_address=submission.email.strip(),
            subject=rendered.subject,
            html_body=rendered.html,
            text_body=rendered.text,
        )

    async def _send(self, message: OutboundMessage) -> SendReceipt:
        try:
            return await self.transport.send(message)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError("send", e) from e

    async def handle(self, raw: Union[ContactSubmission, Mapping[str, Any]]) -> HandlerResult:
        """Validate, send the notification, then the auto-reply."""
        submission = raw if isinstance(raw, ContactSubmission) else ContactSubmission.model_validate(raw)

        result = validate_submission(submission)
        if isinstance(result, Rejected):
            logger.info("contact_submission_rejected", field=result.field)
            return BadRequest(field=result.field, reason=result.reason)

        log = logger.bind(submitter=submission.email.strip(), mailer=self.transport.mode)

        try:
            notification = await self._send(self.build_notification(submission))
        except TransportError as e:
            log.error("notification_send_failed", phase=e.phase, error=str(e))
            return ServerError(cause=e)
        log.info("notification_sent", to=self.admin_recipient, message_id=notification.message_id)

        if not self.settings.auto_reply_enabled:
            return Success(admin_preview_url=notification.preview_url)

        try:
            auto_reply = await self._send(self.build_auto_reply(submission))
        except TransportError as e:
            log.error("auto_reply_send_failed", phase=e.phase, error=str(e))
            return ServerError(cause=e)
        log.info("auto_reply_sent", message_id=auto_reply.message_id)

        return Success(
            admin_preview_url=notification.preview_url,
            auto_reply_preview_url=auto_reply.preview_url,
        )
