"""
IMEC Mail Transports
SMTP delivery for production and an in-memory transport for development/tests.
"""
import asyncio
import smtplib
import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Literal, Optional, Union
from uuid import uuid4

import structlog

from imec_backend.core.config import Settings
from imec_backend.core.exceptions import ConfigurationError, TransportError
from imec_backend.delivery.models import OutboundMessage, RecordedMessage, SendReceipt


logger = structlog.get_logger(__name__)

TransportMode = Literal["smtp", "test"]


# =============================================================================
# Transport Configuration
# =============================================================================


@dataclass(frozen=True)
class SMTPTransportConfig:
    """Production transport: a real SMTP server with credentials."""

    host: str
    port: int
    username: str
    password: str = field(repr=False)
    secure: bool = True
    timeout: float = 10.0
    kind: Literal["smtp"] = "smtp"


@dataclass(frozen=True)
class TestTransportConfig:
    """Disposable transport that keeps messages in memory."""

    __test__ = False  # not a pytest test class

    preview_base_url: str = "http://localhost:3000"
    kind: Literal["test"] = "test"


TransportConfig = Union[SMTPTransportConfig, TestTransportConfig]


def build_transport_config(settings: Settings) -> TransportConfig:
    """
    Pick the transport strategy from settings. Called once at startup.

    Raises:
        ConfigurationError: If SMTP is selected without credentials, or the
            test transport is selected in production.
    """
    if settings.mail_transport == "test":
        if settings.is_production:
            raise ConfigurationError("The test mail transport cannot be used in production")
        return TestTransportConfig(preview_base_url=settings.backend_url.rstrip("/"))

    if not (settings.smtp_user and settings.smtp_pass):
        raise ConfigurationError("SMTP credentials not configured (set SMTP_USER and SMTP_PASS)")

    return SMTPTransportConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_pass,
        secure=settings.smtp_secure,
        timeout=settings.smtp_timeout,
    )


# =============================================================================
# Transports
# =============================================================================


class MailTransport(ABC):
    """Sends one email per call. Shared by all requests, holds no request state."""

    mode: TransportMode

    @abstractmethod
    async def send(self, message: OutboundMessage) -> SendReceipt:
        """Send a message or raise TransportError."""

    @abstractmethod
    async def verify(self) -> None:
        """Check that the transport can deliver mail. Raises TransportError."""

    async def close(self) -> None:
        """Release resources held by the transport."""


class SMTPTransport(MailTransport):
    """
    SMTP delivery via smtplib, run in a worker thread.

    Every send opens its own connection, so concurrent requests never share
    a socket. The socket timeout bounds each phase and the whole call is
    bounded by three times that value.
    """

    mode: TransportMode = "smtp"

    def __init__(self, config: SMTPTransportConfig):
        self.config = config
        self.logger = structlog.get_logger().bind(transport="smtp", host=config.host)

    def _connect(self) -> smtplib.SMTP:
        """Open a connection and authenticate."""
        context = ssl.create_default_context()
        conn = None
        try:
            if self.config.secure:
                conn = smtplib.SMTP_SSL(
                    self.config.host, self.config.port, timeout=self.config.timeout, context=context
                )
            else:
                conn = smtplib.SMTP(self.config.host, self.config.port, timeout=self.config.timeout)
                conn.ehlo()
                if conn.has_extn("starttls"):
                    conn.starttls(context=context)
                    conn.ehlo()
        except OSError as e:
            if conn is not None:
                conn.close()
            raise TransportError("connect", e) from e

        try:
            conn.login(self.config.username, self.config.password)
        except OSError as e:
            conn.close()
            raise TransportError("auth", e) from e

        return conn

    def _build_mime(self, message: OutboundMessage) -> EmailMessage:
        mime = EmailMessage()
        mime["From"] = message.from_address
        mime["To"] = message.to_address
        mime["Subject"] = message.subject
        if message.reply_to:
            mime["Reply-To"] = message.reply_to
        mime["Message-ID"] = make_msgid(domain=self.config.host)

        # Plain text first so clients without HTML support get a readable body
        if message.text_body:
            mime.set_content(message.text_body)
            mime.add_alternative(message.html_body, subtype="html")
        else:
            mime.set_content(message.html_body, subtype="html")
        return mime

    def _send_sync(self, message: OutboundMessage) -> SendReceipt:
        """Synchronous send operation for use with asyncio.to_thread."""
        mime = self._build_mime(message)
        conn = self._connect()
        with conn:
            try:
                conn.send_message(mime)
            except OSError as e:
                raise TransportError("send", e) from e
        return SendReceipt(message_id=mime["Message-ID"])

    def _verify_sync(self) -> None:
        conn = self._connect()
        with conn:
            conn.noop()

    async def send(self, message: OutboundMessage) -> SendReceipt:
        try:
            receipt = await asyncio.wait_for(
                asyncio.to_thread(self._send_sync, message),
                timeout=self.config.timeout * 3,
            )
        except TransportError as e:
            self.logger.error("smtp_send_failed", to=message.to_address, phase=e.phase, error=str(e))
            raise
        except (asyncio.TimeoutError, OSError) as e:
            self.logger.error("smtp_send_failed", to=message.to_address, phase="send", error=repr(e))
            raise TransportError("send", e) from e

        self.logger.info("smtp_message_sent", to=message.to_address, message_id=receipt.message_id)
        return receipt

    async def verify(self) -> None:
        try:
            await asyncio.wait_for(asyncio.to_thread(self._verify_sync), timeout=self.config.timeout * 3)
        except TransportError:
            raise
        except (asyncio.TimeoutError, OSError) as e:
            raise TransportError("connect", e) from e
        self.logger.info("smtp_transport_verified", port=self.config.port, secure=self.config.secure)


class InMemoryTestTransport(MailTransport):
    """
    Disposable transport for development and tests.

    Messages are recorded instead of delivered and each receipt carries a
    preview URL served by ``GET /dev/messages/{message_id}``.
    """

    mode: TransportMode = "test"

    def __init__(self, preview_base_url: str = "http://localhost:3000"):
        self.preview_base_url = preview_base_url.rstrip("/")
        self._messages: dict[str, RecordedMessage] = {}

    @property
    def sent(self) -> list[OutboundMessage]:
        """Recorded messages in send order."""
        return [record.message for record in self._messages.values()]

    @property
    def records(self) -> list[RecordedMessage]:
        return list(self._messages.values())

    def get(self, message_id: str) -> Optional[RecordedMessage]:
        return self._messages.get(message_id)

    def preview_url(self, message_id: str) -> str:
        return f"{self.preview_base_url}/dev/messages/{message_id}"

    async def send(self, message: OutboundMessage) -> SendReceipt:
        message_id = uuid4().hex
        sent_at = datetime.now(timezone.utc)
        self._messages[message_id] = RecordedMessage(message_id=message_id, message=message, sent_at=sent_at)
        logger.info("test_message_recorded", to=message.to_address, message_id=message_id)
        return SendReceipt(message_id=message_id, preview_url=self.preview_url(message_id), sent_at=sent_at)

    async def verify(self) -> None:
        return None

    async def close(self) -> None:
        self._messages.clear()


def create_transport(config: TransportConfig) -> MailTransport:
    """Build the transport selected by ``build_transport_config``."""
    if isinstance(config, SMTPTransportConfig):
        return SMTPTransport(config)
    return InMemoryTestTransport(preview_base_url=config.preview_base_url)
