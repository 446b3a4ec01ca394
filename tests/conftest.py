"""
IMEC Backend Test Configuration and Fixtures
Shared pytest fixtures for all test modules.
"""
from typing import Any, AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from imec_backend.core.config import Settings
from imec_backend.core.exceptions import TransportError
from imec_backend.delivery.models import OutboundMessage, SendReceipt
from imec_backend.delivery.transports import InMemoryTestTransport, MailTransport
from imec_backend.main import create_app
from imec_backend.schemas.contact import ContactSubmission


# =============================================================================
# Transport Fakes
# =============================================================================


class StubTransport(MailTransport):
    """Records sends and fails the calls whose index is listed in ``fail_on``."""

    mode = "smtp"

    def __init__(self, fail_on: tuple[int, ...] = (), phase: str = "send", verify_error: Optional[Exception] = None):
        self.fail_on = set(fail_on)
        self.phase = phase
        self.verify_error = verify_error
        self.calls: list[OutboundMessage] = []
        self.closed = False

    async def send(self, message: OutboundMessage) -> SendReceipt:
        index = len(self.calls)
        self.calls.append(message)
        if index in self.fail_on:
            raise TransportError(self.phase, ConnectionRefusedError("smtp.example.com:465 refused, user=admin"))
        return SendReceipt(message_id=f"<stub-{index}@example.com>")

    async def verify(self) -> None:
        if self.verify_error is not None:
            raise self.verify_error

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# Settings & Data Fixtures
# =============================================================================


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    values: dict[str, Any] = {
        "environment": "test",
        "mail_transport": "test",
        "smtp_user": "mailer@imec-school.com",
        "smtp_pass": "secret-password",
        "to_email": "admin@imec-school.com",
        "backend_url": "http://testserver",
        "rate_limit_enabled": False,
        "sentry_dsn": None,
        "redis_url": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def submission_data() -> dict[str, Any]:
    """A fully valid contact form payload."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+14155550123",
        "interest": "Group Lessons",
        "message": "Please call me back",
        "language": "en",
    }


@pytest.fixture
def submission(submission_data) -> ContactSubmission:
    return ContactSubmission(**submission_data)


@pytest.fixture
def stub_transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def test_transport() -> InMemoryTestTransport:
    return InMemoryTestTransport(preview_base_url="http://testserver")


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def app(settings, test_transport):
    """Application with the lifespan (transport init) already run."""
    application = create_app(settings=settings, transport=test_transport)
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
