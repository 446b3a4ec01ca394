"""
Preview endpoints for messages recorded by the in-memory test transport.

Only useful when MAIL_TRANSPORT=test; with the SMTP transport every lookup
returns 404.
"""
from fastapi import APIRouter

from imec_backend.api.deps import Transport
from imec_backend.core.exceptions import NotFoundError
from imec_backend.delivery.models import RecordedMessage
from imec_backend.delivery.transports import InMemoryTestTransport

router = APIRouter(prefix="/dev/messages", tags=["Development"], include_in_schema=False)


def _require_test_transport(transport) -> InMemoryTestTransport:
    if not isinstance(transport, InMemoryTestTransport):
        raise NotFoundError("Message previews")
    return transport


@router.get("", response_model=list[RecordedMessage])
async def list_messages(transport: Transport) -> list[RecordedMessage]:
    """Messages recorded since startup, oldest first."""
    return _require_test_transport(transport).records


@router.get("/{message_id}", response_model=RecordedMessage)
async def get_message(message_id: str, transport: Transport) -> RecordedMessage:
    """Preview of one recorded message."""
    record = _require_test_transport(transport).get(message_id)
    if record is None:
        raise NotFoundError("Message", message_id)
    return record
