"""
Mail Delivery Models
Pydantic models for outbound messages and transport results.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OutboundMessage(BaseModel):
    """A fully rendered email, built fresh for each send and never mutated."""

    model_config = ConfigDict(frozen=True)

    from_address: str
    to_address: str
    subject: str
    html_body: str
    text_body: Optional[str] = None
    reply_to: Optional[str] = None


class SendReceipt(BaseModel):
    """Result of a successful send."""

    message_id: str
    # Only the test transport exposes an inspectable preview
    preview_url: Optional[str] = None
    sent_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RecordedMessage(BaseModel):
    """A message captured by the in-memory test transport."""

    message_id: str
    message: OutboundMessage
    sent_at: datetime
