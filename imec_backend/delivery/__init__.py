"""
IMEC Mail Delivery
Outbound message models and the SMTP / in-memory transports.
"""
from imec_backend.delivery.models import OutboundMessage, RecordedMessage, SendReceipt
from imec_backend.delivery.transports import (
    InMemoryTestTransport,
    MailTransport,
    SMTPTransport,
    SMTPTransportConfig,
    TestTransportConfig,
    TransportConfig,
    build_transport_config,
    create_transport,
)

__all__ = [
    # Models
    "OutboundMessage",
    "RecordedMessage",
    "SendReceipt",
    # Transports
    "InMemoryTestTransport",
    "MailTransport",
    "SMTPTransport",
    "SMTPTransportConfig",
    "TestTransportConfig",
    "TransportConfig",
    "build_transport_config",
    "create_transport",
]
