"""
FastAPI Dependencies
Access to the settings, mail transport and submission handler created at startup.
"""
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from imec_backend.core.config import Settings
from imec_backend.delivery.transports import MailTransport
from imec_backend.services.contact import ContactSubmissionHandler


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mail_transport(request: Request) -> MailTransport:
    """The transport installed by the lifespan handler."""
    transport = getattr(request.app.state, "mail_transport", None)
    if transport is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Mail transport is not ready",
        )
    return transport


def get_contact_handler(
    transport: Annotated[MailTransport, Depends(get_mail_transport)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ContactSubmissionHandler:
    return ContactSubmissionHandler(transport=transport, settings=settings)


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Transport = Annotated[MailTransport, Depends(get_mail_transport)]
ContactHandler = Annotated[ContactSubmissionHandler, Depends(get_contact_handler)]
