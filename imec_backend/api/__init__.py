"""
IMEC Backend API Routers
"""
from imec_backend.api import contact, dev, health, info

__all__ = [
    "contact",
    "dev",
    "health",
    "info",
]
