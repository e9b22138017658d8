"""
SQLAlchemy ORM models for Panic Relay Backend.
"""

from .user import User
from .emergency import EmergencyContact
from .panic_event import PanicEvent

__all__ = [
    "User",
    "EmergencyContact",
    "PanicEvent",
]
