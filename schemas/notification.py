"""
Realtime notification payloads.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EmergencyContactInfo(BaseModel):
    email: str
    phone: str


class Notification(BaseModel):
    """Message pushed to a contact's live connection; never stored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str = "panic_attack"
    message: str
    timestamp: datetime
    owner_id: int
    location: str
    coordinates: Optional[Any] = None
    emergency_contact: EmergencyContactInfo = Field(..., description="Static help-line record")
