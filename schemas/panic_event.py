from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PanicEventCreate(BaseModel):
    cause: Optional[str] = Field(default=None, max_length=2000)


class PanicEventUpdate(BaseModel):
    cause: Optional[str] = Field(..., max_length=2000)


class PanicEventCreated(BaseModel):
    id: int


class PanicEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    timestamp: datetime
    cause: Optional[str] = None


class TriggerPayload(BaseModel):
    """Body of a realtime ``trigger`` message."""

    model_config = ConfigDict(extra="ignore")

    location: Optional[str] = None
    coordinates: Optional[Any] = None
    cause: Optional[str] = Field(default=None, max_length=2000)
