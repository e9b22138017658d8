"""
User model for authentication and contact lookup.
"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.database import Base


class User(Base):
    """User model; name and email are both unique."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    emergency_contacts = relationship(
        "EmergencyContact",
        foreign_keys="EmergencyContact.owner_id",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    panic_events = relationship(
        "PanicEvent",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}')>"
