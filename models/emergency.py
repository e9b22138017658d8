"""
EmergencyContact model: a directed owner -> contact link between two users.
"""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.database import Base


class EmergencyContact(Base):
    """Owner listed contact as someone to alert."""

    __tablename__ = "emergency_contacts"
    __table_args__ = (
        UniqueConstraint("owner_id", "contact_id", name="uq_emergency_contacts_owner_contact"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    contact_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User", foreign_keys=[owner_id], back_populates="emergency_contacts")
    contact = relationship("User", foreign_keys=[contact_id])

    def __repr__(self):
        return f"<EmergencyContact(owner_id={self.owner_id}, contact_id={self.contact_id})>"
