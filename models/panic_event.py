"""
PanicEvent model: one recorded button press.
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from core.database import Base


class PanicEvent(Base):
    __tablename__ = "panic_events"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    cause = Column(Text, nullable=True)

    owner = relationship("User", back_populates="panic_events")

    def __repr__(self):
        return f"<PanicEvent(id={self.id}, owner_id={self.owner_id})>"
