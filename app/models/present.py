from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import enum
import uuid

from app.db import Base


class PresentStatus(enum.Enum):
    NOT_SUBMITTED = "NOT_SUBMITTED"
    SUBMITTED = "SUBMITTED"
    DELIVERED = "DELIVERED"


class Present(Base):
    """Gift tracking record; mirrors exactly one assignment."""
    __tablename__ = "presents"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    assignment_id = Column(String, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, unique=True)
    giver_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(PresentStatus), nullable=False, default=PresentStatus.NOT_SUBMITTED)
    description = Column(Text, nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    assignment = relationship("Assignment", back_populates="present")
    giver = relationship("Participant", foreign_keys=[giver_id], back_populates="present_given")
    receiver = relationship("Participant", foreign_keys=[receiver_id], back_populates="present_received")
