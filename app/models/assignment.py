from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import uuid

from app.db import Base


class Assignment(Base):
    """Giver -> receiver pairing inside one event. Written once, in bulk."""
    __tablename__ = "assignments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    giver_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    event = relationship("Event", back_populates="assignments")
    giver = relationship("Participant", foreign_keys=[giver_id], back_populates="giving_assignment")
    receiver = relationship("Participant", foreign_keys=[receiver_id], back_populates="receiving_assignment")
    present = relationship("Present", back_populates="assignment", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("event_id", "giver_id", name="uq_assignments_event_giver"),
        UniqueConstraint("event_id", "receiver_id", name="uq_assignments_event_receiver"),
        CheckConstraint("giver_id <> receiver_id", name="ck_assignments_no_self_gift"),
    )
