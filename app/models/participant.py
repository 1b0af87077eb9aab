from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import enum
import uuid

from app.db import Base


class ParticipantStatus(enum.Enum):
    REGISTERED = "REGISTERED"
    ASSIGNED = "ASSIGNED"
    GIFT_SUBMITTED = "GIFT_SUBMITTED"
    GIFT_DELIVERED = "GIFT_DELIVERED"


# Lifecycle order; a participant's status only ever moves to a later entry.
PARTICIPANT_STATUS_ORDER = [
    ParticipantStatus.REGISTERED,
    ParticipantStatus.ASSIGNED,
    ParticipantStatus.GIFT_SUBMITTED,
    ParticipantStatus.GIFT_DELIVERED,
]


class Participant(Base):
    __tablename__ = "participants"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    class_id = Column(String, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    interests = Column(Text, nullable=True)
    status = Column(Enum(ParticipantStatus), nullable=False, default=ParticipantStatus.REGISTERED)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    user = relationship("User", back_populates="participations")
    event = relationship("Event", back_populates="participants")
    school_class = relationship("SchoolClass", back_populates="participants")

    giving_assignment = relationship(
        "Assignment", foreign_keys="Assignment.giver_id", back_populates="giver", uselist=False
    )
    receiving_assignment = relationship(
        "Assignment", foreign_keys="Assignment.receiver_id", back_populates="receiver", uselist=False
    )
    present_given = relationship(
        "Present", foreign_keys="Present.giver_id", back_populates="giver", uselist=False
    )
    present_received = relationship(
        "Present", foreign_keys="Present.receiver_id", back_populates="receiver", uselist=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_participants_user_event"),
    )

    def advance_status(self, new_status: ParticipantStatus) -> bool:
        """Move to ``new_status`` unless that would go backwards. Returns True if changed."""
        if PARTICIPANT_STATUS_ORDER.index(new_status) <= PARTICIPANT_STATUS_ORDER.index(self.status):
            return False
        self.status = new_status
        return True
