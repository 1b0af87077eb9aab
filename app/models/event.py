from sqlalchemy import Column, String, Text, Boolean, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import uuid

from app.db import Base


class Event(Base):
    """One Wichtelaktion round.

    At most one event is active at a time. ``are_assignments_created`` is a
    one-way latch set by the assignment engine.
    """
    __tablename__ = "events"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    registration_deadline = Column(DateTime, nullable=False)
    assignment_date = Column(DateTime, nullable=False)
    gift_deadline = Column(DateTime, nullable=False)
    delivery_date = Column(DateTime, nullable=False)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_registration_open = Column(Boolean, nullable=False, default=True)
    are_assignments_created = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    participants = relationship("Participant", back_populates="event", cascade="all, delete-orphan")
    assignments = relationship("Assignment", back_populates="event", cascade="all, delete-orphan")

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def assignment_count(self) -> int:
        return len(self.assignments)
