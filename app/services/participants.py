from __future__ import annotations

import logging
import math
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.exceptions import ConflictException, NotFoundException, ValidationException
from app.models.assignment import Assignment
from app.models.event import Event
from app.models.participant import Participant, ParticipantStatus
from app.models.school_class import SchoolClass
from app.models.user import User
from app.services import audit
from app.services.events import resolve_event
from app.utils.datetime import ensure_aware_utc, utc_now

logger = logging.getLogger("app.participants")


def registration_closed_reason(event: Event) -> Optional[str]:
    if event.are_assignments_created:
        return "Assignments have already been created for this event"
    if not event.is_registration_open:
        return "Registration is closed for this event"
    if utc_now() >= ensure_aware_utc(event.registration_deadline):
        return "The registration deadline for this event has passed"
    return None


def register_participant(
    db: Session,
    user: User,
    class_id: str,
    interests: Optional[str] = None,
    event_id: Optional[str] = None,
) -> tuple[Participant, bool]:
    """Create or update ``user``'s participation. Returns (participant, created)."""
    school_class = db.query(SchoolClass).filter(SchoolClass.id == class_id).first()
    if not school_class:
        raise ValidationException("Invalid class selected")

    event = resolve_event(db, event_id, create_default=True)
    reason = registration_closed_reason(event)
    if reason:
        raise ConflictException(reason)

    # Hold the event row until commit; an assignment run latches the same row.
    event = (db.query(Event)
             .filter(Event.id == event.id)
             .populate_existing()
             .with_for_update()
             .one())
    reason = registration_closed_reason(event)
    if reason:
        db.rollback()
        raise ConflictException(reason)

    participant =(db.query(Participant)
                   .filter(Participant.user_id == user.id, Participant.event_id == event.id)
                   .first())
    created = participant is None
    if created:
        participant = Participant(
            user_id=user.id,
            event_id=event.id,
            status=ParticipantStatus.REGISTERED,
        )
        db.add(participant)
    participant.class_id = school_class.id
    participant.interests = interests

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictException("A registration for this event is already being processed, please retry")
    db.refresh(participant)
    logger.info(f"{'Registered' if created else 'Updated registration of'} user {user.id} for event {event.id}")
    audit.log_registration(participant.id, event.id, created, user_id=user.id)
    return participant, created


def register_user_by_id(
    db: Session,
    user_id: str,
    class_id: str,
    interests: Optional[str] = None,
    event_id: Optional[str] = None,
) -> tuple[Participant, bool]:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundException("User not found")
    return register_participant(db, user, class_id, interests, event_id)


def list_participants(db: Session, event_id: str, page: int, limit: int) -> dict:
    page = max(page, 1)
    q = db.query(Participant).filter(Participant.event_id == event_id)
    total = q.count()
    results = (q.options(
                    selectinload(Participant.user),
                    selectinload(Participant.school_class),
                    selectinload(Participant.giving_assignment)
                        .selectinload(Assignment.receiver)
                        .selectinload(Participant.user),
                    selectinload(Participant.present_given),
                )
                .order_by(Participant.created_at.desc(), Participant.id)
                .offset((page - 1) * limit)
                .limit(limit)
                .all())
    return {
        "results": results,
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def get_participant_for_user(db: Session, user_id: str, event_id: str) -> Optional[Participant]:
    return (db.query(Participant)
            .filter(Participant.user_id == user_id, Participant.event_id == event_id)
            .first())
