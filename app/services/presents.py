"""Present tracker.

NOT_SUBMITTED -> SUBMITTED -> DELIVERED, forwards only. Handing a present in
moves the giver to GIFT_SUBMITTED, handing it out moves the receiver to
GIFT_DELIVERED; present and participant change in the same commit.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from app.exceptions import ConflictException, NotFoundException, ValidationException
from app.models.participant import Participant, ParticipantStatus
from app.models.present import Present, PresentStatus
from app.services import audit
from app.utils.datetime import utc_now

logger = logging.getLogger("app.presents")


def _load_options():
    return (
        selectinload(Present.giver).selectinload(Participant.user),
        selectinload(Present.giver).selectinload(Participant.school_class),
        selectinload(Present.receiver).selectinload(Participant.user),
        selectinload(Present.receiver).selectinload(Participant.school_class),
    )


def _present_by_giver(db: Session, giver_participant_id: str) -> Present:
    present = (db.query(Present)
               .options(*_load_options())
               .filter(Present.giver_id == giver_participant_id)
               .first())
    if not present:
        raise NotFoundException("Present not found")
    return present


def _present_by_id(db: Session, present_id: str) -> Present:
    present = db.query(Present).options(*_load_options()).filter(Present.id == present_id).first()
    if not present:
        raise NotFoundException("Present not found")
    return present


def _submit(present: Present, description: Optional[str]) -> None:
    if present.status != PresentStatus.NOT_SUBMITTED:
        raise ConflictException("Present has already been submitted")
    present.status = PresentStatus.SUBMITTED
    present.submitted_at = utc_now()
    if description is not None:
        present.description = description
    present.giver.advance_status(ParticipantStatus.GIFT_SUBMITTED)


def _deliver(present: Present) -> None:
    if present.status != PresentStatus.SUBMITTED:
        raise ValidationException("Present must be submitted before it can be marked as delivered")
    present.status = PresentStatus.DELIVERED
    present.delivered_at = utc_now()
    present.receiver.advance_status(ParticipantStatus.GIFT_DELIVERED)


def _commit(db: Session, present: Present, from_status: PresentStatus, actor_id: Optional[str]) -> Present:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(present)
    audit.log_present_transition(present.id, from_status.value, present.status.value, user_id=actor_id)
    return present


def mark_submitted(
    db: Session,
    giver_participant_id: str,
    description: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> Present:
    present = _present_by_giver(db, giver_participant_id)
    from_status = present.status
    _submit(present, description)
    return _commit(db, present, from_status, actor_id)


def mark_delivered(db: Session, giver_participant_id: str, actor_id: Optional[str] = None) -> Present:
    present = _present_by_giver(db, giver_participant_id)
    from_status = present.status
    _deliver(present)
    return _commit(db, present, from_status, actor_id)


def update_description(db: Session, present_id: str, description: Optional[str]) -> Present:
    present = _present_by_id(db, present_id)
    present.description = description
    db.commit()
    db.refresh(present)
    return present


def set_present_status(
    db: Session,
    present_id: str,
    status: Optional[PresentStatus] = None,
    description: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> Present:
    """Generic update used by PATCH; status changes go through the same transitions."""
    present = _present_by_id(db, present_id)
    from_status = present.status

    if status is not None and status != present.status:
        if status == PresentStatus.SUBMITTED:
            _submit(present, None)
        elif status == PresentStatus.DELIVERED:
            _deliver(present)
        else:
            raise ConflictException(f"Present cannot go back from {present.status.value} to {status.value}")

    if description is not None:
        present.description = description

    return _commit(db, present, from_status, actor_id)


def list_event_presents(db: Session, event_id: str) -> list[Present]:
    return (db.query(Present)
            .join(Participant, Present.giver_id == Participant.id)
            .filter(Participant.event_id == event_id)
            .options(*_load_options())
            .order_by(Present.created_at, Present.id)
            .all())


def present_stats(db: Session, event_id: str, presents: Optional[list[Present]] = None) -> dict:
    if presents is None:
        presents = list_event_presents(db, event_id)
    total_participants = db.query(Participant).filter(Participant.event_id == event_id).count()
    submitted = sum(1 for p in presents if p.status in (PresentStatus.SUBMITTED, PresentStatus.DELIVERED))
    delivered = sum(1 for p in presents if p.status == PresentStatus.DELIVERED)
    return {
        "total_participants": total_participants,
        "submitted_count": submitted,
        "delivered_count": delivered,
        "pending_count": total_participants - submitted,
    }


def get_participant_presents(db: Session, user_id: str, event_id: str) -> Optional[Participant]:
    return (db.query(Participant)
            .filter(Participant.user_id == user_id, Participant.event_id == event_id)
            .options(
                selectinload(Participant.user),
                selectinload(Participant.school_class),
                selectinload(Participant.present_given),
                selectinload(Participant.present_received),
            )
            .first())
