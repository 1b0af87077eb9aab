"""Assignment engine: who gives a present to whom.

The pairing is one random cycle over the event's participants: shuffle them,
then everybody gives to the next person in the shuffled order and the last
one gives to the first. For n >= 2 this is a derangement (nobody draws
themselves) where every participant gives exactly once and receives exactly
once, built in O(n) without retries. It does not sample uniformly over all
derangements; only single n-cycles are produced.

Generation runs at most once per event. The write phase starts with a
conditional update of ``events.are_assignments_created`` (false -> true); a
concurrent second run matches zero rows there and is rejected. Assignments,
presents, participant status and the latch are committed together or not at
all.
"""
from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from sqlalchemy.orm import Session, selectinload

from app.exceptions import ConflictException, NotFoundException
from app.models.assignment import Assignment
from app.models.event import Event
from app.models.participant import Participant, ParticipantStatus
from app.models.present import Present, PresentStatus
from app.services import audit
from app.utils.datetime import utc_now

logger = logging.getLogger("app.assignments")

_system_rng = random.SystemRandom()


class AssignmentError(ConflictException):
    pass


def build_gift_cycle(
    participant_ids: Sequence[str],
    rng: Optional[random.Random] = None,
) -> list[tuple[str, str]]:
    """Return (giver_id, receiver_id) pairs forming one cycle over all ids."""
    if len(participant_ids) < 2:
        raise AssignmentError("Need at least 2 participants to create assignments")
    if len(set(participant_ids)) != len(participant_ids):
        raise AssignmentError("Participant ids must be unique")

    order = list(participant_ids)
    (rng or _system_rng).shuffle(order)
    n = len(order)
    return [(order[i], order[(i + 1) % n]) for i in range(n)]


def _event_participants(db: Session, event_id: str) -> list[Participant]:
    return (db.query(Participant)
            .filter(Participant.event_id == event_id)
            .order_by(Participant.created_at, Participant.id)
            .all())


def _check_preconditions(db: Session, event_id: str) -> None:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundException("Event not found")
    if event.are_assignments_created:
        raise AssignmentError("Assignments already created for this event")
    if db.query(Participant).filter(Participant.event_id == event_id).count() < 2:
        raise AssignmentError("Need at least 2 participants to create assignments")


def create_assignments(
    db: Session,
    event_id: str,
    rng: Optional[random.Random] = None,
    actor_id: Optional[str] = None,
) -> int:
    """Generate and persist the gift cycle for ``event_id``. Returns the number of assignments."""
    _check_preconditions(db, event_id)

    try:
        latched = (db.query(Event)
                   .filter(Event.id == event_id, Event.are_assignments_created.is_(False))
                   .update({Event.are_assignments_created: True}, synchronize_session=False))
        if latched != 1:
            raise AssignmentError("Assignments already created for this event")

        participants = _event_participants(db, event_id)
        pairs = build_gift_cycle([p.id for p in participants], rng)

        assignments = []
        for giver_id, receiver_id in pairs:
            assignment = Assignment(event_id=event_id, giver_id=giver_id, receiver_id=receiver_id)
            assignment.present = Present(
                giver_id=giver_id,
                receiver_id=receiver_id,
                status=PresentStatus.NOT_SUBMITTED,
            )
            assignments.append(assignment)
        db.add_all(assignments)
        db.flush()

        (db.query(Participant)
           .filter(Participant.event_id == event_id,
                   Participant.status == ParticipantStatus.REGISTERED)
           .update({Participant.status: ParticipantStatus.ASSIGNED,
                    Participant.updated_at: utc_now()},
                   synchronize_session=False))

        db.commit()
    except Exception:
        db.rollback()
        logger.warning(f"Assignment generation for event {event_id} rolled back", exc_info=True)
        raise

    logger.info(f"Created {len(pairs)} assignments for event {event_id}")
    audit.log_assignments_created(event_id, len(pairs), user_id=actor_id)
    return len(pairs)


def _participant_display():
    return (selectinload(Participant.user), selectinload(Participant.school_class))


def list_event_assignments(db: Session, event_id: str) -> list[Assignment]:
    return (db.query(Assignment)
            .filter(Assignment.event_id == event_id)
            .options(
                selectinload(Assignment.giver).selectinload(Participant.user),
                selectinload(Assignment.giver).selectinload(Participant.school_class),
                selectinload(Assignment.receiver).selectinload(Participant.user),
                selectinload(Assignment.receiver).selectinload(Participant.school_class),
            )
            .order_by(Assignment.created_at, Assignment.id)
            .all())


def get_participant_assignment(db: Session, user_id: str, event_id: str) -> Optional[Participant]:
    """The caller's participant row with its outgoing assignment and present loaded."""
    return (db.query(Participant)
            .filter(Participant.user_id == user_id, Participant.event_id == event_id)
            .options(
                *_participant_display(),
                selectinload(Participant.giving_assignment)
                    .selectinload(Assignment.receiver)
                    .selectinload(Participant.user),
                selectinload(Participant.giving_assignment)
                    .selectinload(Assignment.receiver)
                    .selectinload(Participant.school_class),
                selectinload(Participant.present_given),
            )
            .first())
