"""Event registry.

Only one event may be active at a time: activating one deactivates every
other event inside the same commit. Callers that act on "the current event"
resolve it explicitly through ``resolve_event`` and pass the id on.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from app.core.settings import settings
from app.exceptions import ConflictException, NotFoundException
from app.models.assignment import Assignment
from app.models.event import Event
from app.models.participant import Participant
from app.schemas.event import EventCreate, EventPatch, EventUpdate
from app.services import audit
from app.utils.datetime import days_from_now, to_naive_utc, utc_now

logger = logging.getLogger("app.events")


def _deactivate_others(db: Session, keep_event_id: Optional[str] = None) -> int:
    q = db.query(Event).filter(Event.is_active.is_(True))
    if keep_event_id:
        q = q.filter(Event.id != keep_event_id)
    return q.update({Event.is_active: False}, synchronize_session="fetch")


def _with_participants(q):
    return q.options(
        selectinload(Event.participants).selectinload(Participant.user),
        selectinload(Event.participants).selectinload(Participant.school_class),
    )


def list_events(db: Session, include_inactive: bool) -> list[Event]:
    q = _with_participants(db.query(Event))
    if not include_inactive:
        q = q.filter(Event.is_active.is_(True))
    return q.order_by(Event.created_at.desc()).all()


def get_event(db: Session, event_id: str, include_inactive: bool = True) -> Event:
    event = _with_participants(db.query(Event)).filter(Event.id == event_id).first()
    if not event or (not include_inactive and not event.is_active):
        raise NotFoundException("Event not found")
    return event


def get_active_event(db: Session) -> Optional[Event]:
    return (db.query(Event)
            .filter(Event.is_active.is_(True))
            .order_by(Event.created_at.desc())
            .first())


def create_event(db: Session, data: EventCreate, actor_id: Optional[str] = None) -> Event:
    now = utc_now()
    if data.is_active:
        deactivated = _deactivate_others(db)
        if deactivated:
            logger.info(f"Deactivated {deactivated} event(s) before creating an active one")
    event = Event(
        name=data.name,
        description=data.description,
        registration_deadline=to_naive_utc(data.registration_deadline or now),
        assignment_date=to_naive_utc(data.assignment_date or now),
        gift_deadline=to_naive_utc(data.gift_deadline or now),
        delivery_date=to_naive_utc(data.delivery_date or now),
        is_active=data.is_active,
        is_registration_open=True,
        are_assignments_created=False,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    audit.log_event_change("create", event.id, user_id=actor_id, is_active=event.is_active)
    return event


def update_event(db: Session, event_id: str, data: EventUpdate, actor_id: Optional[str] = None) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundException("Event not found")

    if data.is_active and not event.is_active:
        _deactivate_others(db, keep_event_id=event.id)

    event.name = data.name
    event.description = data.description
    for field in ("registration_deadline", "assignment_date", "gift_deadline", "delivery_date"):
        value = getattr(data, field)
        if value is not None:
            setattr(event, field, to_naive_utc(value))
    if data.is_active is not None:
        event.is_active = data.is_active
    if data.is_registration_open is not None:
        event.is_registration_open = data.is_registration_open

    db.commit()
    db.refresh(event)
    audit.log_event_change("update", event.id, user_id=actor_id, is_active=event.is_active)
    return event


def patch_event(db: Session, event_id: str, data: EventPatch, actor_id: Optional[str] = None) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundException("Event not found")

    if data.are_assignments_created is False and event.are_assignments_created:
        raise ConflictException("Assignments were already created for this event and cannot be reset")

    if data.is_active and not event.is_active:
        _deactivate_others(db, keep_event_id=event.id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for k, v in changes.items():
        setattr(event, k, v)

    db.commit()
    db.refresh(event)
    audit.log_event_change("patch", event.id, user_id=actor_id, **changes)
    return event


def delete_event(db: Session, event_id: str, actor_id: Optional[str] = None) -> None:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundException("Event not found")

    if db.query(Participant).filter(Participant.event_id == event_id).count() > 0:
        raise ConflictException(
            "Cannot delete event with existing participants. Please remove all participants first."
        )
    if db.query(Assignment).filter(Assignment.event_id == event_id).count() > 0:
        raise ConflictException(
            "Cannot delete event with existing assignments. Please remove all assignments first."
        )

    db.delete(event)
    db.commit()
    audit.log_event_change("delete", event_id, user_id=actor_id)


def create_default_event(db: Session) -> Event:
    now = utc_now()
    event = Event(
        name=f"{settings.default_event_name} {now.year}",
        description=settings.default_event_description,
        registration_deadline=to_naive_utc(days_from_now(30, now)),
        assignment_date=to_naive_utc(days_from_now(35, now)),
        gift_deadline=to_naive_utc(days_from_now(60, now)),
        delivery_date=to_naive_utc(days_from_now(65, now)),
        is_active=True,
        is_registration_open=True,
        are_assignments_created=False,
    )
    _deactivate_others(db)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info(f"Bootstrapped default event {event.id} ({event.name})")
    audit.log_event_change("bootstrap", event.id)
    return event


def resolve_event(db: Session, event_id: Optional[str] = None, create_default: bool = False) -> Optional[Event]:
    """Return the event an operation should act on.

    An explicit id always wins (404 if unknown). Without one the active event is
    used; ``create_default`` bootstraps one when none exists.
    """
    if event_id:
        event = db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise NotFoundException("Event not found")
        return event
    event = get_active_event(db)
    if event is None and create_default:
        event = create_default_event(db)
    return event
