from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.event import (
    EventCreate,
    EventDetailOut,
    EventListOut,
    EventMutationOut,
    EventPatch,
    EventUpdate,
)
from app.services import events as event_service
from app.services.auth import get_current_user, require_admin

router = APIRouter(prefix="/api/events", tags=["Events"])


@router.get("", response_model=EventListOut)
def list_events(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    events = event_service.list_events(db, include_inactive=current_user.is_admin)
    return {"events": events, "total": len(events)}


@router.post("", response_model=EventMutationOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    event = event_service.create_event(db, payload, actor_id=admin.id)
    return {"success": True, "message": "Event created successfully", "event": event}


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(
    event_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    event = event_service.get_event(db, event_id, include_inactive=current_user.is_admin)
    return {"event": event}


@router.put("/{event_id}", response_model=EventMutationOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    event = event_service.update_event(db, event_id, payload, actor_id=admin.id)
    return {"success": True, "message": "Event updated successfully", "event": event}


@router.patch("/{event_id}", response_model=EventMutationOut)
def patch_event(
    event_id: str,
    payload: EventPatch,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    event = event_service.patch_event(db, event_id, payload, actor_id=admin.id)
    return {"success": True, "message": "Event updated successfully", "event": event}


@router.delete("/{event_id}", response_model=EventMutationOut)
def delete_event(
    event_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    event_service.delete_event(db, event_id, actor_id=admin.id)
    return {"success": True, "message": "Event deleted successfully"}
