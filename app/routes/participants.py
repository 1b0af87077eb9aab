from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.participant import (
    AdminParticipantIn,
    ParticipantPageOut,
    RegistrationIn,
    RegistrationOut,
)
from app.services import participants as participant_service
from app.services.auth import get_current_user, require_admin
from app.services.events import resolve_event
from app.utils.pagination import PageParams

router = APIRouter(tags=["Participants"])


def _registration_message(created: bool) -> str:
    return "Registration successful" if created else "Registration updated successfully"


@router.get("/api/participants", response_model=ParticipantPageOut)
def list_participants(
    event_id: Optional[str] = Query(None),
    pagination: PageParams = Depends(),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    event = resolve_event(db, event_id)
    if not event:
        return {
            "results": [],
            "total": 0,
            "page": pagination.page,
            "limit": pagination.limit,
            "pages": 0,
            "event": None,
            "message": "No active event found",
        }
    page = participant_service.list_participants(db, event.id, pagination.page, pagination.limit)
    page["event"] = event
    return page


@router.post("/api/participants", response_model=RegistrationOut, status_code=status.HTTP_201_CREATED)
def add_participant(
    payload: AdminParticipantIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    participant, created = participant_service.register_user_by_id(
        db, payload.user_id, payload.class_id, payload.interests, payload.event_id
    )
    return {
        "success": True,
        "message": _registration_message(created),
        "created": created,
        "data": participant,
    }


@router.post("/api/register", response_model=RegistrationOut)
def register(
    payload: RegistrationIn,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    participant, created = participant_service.register_participant(
        db, current_user, payload.class_id, payload.interests, payload.event_id
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return {
        "success": True,
        "message": _registration_message(created),
        "created": created,
        "data": participant,
    }
