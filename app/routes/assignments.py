from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.exceptions import NotFoundException
from app.models.user import User
from app.schemas.assignment import (
    AssignmentListOut,
    AssignmentRunIn,
    AssignmentRunOut,
    OwnAssignmentOut,
)
from app.services import assignments as assignment_service
from app.services.auth import get_current_user, require_admin
from app.services.events import resolve_event

router = APIRouter(prefix="/api/assignments", tags=["Assignments"])


@router.get("", response_model=Union[AssignmentListOut, OwnAssignmentOut])
def get_assignments(
    event_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    event = resolve_event(db, event_id)

    if current_user.is_admin:
        if not event:
            return AssignmentListOut(assignments=[], total=0, message="No active event found")
        assignments = assignment_service.list_event_assignments(db, event.id)
        return AssignmentListOut.model_validate(
            {"assignments": assignments, "total": len(assignments), "event": event},
            from_attributes=True,
        )

    if not event:
        return OwnAssignmentOut(message="No active event found")

    participant = assignment_service.get_participant_assignment(db, current_user.id, event.id)
    if not participant:
        return OwnAssignmentOut.model_validate(
            {"event": event, "message": "You are not registered for this event"},
            from_attributes=True,
        )

    giving = participant.giving_assignment
    return OwnAssignmentOut.model_validate(
        {
            "participant": participant,
            "receiver": giving.receiver if giving else None,
            "present_given": participant.present_given,
            "event": event,
            "message": None if giving else "Assignments have not been created yet",
        },
        from_attributes=True,
    )


@router.post("", response_model=AssignmentRunOut, status_code=status.HTTP_201_CREATED)
def run_assignments(
    payload: Optional[AssignmentRunIn] = None,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    event = resolve_event(db, payload.event_id if payload else None)
    if not event:
        raise NotFoundException("No active event found")
    count = assignment_service.create_assignments(db, event.id, actor_id=admin.id)
    return {
        "success": True,
        "message": f"Successfully created {count} assignments",
        "event_id": event.id,
        "assignment_count": count,
    }
