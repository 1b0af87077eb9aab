from typing import Optional, Union

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.user import User
from app.schemas.present import (
    OwnPresentOut,
    PresentActionIn,
    PresentListOut,
    PresentMutationOut,
    PresentPatchIn,
)
from app.services import presents as present_service
from app.services.auth import get_current_user, require_admin
from app.services.events import resolve_event

router = APIRouter(prefix="/api/presents", tags=["Presents"])

_ACTION_MESSAGES = {
    "mark_submitted": "Present marked as submitted",
    "mark_delivered": "Present marked as delivered",
    "update_description": "Present description updated",
}


@router.get("", response_model=Union[PresentListOut, OwnPresentOut])
def get_presents(
    event_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    event = resolve_event(db, event_id)

    if current_user.is_admin:
        if not event:
            return PresentListOut(presents=[], stats={}, message="No active event found")
        presents = present_service.list_event_presents(db, event.id)
        stats = present_service.present_stats(db, event.id, presents)
        return PresentListOut.model_validate(
            {"presents": presents, "stats": stats, "event": event},
            from_attributes=True,
        )

    if not event:
        return OwnPresentOut(message="No active event found")

    participant = present_service.get_participant_presents(db, current_user.id, event.id)
    if not participant:
        return OwnPresentOut.model_validate(
            {"event": event, "message": "You are not registered for this event"},
            from_attributes=True,
        )
    return OwnPresentOut.model_validate(
        {"participant": participant, "event": event},
        from_attributes=True,
    )


@router.post("", response_model=PresentMutationOut)
def present_action(
    payload: PresentActionIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if payload.action == "mark_submitted":
        present = present_service.mark_submitted(
            db, payload.participant_id, payload.description, actor_id=admin.id
        )
        participant = present.giver
    elif payload.action == "mark_delivered":
        present = present_service.mark_delivered(db, payload.participant_id, actor_id=admin.id)
        participant = present.receiver
    else:
        present = present_service.update_description(db, payload.present_id, payload.description)
        participant = None

    return {
        "success": True,
        "message": _ACTION_MESSAGES[payload.action],
        "present": present,
        "participant": participant,
    }


@router.patch("", response_model=PresentMutationOut)
def patch_present(
    payload: PresentPatchIn,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    present = present_service.set_present_status(
        db, payload.present_id, payload.status, payload.description, actor_id=admin.id
    )
    return {"success": True, "message": "Present updated successfully", "present": present}
