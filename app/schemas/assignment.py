from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from app.schemas.common import ParticipantBrief
from app.schemas.event import EventOut
from app.schemas.present import PresentOut


class AssignmentOut(BaseModel):
    id: str
    event_id: str
    giver_id: str
    receiver_id: str
    created_at: Optional[datetime] = None
    giver: ParticipantBrief
    receiver: ParticipantBrief

    model_config = {'from_attributes': True}


class AssignmentListOut(BaseModel):
    assignments: List[AssignmentOut]
    total: int
    event: Optional[EventOut] = None
    is_admin: bool = True
    message: Optional[str] = None


class OwnAssignmentOut(BaseModel):
    """What a regular participant sees: who they give to, never who gives to them."""
    participant: Optional[ParticipantBrief] = None
    receiver: Optional[ParticipantBrief] = None
    present_given: Optional[PresentOut] = None
    event: Optional[EventOut] = None
    is_admin: bool = False
    message: Optional[str] = None


class AssignmentRunIn(BaseModel):
    event_id: Optional[str] = None


class AssignmentRunOut(BaseModel):
    success: bool = True
    message: str
    event_id: str
    assignment_count: int
