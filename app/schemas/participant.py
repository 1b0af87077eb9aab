from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime

from app.schemas.common import ParticipantBrief
from app.schemas.event import EventOut
from app.schemas.present import PresentOut


def _required_class(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError('Class is required')
    return v


def _clean_interests(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return v.strip() or None


class RegistrationIn(BaseModel):
    class_id: str
    interests: Optional[str] = None
    event_id: Optional[str] = None

    @field_validator('class_id')
    def class_not_blank(cls, v: str):
        return _required_class(v)

    @field_validator('interests')
    def strip_interests(cls, v: Optional[str]):
        return _clean_interests(v)


class AdminParticipantIn(RegistrationIn):
    user_id: str


class ParticipantOut(ParticipantBrief):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GivingAssignment(BaseModel):
    id: str
    receiver: ParticipantBrief

    model_config = {'from_attributes': True}


class ParticipantRow(ParticipantOut):
    giving_assignment: Optional[GivingAssignment] = None
    present_given: Optional[PresentOut] = None


class ParticipantPageOut(BaseModel):
    results: List[ParticipantRow]
    total: int
    page: int
    limit: int
    pages: int
    event: Optional[EventOut] = None
    message: Optional[str] = None


class RegistrationOut(BaseModel):
    success: bool = True
    message: str
    created: bool
    data: ParticipantOut
