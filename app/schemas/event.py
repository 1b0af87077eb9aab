from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from app.schemas.common import ParticipantBrief


def _required_name(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError('Event name is required')
    return v


def _optional_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return v.strip() or None


class EventCreate(BaseModel):
    name: str = Field(..., max_length=200)
    description: Optional[str] = None
    registration_deadline: Optional[datetime] = None
    assignment_date: Optional[datetime] = None
    gift_deadline: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    is_active: bool = True

    @field_validator('name')
    def name_not_blank(cls, v: str):
        return _required_name(v)

    @field_validator('description')
    def strip_description(cls, v: Optional[str]):
        return _optional_text(v)


class EventUpdate(BaseModel):
    """Full update. Omitted milestones and flags keep their stored value."""
    name: str = Field(..., max_length=200)
    description: Optional[str] = None
    registration_deadline: Optional[datetime] = None
    assignment_date: Optional[datetime] = None
    gift_deadline: Optional[datetime] = None
    delivery_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    is_registration_open: Optional[bool] = None

    @field_validator('name')
    def name_not_blank(cls, v: str):
        return _required_name(v)

    @field_validator('description')
    def strip_description(cls, v: Optional[str]):
        return _optional_text(v)


class EventPatch(BaseModel):
    is_active: Optional[bool] = None
    are_assignments_created: Optional[bool] = None
    is_registration_open: Optional[bool] = None


class EventOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    registration_deadline: datetime
    assignment_date: datetime
    gift_deadline: datetime
    delivery_date: datetime
    is_active: bool
    is_registration_open: bool
    are_assignments_created: bool
    participant_count: int = 0
    assignment_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        'from_attributes': True
    }


class EventDetail(EventOut):
    participants: List[ParticipantBrief] = []


class EventListOut(BaseModel):
    events: List[EventDetail]
    total: int


class EventDetailOut(BaseModel):
    event: EventDetail


class EventMutationOut(BaseModel):
    success: bool = True
    message: str
    event: Optional[EventOut] = None
