from pydantic import BaseModel, model_validator
from typing import List, Literal, Optional
from datetime import datetime

from app.models.present import PresentStatus
from app.schemas.common import ParticipantBrief
from app.schemas.event import EventOut


class PresentOut(BaseModel):
    id: str
    assignment_id: str
    giver_id: str
    receiver_id: str
    status: PresentStatus
    description: Optional[str] = None
    submitted_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {'from_attributes': True}


class PresentDetail(PresentOut):
    giver: ParticipantBrief
    receiver: ParticipantBrief


class PresentStatsOut(BaseModel):
    total_participants: int = 0
    submitted_count: int = 0
    delivered_count: int = 0
    pending_count: int = 0


class PresentListOut(BaseModel):
    presents: List[PresentDetail]
    stats: PresentStatsOut
    event: Optional[EventOut] = None
    is_admin: bool = True
    message: Optional[str] = None


class ParticipantPresents(ParticipantBrief):
    present_given: Optional[PresentOut] = None
    present_received: Optional[PresentOut] = None


class OwnPresentOut(BaseModel):
    participant: Optional[ParticipantPresents] = None
    event: Optional[EventOut] = None
    is_admin: bool = False
    message: Optional[str] = None


class PresentActionIn(BaseModel):
    action: Literal["mark_submitted", "mark_delivered", "update_description"]
    participant_id: Optional[str] = None
    present_id: Optional[str] = None
    description: Optional[str] = None

    @model_validator(mode='after')
    def check_target(self):
        if self.action == "update_description":
            if not self.present_id:
                raise ValueError('Present ID required')
        elif not self.participant_id:
            raise ValueError('Participant ID required')
        return self


class PresentPatchIn(BaseModel):
    present_id: str
    status: Optional[PresentStatus] = None
    description: Optional[str] = None


class PresentMutationOut(BaseModel):
    success: bool = True
    message: str
    present: PresentOut
    participant: Optional[ParticipantBrief] = None
