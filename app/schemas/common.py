"""Small nested shapes shared by several responses."""
from pydantic import AliasChoices, BaseModel, EmailStr, Field
from typing import Optional

from app.models.participant import ParticipantStatus


class UserBrief(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: EmailStr
    image_url: Optional[str] = None

    model_config = {'from_attributes': True}


class ClassBrief(BaseModel):
    id: str
    name: str

    model_config = {'from_attributes': True}


class ParticipantBrief(BaseModel):
    id: str
    user_id: str
    event_id: str
    class_id: Optional[str] = None
    interests: Optional[str] = None
    status: ParticipantStatus
    user: UserBrief
    school_class: Optional[ClassBrief] = Field(
        default=None,
        validation_alias=AliasChoices("school_class", "class"),
        serialization_alias="class",
    )

    model_config = {'from_attributes': True}


class MessageOut(BaseModel):
    success: bool = True
    message: str
