from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional, List
from datetime import datetime
from app.models.user import UserRole


class UserOut(BaseModel):
    id: str
    external_id: str
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    display_name: str
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        'from_attributes': True
    }


class UserProfileOut(BaseModel):
    user: UserOut
    is_admin: bool


class UserListOut(BaseModel):
    results: List[UserOut]
    total: int
    page: int
    limit: int


class UserRoleUpdate(BaseModel):
    role: UserRole

    @field_validator('role', mode='before')
    def normalise_role(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v
