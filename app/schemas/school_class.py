from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


class ClassCreate(BaseModel):
    name: str = Field(..., max_length=100)

    @field_validator('name')
    def name_not_blank(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError('Class name is required')
        return v


class ClassOut(BaseModel):
    id: str
    name: str
    participant_count: int = 0
    created_at: Optional[datetime] = None

    model_config = {
        'from_attributes': True
    }


class ClassListOut(BaseModel):
    results: List[ClassOut]
    total: int
    page: int
    limit: int


class ClassCreatedOut(BaseModel):
    success: bool = True
    message: str
    data: ClassOut
