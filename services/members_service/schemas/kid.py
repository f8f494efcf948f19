"""Kid profile schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from services.members_service.models import KidStatus


class KidCreate(BaseModel):
    parent_email: EmailStr
    name: str = Field(..., min_length=1)
    year_of_birth: int
    month_of_birth: Optional[int] = Field(None, ge=1, le=12)


class LinkParentRequest(BaseModel):
    parent_email: EmailStr


class KidResponse(BaseModel):
    id: str
    parent_id: str
    name: str
    year_of_birth: int
    month_of_birth: Optional[int] = None
    age: Optional[int] = None
    parent_emails: list[str] = []
    linked_parents: list[dict] = []
    status: KidStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
