"""Member, status and profile schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from services.members_service.models import (
    MemberRole,
    MemberStatus,
    MemberType,
    ProfileKind,
)


class MemberResponse(BaseModel):
    id: str
    email: str
    name: str
    role: MemberRole
    status: MemberStatus
    gender: Optional[str] = None
    group: Optional[str] = None
    groups: list[str] = []
    category: Optional[str] = None
    member_type: Optional[MemberType] = None
    phone: Optional[str] = None
    year_of_birth: Optional[int] = None
    month_of_birth: Optional[int] = None
    profile_completed: bool = False
    has_payment_manager: bool = False
    payment_manager_id: Optional[str] = None
    payment_manager_name: Optional[str] = None
    kid_ids: list[str] = []
    linked_youth_ids: list[str] = []
    active_profile_id: Optional[str] = None
    status_updated_at: Optional[datetime] = None
    status_updated_by: Optional[str] = None
    status_reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MemberDetailResponse(MemberResponse):
    """Admin view including audit logs."""

    approval: Optional[dict] = None
    admin_history: list[dict] = []
    status_history: list[dict] = []


class MemberStatusUpdate(BaseModel):
    action: str = Field(..., description="disable | enable | remove | restore")
    reason: Optional[str] = None


class MemberRoleUpdate(BaseModel):
    role: str = Field(..., description="player | admin")
    reason: Optional[str] = None


class ProfileResponse(BaseModel):
    """The subject a member is currently acting as."""

    id: str
    kind: ProfileKind
    name: str
    category: str
    groups: list[str] = []

    model_config = ConfigDict(from_attributes=True)


class SwitchProfileRequest(BaseModel):
    profile_id: str
