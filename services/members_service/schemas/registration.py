"""Registration, sign-in and payment-manager request schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from services.members_service.models import (
    MemberType,
    ParentRequestStatus,
    RegistrationStatus,
    RejectionReason,
)


class SessionLoginRequest(BaseModel):
    id_token: str = Field(..., min_length=1)


class SessionLoginResponse(BaseModel):
    """Outcome of a sign-in.

    ``ok`` is true only when a session cookie was issued.
    """

    ok: bool
    status: str
    member_id: Optional[str] = None
    registration_status: Optional[RegistrationStatus] = None
    can_resubmit: bool = False
    previous_submission: Optional[dict] = None


class RegistrationSubmit(BaseModel):
    """Profile completion, for new registrations and existing members alike."""

    groups: list[str] = Field(..., min_length=1)
    year_of_birth: int
    month_of_birth: Optional[int] = None
    gender: str
    member_type: str
    phone: str
    has_payment_manager: bool = False
    payment_manager_id: Optional[str] = None
    payment_manager_name: Optional[str] = None
    consent: bool = False
    name: Optional[str] = None


class RegistrationResubmit(BaseModel):
    group: str
    member_type: str
    phone: str


class RegistrationApprove(BaseModel):
    """Optional admin overrides applied on top of the stored request."""

    group: Optional[Literal["men", "women"]] = None
    groups: Optional[list[str]] = None
    member_type: Optional[MemberType] = None
    phone: Optional[str] = None
    year_of_birth: Optional[int] = None
    month_of_birth: Optional[int] = Field(None, ge=1, le=12)
    payment_manager_id: Optional[str] = None
    payment_manager_name: Optional[str] = None
    notes: Optional[str] = None


class RegistrationReject(BaseModel):
    reason: RejectionReason
    notes: Optional[str] = None
    allow_resubmit: bool = True


class RegistrationResponse(BaseModel):
    id: str
    email: EmailStr
    name: str
    status: RegistrationStatus
    group: Optional[str] = None
    groups: list[str] = []
    gender: Optional[str] = None
    member_type: Optional[MemberType] = None
    phone: Optional[str] = None
    year_of_birth: Optional[int] = None
    month_of_birth: Optional[int] = None
    has_payment_manager: bool = False
    payment_manager_id: Optional[str] = None
    payment_manager_name: Optional[str] = None
    resubmission_count: int = 0
    rejection_reason: Optional[RejectionReason] = None
    rejection_notes: Optional[str] = None
    can_resubmit: Optional[bool] = None
    last_rejection_reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ParentRequestDecision(BaseModel):
    reason: Optional[str] = None


class ParentRequestResponse(BaseModel):
    id: str
    parent_id: str
    youth_id: str
    youth_name: str
    youth_email: str
    youth_groups: list[str] = []
    status: ParentRequestStatus
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MyRequestsResponse(BaseModel):
    parent_requests: list[ParentRequestResponse] = []
    registration: Optional[RegistrationResponse] = None


class SubmitRegistrationResponse(BaseModel):
    """Either the updated member (existing members) or the live request."""

    status: str
    member_id: Optional[str] = None
    registration: Optional[RegistrationResponse] = None
