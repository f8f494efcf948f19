"""Pydantic schemas for Events Service.

The API accepts and returns fees in pounds (float); the database stores pence.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from libs.common.currency import pence_to_pounds
from services.events_service.models import (
    AttendanceRecord,
    AttendanceSource,
    AttendingChoice,
    Event,
    EventStatus,
    EventType,
    PaymentStatus,
    RecordStatus,
    RequestStatus,
    SubjectType,
)


class EventCreate(BaseModel):
    title: str
    event_type: EventType
    starts_at: datetime
    fee: float = Field(0, ge=0)
    target_groups: Optional[list[str]] = None
    group: Optional[str] = None  # legacy single group
    location: Optional[str] = None
    attendance_cutoff_hours: Optional[int] = Field(None, ge=0)


class EventUpdate(BaseModel):
    """Partial update; only fields present in the body are applied."""

    title: Optional[str] = None
    event_type: Optional[EventType] = None
    starts_at: Optional[datetime] = None
    fee: Optional[float] = Field(None, ge=0)
    target_groups: Optional[list[str]] = None
    group: Optional[str] = None
    location: Optional[str] = None
    attendance_cutoff_hours: Optional[int] = Field(None, ge=0)


class EventResponse(BaseModel):
    id: str
    title: str
    event_type: EventType
    target_groups: list[str] = []
    group: Optional[str] = None
    kids_event: bool
    fee: float
    starts_at: datetime
    location: Optional[str] = None
    attendance_cutoff_hours: Optional[int] = None
    status: EventStatus
    created_by: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_event(cls, event: Event) -> "EventResponse":
        return cls(
            id=event.id,
            title=event.title,
            event_type=event.event_type,
            target_groups=list(event.target_groups or []),
            group=event.group,
            kids_event=event.kids_event,
            fee=pence_to_pounds(event.fee_pence or 0),
            starts_at=event.starts_at,
            location=event.location,
            attendance_cutoff_hours=event.attendance_cutoff_hours,
            status=event.status,
            created_by=event.created_by,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


class AttendingUpdate(BaseModel):
    attending: AttendingChoice
    subject_id: Optional[str] = None  # defaults to the active profile


class SubjectAction(BaseModel):
    subject_id: Optional[str] = None  # defaults to the active profile


class AttendanceResponse(BaseModel):
    id: str
    event_id: str
    subject_id: str
    subject_type: SubjectType
    name: str
    email: Optional[str] = None
    category: Optional[str] = None
    groups: list[str] = []
    attending: Optional[AttendingChoice] = None
    attended: bool
    fee_due: float
    payment_status: PaymentStatus
    paid_updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    confirmed_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    record_status: RecordStatus
    source: AttendanceSource

    @classmethod
    def from_record(cls, record: AttendanceRecord) -> "AttendanceResponse":
        return cls(
            id=record.id,
            event_id=record.event_id,
            subject_id=record.subject_id,
            subject_type=record.subject_type,
            name=record.name,
            email=record.email,
            category=record.category,
            groups=list(record.groups or []),
            attending=record.attending,
            attended=record.attended,
            fee_due=pence_to_pounds(record.fee_due_pence or 0),
            payment_status=record.payment_status,
            paid_updated_at=record.paid_updated_at,
            confirmed_at=record.confirmed_at,
            confirmed_by=record.confirmed_by,
            rejected_at=record.rejected_at,
            rejected_by=record.rejected_by,
            record_status=record.record_status,
            source=record.source,
        )


class AttendanceConfirm(BaseModel):
    subject_id: str
    attended: bool = True


class AddPlayersRequest(BaseModel):
    subject_ids: list[str] = Field(..., min_length=1)


class PaymentUpdateItem(BaseModel):
    """One record in a bulk payment update; incomplete entries are skipped."""

    event_id: Optional[str] = None
    subject_id: Optional[str] = None
    subject_type: Optional[SubjectType] = None


class PaymentUpdateRequest(BaseModel):
    updates: list[PaymentUpdateItem]
    status: Literal["paid", "pending", "unpaid", "rejected"]


class PaymentUpdateResponse(BaseModel):
    updated: int


class ParticipationRequestResponse(BaseModel):
    id: str
    event_id: str
    subject_id: str
    subject_type: SubjectType
    subject_name: str
    requester_id: str
    status: RequestStatus
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ParticipationDecisionResponse(BaseModel):
    request: ParticipationRequestResponse
    attendance: Optional[AttendanceResponse] = None
