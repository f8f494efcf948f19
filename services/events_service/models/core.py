import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.events_service.models.enums import (
    AttendanceSource,
    AttendingChoice,
    EventStatus,
    EventType,
    PaymentStatus,
    RecordStatus,
    RequestStatus,
    SubjectType,
    enum_values,
)
from sqlalchemy import JSON, Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column


def _new_id() -> str:
    return str(uuid.uuid4())


class Event(Base):
    """Club event. Fees are stored in pence."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String, nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    event_type: Mapped[EventType] = mapped_column(
        SAEnum(
            EventType,
            name="event_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    target_groups: Mapped[list] = mapped_column(JSON, default=list)
    group: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # legacy
    kids_event: Mapped[bool] = mapped_column(Boolean, default=False)
    fee_pence: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    starts_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    attendance_cutoff_hours: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    status: Mapped[EventStatus] = mapped_column(
        SAEnum(
            EventStatus,
            name="event_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=EventStatus.SCHEDULED,
        server_default="scheduled",
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_by: Mapped[str] = mapped_column(String, nullable=False)
    updated_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Event {self.title}>"


class AttendanceRecord(Base):
    """One row per (event, subject): RSVP, presence and payment status."""

    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("event_id", "subject_id", name="uq_attendance_event_subject"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    event_id: Mapped[str] = mapped_column(
        String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    subject_type: Mapped[SubjectType] = mapped_column(
        SAEnum(
            SubjectType,
            name="subject_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )

    # Snapshot at RSVP time
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    groups: Mapped[list] = mapped_column(JSON, default=list)

    attending: Mapped[Optional[AttendingChoice]] = mapped_column(
        SAEnum(
            AttendingChoice,
            name="attending_choice_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )
    attended: Mapped[bool] = mapped_column(Boolean, default=False)
    attended_confirmed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    attended_confirmed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    source: Mapped[AttendanceSource] = mapped_column(
        SAEnum(
            AttendanceSource,
            name="attendance_source_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=AttendanceSource.RSVP,
    )

    # Payment
    fee_due_pence: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(
            PaymentStatus,
            name="payment_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PaymentStatus.UNPAID,
        server_default="UNPAID",
    )
    paid_updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    paid_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    confirmed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejected_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    record_status: Mapped[RecordStatus] = mapped_column(
        SAEnum(
            RecordStatus,
            name="record_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=RecordStatus.ACTIVE,
        server_default="active",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<AttendanceRecord {self.event_id}/{self.subject_id}>"


class ParticipationRequest(Base):
    """Late request to join an event after its RSVP cut-off.

    The id is ``{event_id}_{subject_id}``, so each subject has at most one
    request per event.
    """

    __tablename__ = "participation_requests"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    event_id: Mapped[str] = mapped_column(
        String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subject_id: Mapped[str] = mapped_column(String, nullable=False)
    subject_type: Mapped[SubjectType] = mapped_column(
        SAEnum(
            SubjectType,
            name="subject_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    subject_name: Mapped[str] = mapped_column(String, nullable=False)
    requester_id: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        SAEnum(
            RequestStatus,
            name="participation_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=RequestStatus.PENDING,
        server_default="pending",
        index=True,
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    resolved_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    @staticmethod
    def make_id(event_id: str, subject_id: str) -> str:
        return f"{event_id}_{subject_id}"
