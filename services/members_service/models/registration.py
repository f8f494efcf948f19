"""Registration requests and payment-manager (parent) requests."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.members_service.models.enums import (
    MemberType,
    ParentRequestStatus,
    RegistrationStatus,
    RejectionReason,
    enum_values,
)
from sqlalchemy import JSON, Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column


class RegistrationRequest(Base):
    """A prospective member's request to join.

    Keyed by the identity provider's subject id. Deleted on final approval,
    when its data is folded into the new Member row.
    """

    __tablename__ = "registration_requests"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    picture_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    status: Mapped[RegistrationStatus] = mapped_column(
        SAEnum(
            RegistrationStatus,
            name="registration_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=RegistrationStatus.PENDING,
        server_default="pending",
        index=True,
    )

    # Requested profile
    group: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # legacy
    groups: Mapped[list] = mapped_column(JSON, default=list)
    gender: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    member_type: Mapped[Optional[MemberType]] = mapped_column(
        SAEnum(
            MemberType,
            name="member_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )
    phone: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    year_of_birth: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    month_of_birth: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    consent_given_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Payment manager delegation
    has_payment_manager: Mapped[bool] = mapped_column(Boolean, default=False)
    payment_manager_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    payment_manager_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    parent_request_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    parent_approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    parent_approved_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    parent_rejected_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    parent_rejected_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Rejection / resubmission
    resubmission_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )
    rejection_reason: Mapped[Optional[RejectionReason]] = mapped_column(
        SAEnum(
            RejectionReason,
            name="rejection_reason_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )
    rejection_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejected_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejected_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    can_resubmit: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    rejection_history: Mapped[list] = mapped_column(JSON, default=list)
    last_rejection_reason: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_rejection_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    resubmitted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<RegistrationRequest {self.email} {self.status}>"


class ParentRequest(Base):
    """A youth's request for an existing member to act as their payment manager."""

    __tablename__ = "parent_requests"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )
    parent_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    youth_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    youth_name: Mapped[str] = mapped_column(String, nullable=False)
    youth_email: Mapped[str] = mapped_column(String, nullable=False)
    youth_groups: Mapped[list] = mapped_column(JSON, default=list)

    status: Mapped[ParentRequestStatus] = mapped_column(
        SAEnum(
            ParentRequestStatus,
            name="parent_request_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ParentRequestStatus.PENDING,
        server_default="pending",
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    resolved_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
