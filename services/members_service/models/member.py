"""Member model: an approved club member's identity, profile and audit trail."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.members_service.models.enums import (
    MemberRole,
    MemberStatus,
    MemberType,
    enum_values,
)
from sqlalchemy import JSON, Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class Member(Base):
    """Approved member.

    The primary key is the identity provider's subject id, so a member and the
    registration request it was approved from share the same key.
    """

    __tablename__ = "members"

    # Identity
    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    picture_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    role: Mapped[MemberRole] = mapped_column(
        SAEnum(
            MemberRole,
            name="member_role_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MemberRole.PLAYER,
        server_default="player",
    )
    status: Mapped[MemberStatus] = mapped_column(
        SAEnum(
            MemberStatus,
            name="member_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MemberStatus.ACTIVE,
        server_default="active",
        index=True,
    )

    # Category-determining attributes
    gender: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    group: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # legacy
    groups: Mapped[list] = mapped_column(JSON, default=list)
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
    profile_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    # Payment manager (youth accounts)
    has_payment_manager: Mapped[bool] = mapped_column(Boolean, default=False)
    payment_manager_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    payment_manager_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Delegation
    kid_ids: Mapped[list] = mapped_column(JSON, default=list)
    linked_youth_ids: Mapped[list] = mapped_column(JSON, default=list)
    active_profile_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_login_profile: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Audit
    approval: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    admin_history: Mapped[list] = mapped_column(JSON, default=list)
    status_history: Mapped[list] = mapped_column(JSON, default=list)
    status_updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status_updated_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status_reason: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN

    def __repr__(self):
        return f"<Member {self.email}>"
