"""Kid profiles: dependents managed by one or more parent members."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.members_service.models.enums import KidStatus, enum_values
from sqlalchemy import JSON, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class KidProfile(Base):
    __tablename__ = "kid_profiles"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )
    parent_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    year_of_birth: Mapped[int] = mapped_column(Integer, nullable=False)
    month_of_birth: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    parent_emails: Mapped[list] = mapped_column(JSON, default=list)
    # Audit of secondary parents: [{"uid", "email", "linked_by", "linked_at"}]
    linked_parents: Mapped[list] = mapped_column(JSON, default=list)

    status: Mapped[KidStatus] = mapped_column(
        SAEnum(
            KidStatus,
            name="kid_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=KidStatus.ACTIVE,
        server_default="active",
    )
    status_updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    status_updated_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<KidProfile {self.name}>"
