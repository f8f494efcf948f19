"""Events Service models package."""

from services.events_service.models.core import (  # noqa: F401
    AttendanceRecord,
    Event,
    ParticipationRequest,
)
from services.events_service.models.enums import (  # noqa: F401
    EVENT_TARGET_GROUPS,
    KIDS_GROUP,
    AttendanceSource,
    AttendingChoice,
    EventStatus,
    EventType,
    PaymentStatus,
    RecordStatus,
    RequestStatus,
    SubjectType,
)

__all__ = [
    "AttendanceRecord",
    "AttendanceSource",
    "AttendingChoice",
    "EVENT_TARGET_GROUPS",
    "Event",
    "EventStatus",
    "EventType",
    "KIDS_GROUP",
    "ParticipationRequest",
    "PaymentStatus",
    "RecordStatus",
    "RequestStatus",
    "SubjectType",
]
