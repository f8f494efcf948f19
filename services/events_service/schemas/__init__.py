"""Events Service schemas package."""

from services.events_service.schemas.main import (
    AddPlayersRequest,
    AttendanceConfirm,
    AttendanceResponse,
    AttendingUpdate,
    EventCreate,
    EventResponse,
    EventUpdate,
    ParticipationDecisionResponse,
    ParticipationRequestResponse,
    PaymentUpdateItem,
    PaymentUpdateRequest,
    PaymentUpdateResponse,
    SubjectAction,
)

__all__ = [
    "AddPlayersRequest",
    "AttendanceConfirm",
    "AttendanceResponse",
    "AttendingUpdate",
    "EventCreate",
    "EventResponse",
    "EventUpdate",
    "ParticipationDecisionResponse",
    "ParticipationRequestResponse",
    "PaymentUpdateItem",
    "PaymentUpdateRequest",
    "PaymentUpdateResponse",
    "SubjectAction",
]
