"""Events Service admin endpoints: events, attendance, payments and
participation requests."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.dependencies import require_admin
from libs.db.session import get_async_db
from services.events_service.models import PaymentStatus, RequestStatus
from services.events_service.schemas import (
    AddPlayersRequest,
    AttendanceConfirm,
    AttendanceResponse,
    EventCreate,
    EventResponse,
    EventUpdate,
    ParticipationDecisionResponse,
    ParticipationRequestResponse,
    PaymentUpdateRequest,
    PaymentUpdateResponse,
)
from services.events_service.services import attendance, events
from services.members_service.models import Member

events_router = APIRouter(prefix="/admin/events", tags=["admin-events"])
payments_router = APIRouter(prefix="/admin/payments", tags=["admin-payments"])
participation_router = APIRouter(
    prefix="/admin/participation-requests", tags=["admin-participation"]
)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@events_router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    event = await events.create_event(
        db,
        admin_id=admin.id,
        title=payload.title,
        event_type=payload.event_type,
        starts_at=payload.starts_at,
        fee=payload.fee,
        target_groups=payload.target_groups,
        group=payload.group,
        location=payload.location,
        attendance_cutoff_hours=payload.attendance_cutoff_hours,
    )
    return EventResponse.from_event(event)


@events_router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    payload: EventUpdate,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    event = await events.update_event(
        db,
        event_id=event_id,
        admin_id=admin.id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return EventResponse.from_event(event)


@events_router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    removed = await events.delete_event(db, event_id=event_id, admin_id=admin.id)
    return {"ok": True, "attendance_deleted": removed}


@events_router.post("/{event_id}/cancel", response_model=EventResponse)
async def cancel_event(
    event_id: str,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    event = await events.cancel_event(db, event_id=event_id, admin_id=admin.id)
    return EventResponse.from_event(event)


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


@events_router.get("/{event_id}/attendance", response_model=List[AttendanceResponse])
async def list_event_attendance(
    event_id: str,
    include_inactive: bool = Query(False),
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    await events.get_event(db, event_id)
    records = await attendance.list_attendance(
        db, event_id=event_id, include_inactive=include_inactive
    )
    return [AttendanceResponse.from_record(r) for r in records]


@events_router.patch("/{event_id}/attendance", response_model=AttendanceResponse)
async def confirm_attendance(
    event_id: str,
    payload: AttendanceConfirm,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Confirm (or clear) a subject's presence at an event."""
    record = await attendance.confirm_attendance(
        db,
        event_id=event_id,
        subject_id=payload.subject_id,
        attended=payload.attended,
        admin_id=admin.id,
    )
    return AttendanceResponse.from_record(record)


@events_router.post("/{event_id}/add-players", response_model=List[AttendanceResponse])
async def add_players(
    event_id: str,
    payload: AddPlayersRequest,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Backfill attendance, including for events that already happened."""
    records = await attendance.add_past_attendees(
        db, event_id=event_id, subject_ids=payload.subject_ids, admin_id=admin.id
    )
    return [AttendanceResponse.from_record(r) for r in records]


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


@payments_router.get("", response_model=List[AttendanceResponse])
async def list_payments(
    payment_status: Optional[PaymentStatus] = Query(None),
    event_id: Optional[str] = Query(None),
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    records = await attendance.list_attendance(
        db, event_id=event_id, payment_status=payment_status
    )
    return [AttendanceResponse.from_record(r) for r in records]


@payments_router.post("/update", response_model=PaymentUpdateResponse)
async def update_payments(
    payload: PaymentUpdateRequest,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Apply one payment status to many records at once."""
    updated = await attendance.admin_confirm_payments(
        db,
        updates=[item.model_dump(mode="json") for item in payload.updates],
        status=payload.status,
        admin_id=admin.id,
    )
    return PaymentUpdateResponse(updated=updated)


# ---------------------------------------------------------------------------
# Participation requests
# ---------------------------------------------------------------------------


@participation_router.get("", response_model=List[ParticipationRequestResponse])
async def list_participation_requests(
    status: Optional[RequestStatus] = Query(None),
    event_id: Optional[str] = Query(None),
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await attendance.list_participation_requests(
        db, status=status, event_id=event_id
    )


@participation_router.post(
    "/{request_id}/approve", response_model=ParticipationDecisionResponse
)
async def approve_participation(
    request_id: str,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    request, record = await attendance.approve_participation(
        db, request_id=request_id, admin_id=admin.id
    )
    return ParticipationDecisionResponse(
        request=ParticipationRequestResponse.model_validate(request),
        attendance=AttendanceResponse.from_record(record),
    )


@participation_router.post(
    "/{request_id}/reject", response_model=ParticipationDecisionResponse
)
async def reject_participation(
    request_id: str,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    request = await attendance.reject_participation(
        db, request_id=request_id, admin_id=admin.id
    )
    return ParticipationDecisionResponse(
        request=ParticipationRequestResponse.model_validate(request)
    )
