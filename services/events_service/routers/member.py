"""Events Service member-facing endpoints.

Every write acts on a subject: the caller, one of their kids or a linked
youth. ``subject_id`` defaults to the caller's active profile.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.dependencies import get_current_member
from libs.db.session import get_async_db
from services.events_service.schemas import (
    AttendanceResponse,
    AttendingUpdate,
    EventResponse,
    ParticipationRequestResponse,
    SubjectAction,
)
from services.events_service.services import attendance, events
from services.members_service.models import Member
from services.members_service.services.delegation import resolve_subject

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=List[EventResponse])
async def list_events(
    upcoming_only: bool = Query(True, description="Show only upcoming events"),
    kids_event: Optional[bool] = Query(None),
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    result = await events.list_events(
        db, upcoming_only=upcoming_only, kids_event=kids_event
    )
    return [EventResponse.from_event(e) for e in result]


@router.get("/attendance/me", response_model=List[AttendanceResponse])
async def my_attendance(
    subject_id: Optional[str] = Query(None),
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Attendance and payment records for the active profile."""
    subject = await resolve_subject(db, member=member, subject_id=subject_id)
    records = await attendance.list_attendance(db, subject_id=subject.id)
    return [AttendanceResponse.from_record(r) for r in records]


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    return EventResponse.from_event(await events.get_event(db, event_id))


@router.post("/{event_id}/attending", response_model=AttendanceResponse)
async def set_attending(
    event_id: str,
    payload: AttendingUpdate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """RSVP yes or no."""
    subject = await resolve_subject(db, member=member, subject_id=payload.subject_id)
    record = await attendance.set_attending(
        db, event_id=event_id, subject=subject, attending=payload.attending
    )
    return AttendanceResponse.from_record(record)


@router.post("/{event_id}/paid", response_model=AttendanceResponse)
async def mark_paid(
    event_id: str,
    payload: SubjectAction,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Report a payment; an admin confirms or rejects it later."""
    subject = await resolve_subject(db, member=member, subject_id=payload.subject_id)
    record = await attendance.mark_paid(
        db, event_id=event_id, subject=subject, actor_id=member.id
    )
    return AttendanceResponse.from_record(record)


@router.post(
    "/{event_id}/request",
    response_model=ParticipationRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_participation(
    event_id: str,
    payload: SubjectAction,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Ask to join after the RSVP cut-off."""
    subject = await resolve_subject(db, member=member, subject_id=payload.subject_id)
    return await attendance.request_participation(
        db, event_id=event_id, subject=subject, requester_id=member.id
    )
