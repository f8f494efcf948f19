"""Attendance and payment tracking per (event, subject).

Payment lifecycle of an attendance record:

    UNPAID -> PENDING (self) -> PAID | REJECTED (admin)
    REJECTED -> PENDING (self, resubmission)

Self-service never goes beyond PENDING. Late joiners use participation
requests, open from the event's cut-off until it starts.
"""

from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from libs.common.currency import pence_to_pounds, pounds_to_pence
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.errors import (
    AttendanceCutoffError,
    DuplicateRequestError,
    EventStartedError,
    NotAttendedYetError,
    NotFoundError,
    NoValidPaymentsError,
    ParticipationDisabledError,
    PaymentStateError,
    StateConflictError,
    TooEarlyError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.events_service.models import (
    AttendanceRecord,
    AttendanceSource,
    AttendingChoice,
    Event,
    EventStatus,
    EventType,
    ParticipationRequest,
    PaymentStatus,
    RecordStatus,
    RequestStatus,
    SubjectType,
)
from services.events_service.services.events import get_event
from services.events_service.services.fees import calculate_fee
from services.members_service.services.delegation import Subject, load_subject
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

RSVP_CUTOFF_HOURS = 48
NET_PRACTICE_PARTICIPATION_CUTOFF_HOURS = 48

SELF_PAYABLE_STATUSES = (PaymentStatus.UNPAID, PaymentStatus.REJECTED)
ADMIN_PAYMENT_STATUSES = {
    "paid": PaymentStatus.PAID,
    "pending": PaymentStatus.PENDING,
    "unpaid": PaymentStatus.UNPAID,
    "rejected": PaymentStatus.REJECTED,
}


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def rsvp_cutoff(event: Event) -> Optional[datetime]:
    """Time after which self-service RSVP closes; only net practices have one."""
    if event.event_type != EventType.NET_PRACTICE:
        return None
    return as_utc(event.starts_at) - timedelta(hours=RSVP_CUTOFF_HOURS)


def participation_cutoff(event: Event) -> Optional[datetime]:
    """Time from which participation requests open, or None if disabled."""
    hours = event.attendance_cutoff_hours
    if hours is None:
        hours = (
            NET_PRACTICE_PARTICIPATION_CUTOFF_HOURS
            if event.event_type == EventType.NET_PRACTICE
            else 0
        )
    if hours <= 0:
        return None
    return as_utc(event.starts_at) - timedelta(hours=hours)


def ensure_can_mark_paid(record: AttendanceRecord) -> None:
    """The one guard for self-service payment marks."""
    if record.payment_status not in SELF_PAYABLE_STATUSES:
        raise PaymentStateError(
            f"Payment already marked ({record.payment_status.value})"
        )


def _ensure_open(event: Event) -> None:
    if event.status == EventStatus.CANCELLED:
        raise StateConflictError("Event has been cancelled")


def _ensure_subject_matches(event: Event, subject: Subject) -> None:
    if subject.is_kid and not event.kids_event:
        raise ValidationError(f"{subject.name} can only join kids events")
    if not subject.is_kid and event.kids_event:
        raise ValidationError("Only kid profiles can join kids events")


def _subject_type(subject: Subject) -> SubjectType:
    return SubjectType.KID if subject.is_kid else SubjectType.ADULT


def _fee_due_pence(event: Event, subject: Subject) -> int:
    fee = calculate_fee(pence_to_pounds(event.fee_pence or 0), subject.member_type)
    return pounds_to_pence(fee)


def _apply_snapshot(record: AttendanceRecord, event: Event, subject: Subject) -> None:
    record.name = subject.name
    record.email = subject.email
    record.category = subject.category
    record.groups = list(subject.groups)
    record.fee_due_pence = _fee_due_pence(event, subject)


async def _find_record(
    db: AsyncSession, event_id: str, subject_id: str
) -> Optional[AttendanceRecord]:
    result = await db.execute(
        select(AttendanceRecord)
        .where(
            AttendanceRecord.event_id == event_id,
            AttendanceRecord.subject_id == subject_id,
        )
        .with_for_update()
    )
    return result.scalar_one_or_none()


def _new_record(
    event: Event, subject: Subject, source: AttendanceSource
) -> AttendanceRecord:
    record = AttendanceRecord(
        event_id=event.id,
        subject_id=subject.id,
        subject_type=_subject_type(subject),
        attended=False,
        payment_status=PaymentStatus.UNPAID,
        record_status=(
            RecordStatus.ACTIVE if subject.active else RecordStatus.INACTIVE
        ),
        source=source,
    )
    _apply_snapshot(record, event, subject)
    return record


async def _upsert_attended(
    db: AsyncSession,
    event: Event,
    subject: Subject,
    admin_id: str,
    source: AttendanceSource,
) -> AttendanceRecord:
    """Mark a subject as attending and present, creating the record if needed."""
    record = await _find_record(db, event.id, subject.id)
    if record is None:
        record = _new_record(event, subject, source)
        db.add(record)
    record.attending = AttendingChoice.YES
    record.attended = True
    record.attended_confirmed_at = utc_now()
    record.attended_confirmed_by = admin_id
    return record


# ---------------------------------------------------------------------------
# Self-service
# ---------------------------------------------------------------------------


async def set_attending(
    db: AsyncSession,
    *,
    event_id: str,
    subject: Subject,
    attending: AttendingChoice,
    now: Optional[datetime] = None,
) -> AttendanceRecord:
    """RSVP yes/no for a subject, refreshing the snapshot and fee due."""
    now = now or utc_now()
    event = await get_event(db, event_id)
    _ensure_open(event)
    cutoff = rsvp_cutoff(event)
    if cutoff is not None and now >= cutoff:
        raise AttendanceCutoffError(
            f"Attendance closes {RSVP_CUTOFF_HOURS} hours before a net practice"
        )
    _ensure_subject_matches(event, subject)

    record = await _find_record(db, event.id, subject.id)
    if record is None:
        record = _new_record(event, subject, AttendanceSource.RSVP)
        db.add(record)
    else:
        _apply_snapshot(record, event, subject)
    record.attending = AttendingChoice(attending)
    await db.commit()
    await db.refresh(record)

    logger.info(
        "Subject %s RSVP %s for event %s",
        subject.id,
        record.attending.value,
        event.id,
    )
    return record


async def mark_paid(
    db: AsyncSession,
    *,
    event_id: str,
    subject: Subject,
    actor_id: str,
) -> AttendanceRecord:
    """Self-service payment mark: UNPAID/REJECTED -> PENDING, never PAID."""
    event = await get_event(db, event_id)
    record = await _find_record(db, event.id, subject.id)
    if record is None:
        if event.event_type != EventType.MEMBERSHIP_FEE:
            raise NotFoundError("No attendance record for this event")
        record = _new_record(event, subject, AttendanceSource.PAYMENT)
        record.attending = AttendingChoice.YES
        db.add(record)

    if record.subject_type == SubjectType.KID and not record.attended:
        raise NotAttendedYetError()
    ensure_can_mark_paid(record)
    if not record.fee_due_pence:
        raise ValidationError("Nothing to pay for this event")

    record.payment_status = PaymentStatus.PENDING
    record.paid_updated_at = utc_now()
    record.paid_by = actor_id
    await db.commit()
    await db.refresh(record)

    logger.info(
        "Payment marked pending for subject %s on event %s by %s",
        subject.id,
        event.id,
        actor_id,
    )
    return record


async def request_participation(
    db: AsyncSession,
    *,
    event_id: str,
    subject: Subject,
    requester_id: str,
    now: Optional[datetime] = None,
) -> ParticipationRequest:
    """Ask to join after the RSVP cut-off and before the start."""
    now = now or utc_now()
    event = await get_event(db, event_id)
    _ensure_open(event)
    cutoff = participation_cutoff(event)
    if cutoff is None:
        raise ParticipationDisabledError()
    if now < cutoff:
        raise TooEarlyError("Cut-off not reached yet. Use the normal RSVP instead.")
    if now >= as_utc(event.starts_at):
        raise EventStartedError()
    _ensure_subject_matches(event, subject)

    request_id = ParticipationRequest.make_id(event.id, subject.id)
    if await db.get(ParticipationRequest, request_id) is not None:
        raise DuplicateRequestError()

    request = ParticipationRequest(
        id=request_id,
        event_id=event.id,
        subject_id=subject.id,
        subject_type=_subject_type(subject),
        subject_name=subject.name,
        requester_id=requester_id,
        status=RequestStatus.PENDING,
    )
    db.add(request)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateRequestError() from exc
    await db.refresh(request)

    logger.info(
        "Participation requested for subject %s on event %s by %s",
        subject.id,
        event.id,
        requester_id,
    )
    return request


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


async def confirm_attendance(
    db: AsyncSession,
    *,
    event_id: str,
    subject_id: str,
    attended: bool,
    admin_id: str,
) -> AttendanceRecord:
    """Record whether a subject actually turned up."""
    record = await _find_record(db, event_id, subject_id)
    if record is None:
        raise NotFoundError("Attendance record not found")
    record.attended = attended
    record.attended_confirmed_at = utc_now()
    record.attended_confirmed_by = admin_id
    await db.commit()
    await db.refresh(record)

    logger.info(
        "Admin %s set attended=%s for subject %s on event %s",
        admin_id,
        attended,
        subject_id,
        event_id,
    )
    return record


async def admin_confirm_payments(
    db: AsyncSession,
    *,
    updates: Iterable[dict[str, Any]],
    status: str,
    admin_id: str,
) -> int:
    """Set one payment status on many records in a single transaction.

    Entries without event_id, subject_id and subject_type, or pointing at no
    record, are skipped. Returns the number of records updated.
    """
    new_status = ADMIN_PAYMENT_STATUSES.get(str(status or "").lower())
    if new_status is None:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(ADMIN_PAYMENT_STATUSES)}"
        )

    now = utc_now()
    updated = 0
    for entry in updates:
        event_id = entry.get("event_id")
        subject_id = entry.get("subject_id")
        if not event_id or not subject_id or not entry.get("subject_type"):
            continue
        record = await _find_record(db, event_id, subject_id)
        if record is None:
            continue
        record.payment_status = new_status
        if new_status == PaymentStatus.PAID:
            record.confirmed_at = now
            record.confirmed_by = admin_id
        elif new_status == PaymentStatus.REJECTED:
            record.rejected_at = now
            record.rejected_by = admin_id
        updated += 1

    if updated == 0:
        raise NoValidPaymentsError()
    await db.commit()

    logger.info(
        "Admin %s set %d payments to %s", admin_id, updated, new_status.value
    )
    return updated


async def add_past_attendees(
    db: AsyncSession,
    *,
    event_id: str,
    subject_ids: list[str],
    admin_id: str,
) -> list[AttendanceRecord]:
    """Backfill attendance at any time, bypassing RSVP cut-offs."""
    subject_ids = list(dict.fromkeys(s for s in subject_ids if s))
    if not subject_ids:
        raise ValidationError("Select at least one player")
    event = await get_event(db, event_id)

    records = []
    for subject_id in subject_ids:
        subject = await load_subject(db, subject_id)
        _ensure_subject_matches(event, subject)
        records.append(
            await _upsert_attended(db, event, subject, admin_id, AttendanceSource.ADMIN)
        )
    await db.commit()
    for record in records:
        await db.refresh(record)

    logger.info(
        "Admin %s added %d attendees to event %s", admin_id, len(records), event.id
    )
    return records


async def _locked_participation_request(
    db: AsyncSession, request_id: str
) -> ParticipationRequest:
    result = await db.execute(
        select(ParticipationRequest)
        .where(ParticipationRequest.id == request_id)
        .with_for_update()
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Participation request not found")
    if request.status != RequestStatus.PENDING:
        raise StateConflictError(f"Request already {request.status.value}")
    return request


async def approve_participation(
    db: AsyncSession, *, request_id: str, admin_id: str
) -> tuple[ParticipationRequest, AttendanceRecord]:
    """Approve a late request; the subject is counted as attending and present."""
    request = await _locked_participation_request(db, request_id)
    event = await get_event(db, request.event_id)
    subject = await load_subject(db, request.subject_id)

    record = await _upsert_attended(
        db, event, subject, admin_id, AttendanceSource.PARTICIPATION
    )
    request.status = RequestStatus.APPROVED
    request.resolved_at = utc_now()
    request.resolved_by = admin_id
    await db.commit()
    await db.refresh(request)
    await db.refresh(record)

    logger.info("Admin %s approved participation request %s", admin_id, request_id)
    return request, record


async def reject_participation(
    db: AsyncSession, *, request_id: str, admin_id: str
) -> ParticipationRequest:
    request = await _locked_participation_request(db, request_id)
    request.status = RequestStatus.REJECTED
    request.resolved_at = utc_now()
    request.resolved_by = admin_id
    await db.commit()
    await db.refresh(request)

    logger.info("Admin %s rejected participation request %s", admin_id, request_id)
    return request


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_participation_requests(
    db: AsyncSession,
    *,
    status: Optional[RequestStatus] = None,
    event_id: Optional[str] = None,
) -> list[ParticipationRequest]:
    query = select(ParticipationRequest)
    if status is not None:
        query = query.where(ParticipationRequest.status == status)
    if event_id is not None:
        query = query.where(ParticipationRequest.event_id == event_id)
    result = await db.execute(query.order_by(ParticipationRequest.created_at.desc()))
    return list(result.scalars().all())


async def list_attendance(
    db: AsyncSession,
    *,
    event_id: Optional[str] = None,
    subject_id: Optional[str] = None,
    payment_status: Optional[PaymentStatus] = None,
    include_inactive: bool = False,
) -> list[AttendanceRecord]:
    query = select(AttendanceRecord)
    if event_id is not None:
        query = query.where(AttendanceRecord.event_id == event_id)
    if subject_id is not None:
        query = query.where(AttendanceRecord.subject_id == subject_id)
    if payment_status is not None:
        query = query.where(AttendanceRecord.payment_status == payment_status)
    if not include_inactive:
        query = query.where(AttendanceRecord.record_status == RecordStatus.ACTIVE)
    result = await db.execute(query.order_by(AttendanceRecord.created_at.asc()))
    return list(result.scalars().all())
