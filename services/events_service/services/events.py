"""Event administration: create, update, cancel, delete and listing."""

from datetime import datetime
from typing import Any, Optional

from libs.common.currency import pounds_to_pence
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.errors import EventLockedError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from services.events_service.models import (
    EVENT_TARGET_GROUPS,
    KIDS_GROUP,
    AttendanceRecord,
    Event,
    EventStatus,
    EventType,
    ParticipationRequest,
)
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

LEGACY_EVENT_GROUPS = {
    "men": ["Men"],
    "women": ["Women"],
    "kids": [KIDS_GROUP],
    "mixed": ["Men", "Women"],
    "all": ["Men", "Women"],
}


def normalize_target_groups(
    target_groups: Optional[list[str]], legacy_group: Optional[str] = None
) -> list[str]:
    """Validated target groups, falling back to the legacy single group string."""
    groups = list(dict.fromkeys(target_groups or []))
    if not groups and legacy_group:
        groups = list(LEGACY_EVENT_GROUPS.get(legacy_group.strip().lower(), []))
    unknown = [g for g in groups if g not in EVENT_TARGET_GROUPS]
    if unknown:
        raise ValidationError(f"Unknown target group: {', '.join(unknown)}")
    if not groups:
        raise ValidationError("Select at least one target group")
    return groups


def has_started(event: Event, now: Optional[datetime] = None) -> bool:
    return as_utc(event.starts_at) <= (now or utc_now())


def _ensure_editable(event: Event, now: Optional[datetime]) -> None:
    if event.event_type != EventType.MEMBERSHIP_FEE and has_started(event, now):
        raise EventLockedError("Cannot modify an event that has started or passed")


def _validate_fee(fee: Optional[float]) -> int:
    if fee is None:
        return 0
    if fee < 0:
        raise ValidationError("Fee cannot be negative")
    return pounds_to_pence(fee)


def _validate_cutoff(hours: Optional[int]) -> Optional[int]:
    if hours is not None and hours < 0:
        raise ValidationError("Attendance cut-off hours cannot be negative")
    return hours


async def get_event(db: AsyncSession, event_id: str) -> Event:
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


async def list_events(
    db: AsyncSession,
    *,
    upcoming_only: bool = False,
    kids_event: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> list[Event]:
    query = select(Event)
    if upcoming_only:
        query = query.where(Event.starts_at >= (now or utc_now()))
    if kids_event is not None:
        query = query.where(Event.kids_event == kids_event)
    result = await db.execute(query.order_by(Event.starts_at.asc()))
    return list(result.scalars().all())


async def create_event(
    db: AsyncSession,
    *,
    admin_id: str,
    title: str,
    event_type: str,
    starts_at: datetime,
    fee: Optional[float] = 0,
    target_groups: Optional[list[str]] = None,
    group: Optional[str] = None,
    location: Optional[str] = None,
    attendance_cutoff_hours: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Event:
    """Create an event. Only membership fees may start in the past."""
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    try:
        event_type = EventType(event_type)
    except ValueError as exc:
        raise ValidationError(f"Invalid event type: {event_type}") from exc
    groups = normalize_target_groups(target_groups, group)
    starts_at = as_utc(starts_at)
    if event_type != EventType.MEMBERSHIP_FEE and starts_at <= (now or utc_now()):
        raise ValidationError("Event start must be in the future")

    event = Event(
        title=title,
        event_type=event_type,
        target_groups=groups,
        group=group,
        kids_event=KIDS_GROUP in groups,
        fee_pence=_validate_fee(fee),
        starts_at=starts_at,
        location=location,
        attendance_cutoff_hours=_validate_cutoff(attendance_cutoff_hours),
        status=EventStatus.SCHEDULED,
        created_by=admin_id,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)

    logger.info(
        "Admin %s created %s event %s starting %s",
        admin_id,
        event_type.value,
        event.id,
        starts_at.isoformat(),
    )
    return event


async def update_event(
    db: AsyncSession,
    *,
    event_id: str,
    admin_id: str,
    changes: dict[str, Any],
    now: Optional[datetime] = None,
) -> Event:
    """Apply a partial update. Refused once the event has started."""
    event = await get_event(db, event_id)
    _ensure_editable(event, now)

    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise ValidationError("Title is required")
        event.title = title
    if "event_type" in changes:
        try:
            event.event_type = EventType(changes["event_type"])
        except ValueError as exc:
            raise ValidationError(
                f"Invalid event type: {changes['event_type']}"
            ) from exc
    if "target_groups" in changes or "group" in changes:
        groups = normalize_target_groups(
            changes.get("target_groups"), changes.get("group")
        )
        event.target_groups = groups
        event.kids_event = KIDS_GROUP in groups
        if "group" in changes:
            event.group = changes["group"]
    if "fee" in changes:
        event.fee_pence = _validate_fee(changes["fee"])
    if "location" in changes:
        event.location = changes["location"]
    if "attendance_cutoff_hours" in changes:
        event.attendance_cutoff_hours = _validate_cutoff(
            changes["attendance_cutoff_hours"]
        )
    if "starts_at" in changes:
        starts_at = as_utc(changes["starts_at"])
        if event.event_type != EventType.MEMBERSHIP_FEE and starts_at <= (
            now or utc_now()
        ):
            raise ValidationError("Event start must be in the future")
        event.starts_at = starts_at

    event.updated_by = admin_id
    await db.commit()
    await db.refresh(event)

    logger.info("Admin %s updated event %s", admin_id, event.id)
    return event


async def cancel_event(db: AsyncSession, *, event_id: str, admin_id: str) -> Event:
    """Cancel an event. Allowed at any time."""
    event = await get_event(db, event_id)
    if event.status == EventStatus.CANCELLED:
        return event
    event.status = EventStatus.CANCELLED
    event.cancelled_at = utc_now()
    event.cancelled_by = admin_id
    event.updated_by = admin_id
    await db.commit()
    await db.refresh(event)

    logger.info("Admin %s cancelled event %s", admin_id, event.id)
    return event


async def delete_event(
    db: AsyncSession,
    *,
    event_id: str,
    admin_id: str,
    now: Optional[datetime] = None,
) -> int:
    """Delete an event with its attendance records and participation requests.

    Returns the number of attendance records removed.
    """
    event = await get_event(db, event_id)
    _ensure_editable(event, now)

    removed = await db.execute(
        delete(AttendanceRecord).where(AttendanceRecord.event_id == event.id)
    )
    await db.execute(
        delete(ParticipationRequest).where(ParticipationRequest.event_id == event.id)
    )
    await db.delete(event)
    await db.commit()

    logger.info(
        "Admin %s deleted event %s (%d attendance records)",
        admin_id,
        event_id,
        removed.rowcount or 0,
    )
    return removed.rowcount or 0
