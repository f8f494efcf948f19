"""Parent/kid and parent/youth relationships, and active-profile switching.

Every per-event read or write acts on a *subject*: the member themself, one
of their active kids, or an active linked youth account. ``resolve_subject``
is the single access check for "who am I acting as".
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from libs.common.datetime_utils import iso, utc_now
from libs.common.errors import (
    InvalidTransitionError,
    NotAccessibleError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.events_service.models import AttendanceRecord, RecordStatus
from services.members_service.models import (
    KidProfile,
    KidStatus,
    Member,
    MemberStatus,
    MemberType,
    ProfileKind,
)
from services.members_service.services.age import calculate_age
from services.members_service.services.category import normalize_member
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

KIDS_CATEGORY = "Kids"


@dataclass(frozen=True)
class Subject:
    """Normalised view of whoever an event action is performed for."""

    id: str
    kind: ProfileKind
    name: str
    email: Optional[str] = None
    category: str = "men"
    groups: list[str] = field(default_factory=list)
    member_type: Optional[MemberType] = None
    active: bool = True

    @property
    def is_kid(self) -> bool:
        return self.kind == ProfileKind.KID


def _member_subject(member: Member, kind: ProfileKind) -> Subject:
    view = normalize_member(member)
    return Subject(
        id=member.id,
        kind=kind,
        name=member.name,
        email=member.email,
        category=view.category,
        groups=view.groups,
        member_type=member.member_type,
    )


def _kid_subject(kid: KidProfile, parent: Member) -> Subject:
    return Subject(
        id=kid.id,
        kind=ProfileKind.KID,
        name=kid.name,
        email=parent.email,
        category=KIDS_CATEGORY,
        groups=[KIDS_CATEGORY],
    )


def _append_unique(values: Optional[list], value: str) -> list:
    values = list(values or [])
    if value not in values:
        values.append(value)
    return values


async def resolve_subject(
    db: AsyncSession, *, member: Member, subject_id: Optional[str] = None
) -> Subject:
    """Return the subject ``member`` may act for, or raise NotAccessibleError.

    ``subject_id`` defaults to the member's active profile.
    """
    subject_id = subject_id or member.active_profile_id or member.id
    if subject_id == member.id:
        return _member_subject(member, ProfileKind.SELF)

    if subject_id in (member.kid_ids or []):
        kid = await db.get(KidProfile, subject_id)
        if kid is not None and kid.status == KidStatus.ACTIVE:
            return _kid_subject(kid, member)

    if subject_id in (member.linked_youth_ids or []):
        youth = await db.get(Member, subject_id)
        if youth is not None and youth.status == MemberStatus.ACTIVE:
            return _member_subject(youth, ProfileKind.YOUTH)

    raise NotAccessibleError()


async def load_subject(db: AsyncSession, subject_id: str) -> Subject:
    """Resolve a subject id for admin actions, where no ownership applies."""
    member = await db.get(Member, subject_id)
    if member is not None:
        return _member_subject(member, ProfileKind.SELF)
    kid = await db.get(KidProfile, subject_id)
    if kid is not None:
        parent = await db.get(Member, kid.parent_id)
        return Subject(
            id=kid.id,
            kind=ProfileKind.KID,
            name=kid.name,
            email=parent.email if parent else None,
            category=KIDS_CATEGORY,
            groups=[KIDS_CATEGORY],
            active=kid.status == KidStatus.ACTIVE,
        )
    raise NotFoundError(f"Player {subject_id} not found")


async def switch_profile(
    db: AsyncSession, *, member: Member, target_profile_id: str
) -> Subject:
    """Point the member's active profile at themself, a kid or a linked youth."""
    subject = await resolve_subject(db, member=member, subject_id=target_profile_id)
    member.active_profile_id = subject.id
    member.last_login_profile = subject.id
    await db.commit()

    logger.info(
        "Member %s switched to %s profile %s", member.id, subject.kind.value, subject.id
    )
    return subject


async def get_me(db: AsyncSession, *, member: Member) -> dict:
    """The member with their active kids, active linked youth and active profile."""
    kids: list[KidProfile] = []
    if member.kid_ids:
        result = await db.execute(
            select(KidProfile)
            .where(
                KidProfile.id.in_(member.kid_ids),
                KidProfile.status == KidStatus.ACTIVE,
            )
            .order_by(KidProfile.name)
        )
        kids = list(result.scalars().all())

    youth: list[Member] = []
    if member.linked_youth_ids:
        result = await db.execute(
            select(Member)
            .where(
                Member.id.in_(member.linked_youth_ids),
                Member.status == MemberStatus.ACTIVE,
            )
            .order_by(Member.name)
        )
        youth = list(result.scalars().all())

    try:
        active = await resolve_subject(db, member=member)
    except NotAccessibleError:
        # Stale pointer (kid deactivated, youth disabled): fall back to self.
        active = _member_subject(member, ProfileKind.SELF)

    return {
        "member": member,
        "category": normalize_member(member).category,
        "kids": kids,
        "linked_youth": youth,
        "active_profile": active,
    }


# ---------------------------------------------------------------------------
# Kid lifecycle (admin)
# ---------------------------------------------------------------------------


async def _member_by_email(db: AsyncSession, email: str) -> Member:
    result = await db.execute(
        select(Member).where(Member.email == (email or "").strip().lower())
    )
    member = result.scalar_one_or_none()
    if member is None:
        raise NotFoundError(f"No member found with email {email}")
    return member


async def _get_kid(db: AsyncSession, kid_id: str) -> KidProfile:
    kid = await db.get(KidProfile, kid_id, with_for_update=True)
    if kid is None:
        raise NotFoundError(f"Kid profile {kid_id} not found")
    return kid


async def create_kid(
    db: AsyncSession,
    *,
    admin_id: str,
    parent_email: str,
    name: str,
    year_of_birth: int,
    month_of_birth: Optional[int] = None,
    today: Optional[date] = None,
) -> KidProfile:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Kid name is required")
    if month_of_birth is not None and not 1 <= month_of_birth <= 12:
        raise ValidationError("Month of birth must be between 1 and 12")
    age = calculate_age(year_of_birth, month_of_birth, today)
    if age is None:
        raise ValidationError("A valid year of birth is required")

    parent = await _member_by_email(db, parent_email)
    kid = KidProfile(
        parent_id=parent.id,
        name=name,
        year_of_birth=year_of_birth,
        month_of_birth=month_of_birth,
        age=age,
        parent_emails=[parent.email],
        linked_parents=[],
        status=KidStatus.ACTIVE,
        created_by=admin_id,
    )
    db.add(kid)
    await db.flush()
    parent.kid_ids = _append_unique(parent.kid_ids, kid.id)
    await db.commit()
    await db.refresh(kid)

    logger.info("Admin %s created kid %s for parent %s", admin_id, kid.id, parent.id)
    return kid


async def link_secondary_parent(
    db: AsyncSession, *, admin_id: str, kid_id: str, parent_email: str
) -> KidProfile:
    """Give another member access to a kid.

    Both sides (the kid's parent list and the parent's kid list) are written
    in one transaction; on failure the whole operation can simply be retried.
    """
    kid = await _get_kid(db, kid_id)
    email = (parent_email or "").strip().lower()
    if email in (kid.parent_emails or []):
        raise StateConflictError("This parent already has access to the kid")

    parent = await _member_by_email(db, email)
    kid.parent_emails = _append_unique(kid.parent_emails, email)
    kid.linked_parents = [
        *(kid.linked_parents or []),
        {
            "uid": parent.id,
            "email": email,
            "linked_by": admin_id,
            "linked_at": iso(utc_now()),
        },
    ]
    parent.kid_ids = _append_unique(parent.kid_ids, kid.id)
    await db.commit()
    await db.refresh(kid)

    logger.info("Admin %s linked parent %s to kid %s", admin_id, parent.id, kid.id)
    return kid


async def _set_kid_status(
    db: AsyncSession, *, admin_id: str, kid_id: str, status: KidStatus
) -> KidProfile:
    kid = await _get_kid(db, kid_id)
    if kid.status == status:
        raise InvalidTransitionError(f"Kid profile {kid_id} is already {status.value}")

    kid.status = status
    kid.status_updated_at = utc_now()
    kid.status_updated_by = admin_id
    record_status = (
        RecordStatus.ACTIVE if status == KidStatus.ACTIVE else RecordStatus.INACTIVE
    )
    result = await db.execute(
        update(AttendanceRecord)
        .where(AttendanceRecord.subject_id == kid.id)
        .values(record_status=record_status)
        .execution_options(synchronize_session="fetch")
    )
    if status == KidStatus.INACTIVE:
        parents = await db.execute(
            select(Member).where(Member.active_profile_id == kid.id)
        )
        for parent in parents.scalars():
            parent.active_profile_id = parent.id
    await db.commit()
    await db.refresh(kid)

    logger.info(
        "Admin %s set kid %s %s (%d attendance records)",
        admin_id,
        kid.id,
        status.value,
        result.rowcount or 0,
    )
    return kid


async def deactivate_kid(db: AsyncSession, *, admin_id: str, kid_id: str) -> KidProfile:
    return await _set_kid_status(
        db, admin_id=admin_id, kid_id=kid_id, status=KidStatus.INACTIVE
    )


async def reactivate_kid(db: AsyncSession, *, admin_id: str, kid_id: str) -> KidProfile:
    return await _set_kid_status(
        db, admin_id=admin_id, kid_id=kid_id, status=KidStatus.ACTIVE
    )


async def list_kids(
    db: AsyncSession, *, status: Optional[KidStatus] = None
) -> list[KidProfile]:
    query = select(KidProfile)
    if status is not None:
        query = query.where(KidProfile.status == status)
    result = await db.execute(query.order_by(KidProfile.name))
    return list(result.scalars().all())
