"""Account status and role administration for approved members."""

from typing import Optional

from libs.common.datetime_utils import iso, utc_now
from libs.common.errors import (
    InvalidActionError,
    InvalidTransitionError,
    LastAdminError,
    NotFoundError,
    SelfActionError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.members_service.models import (
    Member,
    MemberRole,
    MemberStatus,
    StatusAction,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# action -> (valid source statuses, resulting status)
STATUS_TRANSITIONS: dict[StatusAction, tuple[tuple[MemberStatus, ...], MemberStatus]] = {
    StatusAction.DISABLE: ((MemberStatus.ACTIVE,), MemberStatus.DISABLED),
    StatusAction.ENABLE: ((MemberStatus.DISABLED,), MemberStatus.ACTIVE),
    StatusAction.REMOVE: (
        (MemberStatus.ACTIVE, MemberStatus.DISABLED),
        MemberStatus.REMOVED,
    ),
    StatusAction.RESTORE: ((MemberStatus.REMOVED,), MemberStatus.ACTIVE),
}


def _transition_error(action: StatusAction, current: MemberStatus) -> str:
    if current == MemberStatus.REMOVED and action == StatusAction.DISABLE:
        return "Cannot disable a removed member. Restore them first."
    if current == MemberStatus.REMOVED and action == StatusAction.ENABLE:
        return "Cannot enable a removed member. Use restore instead."
    if action == StatusAction.RESTORE:
        return f"Only removed members can be restored (member is {current.value})"
    return f"Member is already {current.value}"


async def count_other_active_admins(db: AsyncSession, exclude_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Member)
        .where(
            Member.role == MemberRole.ADMIN,
            Member.status == MemberStatus.ACTIVE,
            Member.id != exclude_id,
        )
    )
    return result.scalar_one()


def _history_entry(
    action: StatusAction,
    from_status: str,
    to_status: str,
    actor_id: str,
    reason: Optional[str],
) -> dict:
    return {
        "action": action.value,
        "from_status": from_status,
        "to_status": to_status,
        "performed_by": actor_id,
        "performed_at": iso(utc_now()),
        "reason": reason,
    }


async def change_member_status(
    db: AsyncSession,
    *,
    member_id: str,
    action: str,
    actor_id: str,
    reason: Optional[str] = None,
) -> Member:
    """Apply disable / enable / remove / restore to a member.

    The status write and the history entry land in one commit. Failing
    checks leave the row untouched.
    """
    try:
        action = StatusAction(action)
    except ValueError as exc:
        raise InvalidActionError(f"Invalid action: {action}") from exc
    if action not in STATUS_TRANSITIONS:
        raise InvalidActionError(f"Invalid action: {action.value}")
    if member_id == actor_id:
        raise SelfActionError()

    member = await db.get(Member, member_id, with_for_update=True)
    if member is None:
        raise NotFoundError("Member not found")

    valid_from, new_status = STATUS_TRANSITIONS[action]
    if (
        action in (StatusAction.DISABLE, StatusAction.REMOVE)
        and member.role == MemberRole.ADMIN
        and await count_other_active_admins(db, member.id) == 0
    ):
        raise LastAdminError()
    if member.status not in valid_from:
        raise InvalidTransitionError(_transition_error(action, member.status))

    previous = member.status
    member.status = new_status
    member.status_updated_at = utc_now()
    member.status_updated_by = actor_id
    member.status_reason = reason
    member.status_history = [
        *(member.status_history or []),
        _history_entry(action, previous.value, new_status.value, actor_id, reason),
    ]
    await db.commit()
    await db.refresh(member)

    logger.info(
        "Member %s %s by %s (%s -> %s)",
        member_id,
        action.value,
        actor_id,
        previous.value,
        new_status.value,
    )
    return member


async def change_member_role(
    db: AsyncSession,
    *,
    member_id: str,
    role: str,
    actor_id: str,
    reason: Optional[str] = None,
) -> Member:
    """Promote a member to admin or demote an admin to player."""
    try:
        role = MemberRole(role)
    except ValueError as exc:
        raise ValidationError("Role must be player or admin") from exc
    if member_id == actor_id:
        raise SelfActionError("Cannot change your own role")

    member = await db.get(Member, member_id, with_for_update=True)
    if member is None:
        raise NotFoundError("Member not found")
    if member.role == role:
        return member
    if (
        role == MemberRole.PLAYER
        and member.status == MemberStatus.ACTIVE
        and await count_other_active_admins(db, member.id) == 0
    ):
        raise LastAdminError("Cannot demote the last active admin")

    action = StatusAction.PROMOTE if role == MemberRole.ADMIN else StatusAction.DEMOTE
    previous = member.role
    member.role = role
    member.status_history = [
        *(member.status_history or []),
        {
            "action": action.value,
            "from_role": previous.value,
            "to_role": role.value,
            "performed_by": actor_id,
            "performed_at": iso(utc_now()),
            "reason": reason,
        },
    ]
    await db.commit()
    await db.refresh(member)

    logger.info("Member %s role %s by %s", member_id, action.value, actor_id)
    return member
