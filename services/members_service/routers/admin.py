"""Admin members router - listing, status and role administration."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.dependencies import require_admin
from libs.common.errors import NotFoundError
from libs.db.session import get_async_db
from services.members_service.models import Member, MemberStatus
from services.members_service.routers._helpers import member_to_response
from services.members_service.schemas import (
    MemberDetailResponse,
    MemberResponse,
    MemberRoleUpdate,
    MemberStatusUpdate,
)
from services.members_service.services import member_status

router = APIRouter(prefix="/admin/members", tags=["admin-members"])


@router.get("", response_model=List[MemberResponse])
async def list_members(
    status: Optional[MemberStatus] = Query(None),
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(Member)
    if status is not None:
        query = query.where(Member.status == status)
    result = await db.execute(query.order_by(Member.name))
    return [member_to_response(m) for m in result.scalars().all()]


@router.get("/{member_id}", response_model=MemberDetailResponse)
async def get_member(
    member_id: str,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    member = await db.get(Member, member_id)
    if member is None:
        raise NotFoundError("Member not found")
    return member_to_response(member, detail=True)


@router.patch("/{member_id}/status", response_model=MemberDetailResponse)
async def update_member_status(
    member_id: str,
    payload: MemberStatusUpdate,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Disable, enable, remove or restore a member."""
    member = await member_status.change_member_status(
        db,
        member_id=member_id,
        action=payload.action,
        actor_id=admin.id,
        reason=payload.reason,
    )
    return member_to_response(member, detail=True)


@router.patch("/{member_id}/role", response_model=MemberDetailResponse)
async def update_member_role(
    member_id: str,
    payload: MemberRoleUpdate,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    member = await member_status.change_member_role(
        db,
        member_id=member_id,
        role=payload.role,
        actor_id=admin.id,
        reason=payload.reason,
    )
    return member_to_response(member, detail=True)
