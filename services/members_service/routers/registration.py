"""Admin registration review router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.dependencies import require_admin
from libs.db.session import get_async_db
from services.members_service.models import Member, RegistrationStatus
from services.members_service.routers._helpers import member_to_response
from services.members_service.schemas import (
    MemberResponse,
    RegistrationApprove,
    RegistrationReject,
    RegistrationResponse,
)
from services.members_service.services import registration_service

router = APIRouter(prefix="/admin/registrations", tags=["admin-registrations"])


@router.get("", response_model=List[RegistrationResponse])
async def list_registrations(
    status: Optional[RegistrationStatus] = Query(None),
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List registration requests, newest first."""
    return await registration_service.list_registrations(db, status=status)


@router.post("/{uid}/approve", response_model=MemberResponse)
async def approve_registration(
    uid: str,
    payload: Optional[RegistrationApprove] = None,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Approve a registration: the member is created and the request deleted.
    Optional body fields override the submitted values.
    """
    overrides = payload.model_dump(exclude_none=True) if payload else {}
    member = await registration_service.approve_registration(
        db, request_id=uid, approver_id=admin.id, overrides=overrides
    )
    return member_to_response(member)


@router.post("/{uid}/reject", response_model=RegistrationResponse)
async def reject_registration(
    uid: str,
    payload: RegistrationReject,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await registration_service.reject_registration(
        db,
        request_id=uid,
        approver_id=admin.id,
        reason=payload.reason,
        notes=payload.notes,
        allow_resubmit=payload.allow_resubmit,
    )
