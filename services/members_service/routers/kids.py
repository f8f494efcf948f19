"""Kid profiles (admin) and the member's own profile switcher."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.dependencies import get_current_member, require_admin
from libs.db.session import get_async_db
from services.members_service.models import KidStatus, Member
from services.members_service.routers._helpers import (
    member_to_response,
    profile_to_response,
)
from services.members_service.schemas import (
    KidCreate,
    KidResponse,
    LinkParentRequest,
    ProfileResponse,
    SwitchProfileRequest,
)
from services.members_service.services import delegation

admin_router = APIRouter(prefix="/admin/kids", tags=["admin-kids"])
me_router = APIRouter(prefix="/me", tags=["me"])


@admin_router.post("", response_model=KidResponse, status_code=status.HTTP_201_CREATED)
async def create_kid(
    payload: KidCreate,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await delegation.create_kid(
        db,
        admin_id=admin.id,
        parent_email=payload.parent_email,
        name=payload.name,
        year_of_birth=payload.year_of_birth,
        month_of_birth=payload.month_of_birth,
    )


@admin_router.get("", response_model=List[KidResponse])
async def list_kids(
    status: Optional[KidStatus] = Query(None),
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await delegation.list_kids(db, status=status)


@admin_router.post("/{kid_id}/link-parent", response_model=KidResponse)
async def link_parent(
    kid_id: str,
    payload: LinkParentRequest,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Give a second parent access to a kid."""
    return await delegation.link_secondary_parent(
        db, admin_id=admin.id, kid_id=kid_id, parent_email=payload.parent_email
    )


@admin_router.patch("/{kid_id}/deactivate", response_model=KidResponse)
async def deactivate_kid(
    kid_id: str,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await delegation.deactivate_kid(db, admin_id=admin.id, kid_id=kid_id)


@admin_router.patch("/{kid_id}/reactivate", response_model=KidResponse)
async def reactivate_kid(
    kid_id: str,
    admin: Member = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await delegation.reactivate_kid(db, admin_id=admin.id, kid_id=kid_id)


@me_router.get("")
async def get_me(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """The signed-in member, the profiles they manage and the active one."""
    me = await delegation.get_me(db, member=member)
    return {
        "member": member_to_response(me["member"]),
        "kids": [KidResponse.model_validate(k) for k in me["kids"]],
        "linked_youth": [member_to_response(y) for y in me["linked_youth"]],
        "active_profile": profile_to_response(me["active_profile"]),
    }


@me_router.patch("/active-profile", response_model=ProfileResponse)
async def switch_profile(
    payload: SwitchProfileRequest,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Act as yourself, one of your kids or a linked youth account."""
    subject = await delegation.switch_profile(
        db, member=member, target_profile_id=payload.profile_id
    )
    return profile_to_response(subject)
