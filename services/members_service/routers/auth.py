"""Sign-in, session and self-service registration endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.dependencies import get_current_member, get_current_user
from libs.auth.identity import issue_session_artifact, verify_assertion
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.errors import AuthorizationError, ValidationError
from libs.common.logging import get_logger
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.members_service.models import Member, MemberStatus
from services.members_service.schemas import (
    MyRequestsResponse,
    ParentRequestDecision,
    ParentRequestResponse,
    RegistrationResponse,
    RegistrationResubmit,
    RegistrationSubmit,
    SessionLoginRequest,
    SessionLoginResponse,
    SubmitRegistrationResponse,
)
from services.members_service.services import registration_service

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])
parent_router = APIRouter(prefix="/parent-requests", tags=["parent-requests"])


@router.post("/session-login", response_model=SessionLoginResponse)
@auth_limit
async def session_login(
    request: Request,
    response: Response,
    payload: SessionLoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """
    Exchange an identity-provider assertion for a session cookie.

    Active members get the cookie. Anyone else gets their registration
    status instead (a new request is opened on the first attempt).
    """
    settings = get_settings()
    user = verify_assertion(payload.id_token)
    if not user.email:
        raise ValidationError("Identity token carries no email address")

    result = await registration_service.on_first_sign_in(
        db,
        subject_id=user.user_id,
        email=user.email,
        name=user.name,
        picture_url=user.picture,
    )

    if result.member is not None:
        if result.member.status == MemberStatus.DISABLED:
            raise AuthorizationError("Your account is disabled")
        if result.member.status == MemberStatus.REMOVED:
            raise AuthorizationError("Your account has been removed")
        response.set_cookie(
            key=settings.SESSION_COOKIE_NAME,
            value=issue_session_artifact(user),
            max_age=settings.SESSION_COOKIE_DAYS * 24 * 60 * 60,
            httponly=True,
            secure=settings.ENVIRONMENT == "production",
            samesite="lax",
            path="/",
        )
        logger.info("Session issued for member %s", result.member.id)
        return SessionLoginResponse(
            ok=True, status=result.status, member_id=result.member.id
        )

    return SessionLoginResponse(
        ok=False,
        status=result.status,
        registration_status=result.request.status,
        can_resubmit=result.can_resubmit,
        previous_submission=result.previous_submission,
    )


@router.post("/session-logout")
async def session_logout(response: Response):
    """Clear the session cookie."""
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME, path="/")
    return {"ok": True}


@router.post("/complete-profile", response_model=SubmitRegistrationResponse)
async def complete_profile(
    payload: RegistrationSubmit,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Submit registration details, or complete an existing member's profile."""
    result = await registration_service.submit_registration(
        db,
        subject_id=current_user.user_id,
        email=current_user.email,
        name=payload.name or current_user.name,
        groups=payload.groups,
        year_of_birth=payload.year_of_birth,
        month_of_birth=payload.month_of_birth,
        gender=payload.gender,
        member_type=payload.member_type,
        phone=payload.phone,
        has_payment_manager=payload.has_payment_manager,
        payment_manager_id=payload.payment_manager_id,
        payment_manager_name=payload.payment_manager_name,
        consent=payload.consent,
    )
    if isinstance(result, Member):
        return SubmitRegistrationResponse(status="member", member_id=result.id)
    return SubmitRegistrationResponse(
        status=result.status.value,
        registration=RegistrationResponse.model_validate(result),
    )


@router.post("/resubmit-registration", response_model=RegistrationResponse)
async def resubmit_registration(
    payload: RegistrationResubmit,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Re-open a rejected registration with corrected details."""
    return await registration_service.resubmit_registration(
        db,
        subject_id=current_user.user_id,
        group=payload.group,
        member_type=payload.member_type,
        phone=payload.phone,
    )


@router.get("/my-requests", response_model=MyRequestsResponse)
async def my_requests(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Pending payment-manager requests for me, and my own registration."""
    return await registration_service.my_requests(db, subject_id=current_user.user_id)


@parent_router.post("/{request_id}/approve", response_model=ParentRequestResponse)
async def approve_parent_request(
    request_id: str,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Agree to act as payment manager for a youth registration."""
    return await registration_service.approve_delegation(
        db, parent_request_id=request_id, parent_id=member.id
    )


@parent_router.post("/{request_id}/reject", response_model=ParentRequestResponse)
async def reject_parent_request(
    request_id: str,
    payload: ParentRequestDecision,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    return await registration_service.reject_delegation(
        db,
        parent_request_id=request_id,
        parent_id=member.id,
        reason=payload.reason,
    )
