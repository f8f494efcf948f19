"""Registration lifecycle: sign-in, profile submission, admin approval and
payment-manager (parent) delegation.

States of a RegistrationRequest:

    pending ----------------------------> approved (row deleted, Member created)
       |                                  ^
       +-> rejected -> pending (resubmit) |
    pending_parent_approval -> pending_admin_approval
       |
       +-> rejected_by_parent -> pending / pending_parent_approval (submit again)

Approval, rejection and delegation decisions lock the request row before
re-checking its status, so concurrent decisions on the same request serialise.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from libs.common.datetime_utils import iso, utc_now
from libs.common.errors import (
    AccountSetupError,
    AlreadyApprovedError,
    AuthorizationError,
    DuplicateEmailError,
    NotFoundError,
    NotInRejectedStateError,
    ResubmissionDisallowedError,
    StateConflictError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.members_service.models import (
    ADULT_GROUPS,
    MEMBER_GROUPS,
    Gender,
    Member,
    MemberRole,
    MemberStatus,
    MemberType,
    ParentRequest,
    ParentRequestStatus,
    RegistrationRequest,
    RegistrationStatus,
    RejectionReason,
)
from services.members_service.services.age import calculate_age
from services.members_service.services.category import LEGACY_GROUPS
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ADULT_AGE = 18
MIN_SENIOR_YOUTH_AGE = 14  # U-15 and U-18 squads
RESUBMITTABLE_GROUPS = ("men", "women")


def _norm_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _append_unique(values: Optional[list], value: str) -> list:
    values = list(values or [])
    if value not in values:
        values.append(value)
    return values


async def _locked_request(db: AsyncSession, request_id: str) -> RegistrationRequest:
    result = await db.execute(
        select(RegistrationRequest)
        .where(RegistrationRequest.id == request_id)
        .with_for_update()
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Registration request not found")
    return request


# ---------------------------------------------------------------------------
# Sign-in
# ---------------------------------------------------------------------------


@dataclass
class SignInResult:
    """Outcome of a sign-in attempt.

    ``member`` is set once the subject is an approved member; otherwise
    ``request`` holds the registration request and ``status`` its state.
    """

    status: str
    member: Optional[Member] = None
    request: Optional[RegistrationRequest] = None

    @property
    def can_resubmit(self) -> bool:
        if self.request is None or self.request.status not in (
            RegistrationStatus.REJECTED,
            RegistrationStatus.REJECTED_BY_PARENT,
        ):
            return False
        return self.request.can_resubmit is not False

    @property
    def previous_submission(self) -> Optional[dict[str, Any]]:
        """Previously submitted values, to pre-fill a resubmission form."""
        if self.request is None or self.request.status != RegistrationStatus.REJECTED:
            return None
        r = self.request
        return {
            "group": r.group,
            "groups": list(r.groups or []),
            "member_type": r.member_type.value if r.member_type else None,
            "phone": r.phone,
            "rejection_reason": r.rejection_reason.value if r.rejection_reason else None,
            "rejection_notes": r.rejection_notes,
        }


async def on_first_sign_in(
    db: AsyncSession,
    *,
    subject_id: str,
    email: str,
    name: Optional[str],
    picture_url: Optional[str] = None,
) -> SignInResult:
    """Resolve a verified identity to a member or a registration request.

    An unknown subject gets a new ``pending`` request. A request that claims
    to be approved while no member exists is an inconsistency and raises
    ``AccountSetupError``.
    """
    member = await db.get(Member, subject_id)
    if member is not None:
        member.last_login_at = utc_now()
        await db.commit()
        return SignInResult(status=member.status.value, member=member)

    request = await db.get(RegistrationRequest, subject_id)
    if request is None:
        request = RegistrationRequest(
            id=subject_id,
            email=_norm_email(email),
            name=(name or "").strip() or _norm_email(email),
            picture_url=picture_url,
            status=RegistrationStatus.PENDING,
            resubmission_count=0,
            groups=[],
            rejection_history=[],
        )
        db.add(request)
        await db.commit()
        await db.refresh(request)
        logger.info("Created registration request for %s", subject_id)
        return SignInResult(status=request.status.value, request=request)

    if request.status == RegistrationStatus.APPROVED:
        logger.error(
            "Registration %s is approved but no member exists",
            subject_id,
            extra={"extra_fields": {"subject_id": subject_id}},
        )
        raise AccountSetupError(subject_id=subject_id)

    return SignInResult(status=request.status.value, request=request)


# ---------------------------------------------------------------------------
# Profile submission
# ---------------------------------------------------------------------------


def _validate_submission(
    *,
    groups: list[str],
    year_of_birth: Optional[int],
    month_of_birth: Optional[int],
    gender: Optional[str],
    member_type: Optional[str],
    phone: Optional[str],
    has_payment_manager: bool,
    consent: bool,
    today: Optional[date],
) -> int:
    """Check a submitted profile; returns the computed age."""
    if not consent:
        raise ValidationError("Consent is required to register")
    if not groups:
        raise ValidationError("Select at least one group")
    unknown = [g for g in groups if g not in MEMBER_GROUPS]
    if unknown:
        raise ValidationError(f"Unknown group: {', '.join(unknown)}")
    if month_of_birth is not None and not 1 <= month_of_birth <= 12:
        raise ValidationError("Month of birth must be between 1 and 12")
    if gender not in [g.value for g in Gender]:
        raise ValidationError("Gender must be Male or Female")
    if member_type not in [t.value for t in MemberType]:
        raise ValidationError("Member type must be standard or student")
    if not (phone or "").strip():
        raise ValidationError("Phone number is required")

    age = calculate_age(year_of_birth, month_of_birth, today)
    if age is None:
        raise ValidationError("A valid year of birth is required")

    adult_groups = set(groups) & set(ADULT_GROUPS)
    if age >= ADULT_AGE:
        if not adult_groups:
            raise ValidationError("Players aged 18+ must join Men or Women")
    else:
        if adult_groups:
            raise ValidationError("Players under 18 cannot join Men or Women")
        if not has_payment_manager:
            raise ValidationError("Players under 18 need a payment manager")
    for squad in ("U-15", "U-18"):
        if squad in groups and age < MIN_SENIOR_YOUTH_AGE:
            raise ValidationError(
                f"{squad} requires age {MIN_SENIOR_YOUTH_AGE} or over (age {age})"
            )
    return age


async def _ensure_email_free(db: AsyncSession, email: str, subject_id: str) -> None:
    result = await db.execute(
        select(Member.id).where(Member.email == email, Member.id != subject_id)
    )
    if result.first() is not None:
        raise DuplicateEmailError()
    result = await db.execute(
        select(RegistrationRequest.id).where(
            RegistrationRequest.email == email,
            RegistrationRequest.id != subject_id,
            RegistrationRequest.status.not_in(
                [RegistrationStatus.REJECTED, RegistrationStatus.REJECTED_BY_PARENT]
            ),
        )
    )
    if result.first() is not None:
        raise DuplicateEmailError("A registration with this email is already pending")


async def submit_registration(
    db: AsyncSession,
    *,
    subject_id: str,
    email: str,
    name: str,
    groups: list[str],
    year_of_birth: Optional[int],
    gender: Optional[str],
    member_type: Optional[str],
    phone: Optional[str],
    consent: bool,
    month_of_birth: Optional[int] = None,
    has_payment_manager: bool = False,
    payment_manager_id: Optional[str] = None,
    payment_manager_name: Optional[str] = None,
    today: Optional[date] = None,
):
    """Complete a profile.

    Members get their profile updated in place. Everyone else gets a fresh
    or refreshed registration request; youth registrations wait on their
    payment manager first.
    """
    groups = list(dict.fromkeys(groups or []))
    _validate_submission(
        groups=groups,
        year_of_birth=year_of_birth,
        month_of_birth=month_of_birth,
        gender=gender,
        member_type=member_type,
        phone=phone,
        has_payment_manager=has_payment_manager,
        consent=consent,
        today=today,
    )

    manager = None
    if has_payment_manager:
        if not payment_manager_id or payment_manager_id == subject_id:
            raise ValidationError("Select a payment manager")
        manager = await db.get(Member, payment_manager_id)
        if manager is None or manager.status != MemberStatus.ACTIVE:
            raise ValidationError("Selected payment manager is not an active member")

    email = _norm_email(email)
    await _ensure_email_free(db, email, subject_id)
    now = utc_now()
    profile = {
        "groups": groups,
        "group": None,
        "gender": gender,
        "member_type": MemberType(member_type),
        "phone": phone.strip(),
        "year_of_birth": year_of_birth,
        "month_of_birth": month_of_birth,
        "has_payment_manager": has_payment_manager,
        "payment_manager_id": manager.id if manager else None,
        "payment_manager_name": (payment_manager_name or manager.name) if manager else None,
    }

    member = await db.get(Member, subject_id)
    if member is not None:
        for key, value in profile.items():
            setattr(member, key, value)
        member.profile_completed = True
        await db.commit()
        await db.refresh(member)
        logger.info("Member %s completed their profile", subject_id)
        return member

    request = await db.get(RegistrationRequest, subject_id)
    if request is not None and request.status == RegistrationStatus.APPROVED:
        raise AccountSetupError(subject_id=subject_id)
    if (
        request is not None
        and request.status == RegistrationStatus.REJECTED
        and request.can_resubmit is False
    ):
        raise ResubmissionDisallowedError()
    if request is None:
        request = RegistrationRequest(
            id=subject_id, resubmission_count=0, rejection_history=[]
        )
        db.add(request)
    else:
        request.resubmission_count = (request.resubmission_count or 0) + 1
        request.resubmitted_at = now
        if request.rejection_reason is not None:
            request.last_rejection_reason = request.rejection_reason.value
            request.last_rejection_at = request.rejected_at
        request.rejection_reason = None
        request.rejection_notes = None
        request.rejected_at = None
        request.rejected_by = None

    request.email = email
    request.name = (name or "").strip() or email
    for key, value in profile.items():
        setattr(request, key, value)
    request.consent_given_at = now

    if manager is not None:
        request.status = RegistrationStatus.PENDING_PARENT_APPROVAL
        request.parent_approved_at = None
        request.parent_approved_by = None
        result = await db.execute(
            select(ParentRequest).where(
                ParentRequest.youth_id == subject_id,
                ParentRequest.status == ParentRequestStatus.PENDING,
            )
        )
        parent_request = result.scalars().first()
        if parent_request is None:
            parent_request = ParentRequest(youth_id=subject_id)
            db.add(parent_request)
        parent_request.parent_id = manager.id
        parent_request.youth_name = request.name
        parent_request.youth_email = email
        parent_request.youth_groups = groups
        await db.flush()
        request.parent_request_id = parent_request.id
    else:
        request.status = RegistrationStatus.PENDING
        request.parent_request_id = None
        result = await db.execute(
            select(ParentRequest).where(
                ParentRequest.youth_id == subject_id,
                ParentRequest.status == ParentRequestStatus.PENDING,
            )
        )
        for stale in result.scalars().all():
            stale.status = ParentRequestStatus.REJECTED
            stale.resolved_at = now
            stale.resolved_by = subject_id
            stale.rejection_reason = "Registration resubmitted without a payment manager"

    await db.commit()
    await db.refresh(request)
    logger.info(
        "Registration %s submitted (status=%s)", subject_id, request.status.value
    )
    return request


# ---------------------------------------------------------------------------
# Admin decisions
# ---------------------------------------------------------------------------


async def approve_registration(
    db: AsyncSession,
    *,
    request_id: str,
    approver_id: str,
    overrides: Optional[dict[str, Any]] = None,
) -> Member:
    """Create the Member and delete the request in one transaction.

    ``overrides`` may carry group, groups, member_type, phone, year_of_birth,
    month_of_birth, payment_manager_id, payment_manager_name and notes; each
    present value replaces the stored request value.
    """
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
    request = await _locked_request(db, request_id)
    if request.status == RegistrationStatus.APPROVED:
        raise AlreadyApprovedError()
    if await db.get(Member, request.id) is not None:
        raise AlreadyApprovedError("A member already exists for this registration")

    email = _norm_email(request.email)
    existing = await db.execute(select(Member.id).where(Member.email == email))
    if existing.first() is not None:
        raise DuplicateEmailError()

    group = overrides.get("group", request.group)
    groups = list(overrides.get("groups") or request.groups or [])
    if "group" in overrides and "groups" not in overrides:
        groups = [LEGACY_GROUPS[str(group).lower()]]
    member_type = overrides.get("member_type", request.member_type)
    member_type = MemberType(member_type) if member_type else None
    phone = overrides.get("phone", request.phone)
    year_of_birth = overrides.get("year_of_birth", request.year_of_birth)
    month_of_birth = overrides.get("month_of_birth", request.month_of_birth)
    payment_manager_id = overrides.get("payment_manager_id", request.payment_manager_id)
    payment_manager_name = overrides.get(
        "payment_manager_name", request.payment_manager_name
    )
    notes = overrides.get("notes")

    profile_completed = bool(groups) and bool(member_type) and bool(phone) and (
        year_of_birth is not None
    )
    now = utc_now()
    member = Member(
        id=request.id,
        email=email,
        name=request.name,
        picture_url=request.picture_url,
        role=MemberRole.PLAYER,
        status=MemberStatus.ACTIVE,
        gender=request.gender,
        group=group,
        groups=groups,
        member_type=member_type,
        phone=phone,
        year_of_birth=year_of_birth,
        month_of_birth=month_of_birth,
        has_payment_manager=bool(payment_manager_id) or request.has_payment_manager,
        payment_manager_id=payment_manager_id,
        payment_manager_name=payment_manager_name,
        profile_completed=profile_completed,
        kid_ids=[],
        linked_youth_ids=[],
        approval={
            "approved_by": approver_id,
            "approved_at": iso(now),
            "notes": notes,
            "requested_at": iso(request.created_at),
            "resubmission_count": request.resubmission_count or 0,
            "parent_approved_by": request.parent_approved_by,
        },
        admin_history=[
            {"action": "approved", "by": approver_id, "at": iso(now), "notes": notes}
        ],
        status_history=[],
    )
    db.add(member)

    if payment_manager_id:
        parent = await db.get(Member, payment_manager_id, with_for_update=True)
        if parent is not None:
            parent.linked_youth_ids = _append_unique(parent.linked_youth_ids, member.id)

    await db.delete(request)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateEmailError() from exc
    await db.refresh(member)

    logger.info(
        "Approved registration %s by %s (profile_completed=%s)",
        member.id,
        approver_id,
        profile_completed,
    )
    return member


async def reject_registration(
    db: AsyncSession,
    *,
    request_id: str,
    approver_id: str,
    reason: RejectionReason,
    notes: Optional[str] = None,
    allow_resubmit: bool = True,
) -> RegistrationRequest:
    request = await _locked_request(db, request_id)
    if request.status == RegistrationStatus.APPROVED:
        raise AlreadyApprovedError()

    reason = RejectionReason(reason)
    now = utc_now()
    request.rejection_history = [
        *(request.rejection_history or []),
        {
            "reason": reason.value,
            "notes": notes,
            "rejected_by": approver_id,
            "rejected_at": iso(now),
            "previous_status": request.status.value,
            "can_resubmit": allow_resubmit,
        },
    ]
    request.status = RegistrationStatus.REJECTED
    request.rejection_reason = reason
    request.rejection_notes = notes
    request.rejected_at = now
    request.rejected_by = approver_id
    request.can_resubmit = allow_resubmit
    await db.commit()
    await db.refresh(request)

    logger.info(
        "Rejected registration %s by %s (reason=%s, can_resubmit=%s)",
        request_id,
        approver_id,
        reason.value,
        allow_resubmit,
    )
    return request


async def resubmit_registration(
    db: AsyncSession,
    *,
    subject_id: str,
    group: str,
    member_type: str,
    phone: str,
) -> RegistrationRequest:
    """Re-open a rejected request with corrected details."""
    request = await _locked_request(db, subject_id)
    if request.status != RegistrationStatus.REJECTED:
        raise NotInRejectedStateError(
            f"Registration is {request.status.value}, not rejected"
        )
    if request.can_resubmit is False:
        raise ResubmissionDisallowedError()

    group = (group or "").strip().lower()
    if group not in RESUBMITTABLE_GROUPS:
        raise ValidationError("Group must be men or women")
    if member_type not in [t.value for t in MemberType]:
        raise ValidationError("Member type must be standard or student")
    if not (phone or "").strip():
        raise ValidationError("Phone number is required")

    now = utc_now()
    request.last_rejection_reason = (
        request.rejection_reason.value if request.rejection_reason else None
    )
    request.last_rejection_at = request.rejected_at
    request.rejection_reason = None
    request.rejection_notes = None
    request.rejected_at = None
    request.rejected_by = None
    request.group = group
    request.groups = [LEGACY_GROUPS[group]]
    request.member_type = MemberType(member_type)
    request.phone = phone.strip()
    request.status = RegistrationStatus.PENDING
    request.resubmission_count = (request.resubmission_count or 0) + 1
    request.resubmitted_at = now
    await db.commit()
    await db.refresh(request)

    logger.info(
        "Registration %s resubmitted (count=%d)",
        subject_id,
        request.resubmission_count,
    )
    return request


# ---------------------------------------------------------------------------
# Payment-manager delegation
# ---------------------------------------------------------------------------


async def _locked_parent_request(
    db: AsyncSession, parent_request_id: str, parent_id: str
) -> ParentRequest:
    result = await db.execute(
        select(ParentRequest)
        .where(ParentRequest.id == parent_request_id)
        .with_for_update()
    )
    parent_request = result.scalar_one_or_none()
    if parent_request is None:
        raise NotFoundError("Parent request not found")
    if parent_request.parent_id != parent_id:
        raise AuthorizationError(
            "Only the selected payment manager can respond to this request"
        )
    if parent_request.status != ParentRequestStatus.PENDING:
        raise StateConflictError(
            f"Request has already been {parent_request.status.value}"
        )
    return parent_request


async def approve_delegation(
    db: AsyncSession, *, parent_request_id: str, parent_id: str
) -> ParentRequest:
    """Parent consents; the youth's registration moves on to admin approval.

    The parent/youth link itself is only written at final admin approval.
    """
    parent_request = await _locked_parent_request(db, parent_request_id, parent_id)
    registration = await _locked_request(db, parent_request.youth_id)

    now = utc_now()
    parent_request.status = ParentRequestStatus.APPROVED
    parent_request.resolved_at = now
    parent_request.resolved_by = parent_id
    registration.status = RegistrationStatus.PENDING_ADMIN_APPROVAL
    registration.parent_approved_at = now
    registration.parent_approved_by = parent_id
    await db.commit()
    await db.refresh(parent_request)

    logger.info(
        "Parent %s approved payment-manager request %s for %s",
        parent_id,
        parent_request_id,
        parent_request.youth_id,
    )
    return parent_request


async def reject_delegation(
    db: AsyncSession,
    *,
    parent_request_id: str,
    parent_id: str,
    reason: Optional[str] = None,
) -> ParentRequest:
    parent_request = await _locked_parent_request(db, parent_request_id, parent_id)
    registration = await _locked_request(db, parent_request.youth_id)

    now = utc_now()
    parent_request.status = ParentRequestStatus.REJECTED
    parent_request.resolved_at = now
    parent_request.resolved_by = parent_id
    parent_request.rejection_reason = reason
    registration.status = RegistrationStatus.REJECTED_BY_PARENT
    registration.parent_rejected_at = now
    registration.parent_rejected_by = parent_id
    registration.can_resubmit = True
    await db.commit()
    await db.refresh(parent_request)

    logger.info(
        "Parent %s rejected payment-manager request %s for %s",
        parent_id,
        parent_request_id,
        parent_request.youth_id,
    )
    return parent_request


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_registrations(
    db: AsyncSession, *, status: Optional[RegistrationStatus] = None
) -> list[RegistrationRequest]:
    query = select(RegistrationRequest)
    if status is not None:
        query = query.where(RegistrationRequest.status == status)
    result = await db.execute(query.order_by(RegistrationRequest.created_at.desc()))
    return list(result.scalars().all())


async def my_requests(db: AsyncSession, *, subject_id: str) -> dict[str, Any]:
    """Pending payment-manager requests addressed to the subject, plus the
    subject's own registration request if one is still live."""
    result = await db.execute(
        select(ParentRequest)
        .where(
            ParentRequest.parent_id == subject_id,
            ParentRequest.status == ParentRequestStatus.PENDING,
        )
        .order_by(ParentRequest.created_at.desc())
    )
    return {
        "parent_requests": list(result.scalars().all()),
        "registration": await db.get(RegistrationRequest, subject_id),
    }
