"""Unit tests for the registration lifecycle.

Tests call registration_service directly with the db_session fixture.
"""

from datetime import date

import pytest
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
from services.members_service.models import (
    Member,
    MemberType,
    ParentRequest,
    ParentRequestStatus,
    RegistrationRequest,
    RegistrationStatus,
    RejectionReason,
)
from services.members_service.services import registration_service
from tests.factories import (
    AdminFactory,
    MemberFactory,
    RegistrationRequestFactory,
)

TODAY = date(2026, 10, 19)


def _adult_submission(**overrides):
    payload = {
        "subject_id": "subject-1",
        "email": "New.Player@Example.com",
        "name": "New Player",
        "groups": ["Men"],
        "year_of_birth": 1994,
        "month_of_birth": 2,
        "gender": "Male",
        "member_type": "student",
        "phone": "07700900123",
        "consent": True,
        "today": TODAY,
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Sign-in
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_first_sign_in_opens_pending_request(db_session):
    result = await registration_service.on_first_sign_in(
        db_session, subject_id="new-uid", email="Someone@Example.com", name="Someone"
    )

    assert result.member is None
    assert result.status == "pending"
    stored = await db_session.get(RegistrationRequest, "new-uid")
    assert stored.email == "someone@example.com"
    assert stored.status == RegistrationStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sign_in_of_member_stamps_last_login(db_session):
    member = MemberFactory.create()
    db_session.add(member)
    await db_session.commit()

    result = await registration_service.on_first_sign_in(
        db_session, subject_id=member.id, email=member.email, name=member.name
    )

    assert result.member is member
    assert result.status == "active"
    assert member.last_login_at is not None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sign_in_with_approved_request_but_no_member_is_setup_error(db_session):
    request = RegistrationRequestFactory.create(status=RegistrationStatus.APPROVED)
    db_session.add(request)
    await db_session.commit()

    with pytest.raises(AccountSetupError):
        await registration_service.on_first_sign_in(
            db_session, subject_id=request.id, email=request.email, name=request.name
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sign_in_after_rejection_reports_previous_submission(db_session):
    request = RegistrationRequestFactory.create(
        status=RegistrationStatus.REJECTED,
        rejection_reason=RejectionReason.WRONG_GROUP,
        group="women",
        can_resubmit=True,
    )
    db_session.add(request)
    await db_session.commit()

    result = await registration_service.on_first_sign_in(
        db_session, subject_id=request.id, email=request.email, name=request.name
    )

    assert result.status == "rejected"
    assert result.can_resubmit is True
    assert result.previous_submission["rejection_reason"] == "wrong_group"
    assert result.previous_submission["group"] == "women"


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_adult_submission_creates_pending_request(db_session):
    request = await registration_service.submit_registration(
        db_session, **_adult_submission()
    )

    assert isinstance(request, RegistrationRequest)
    assert request.status == RegistrationStatus.PENDING
    assert request.email == "new.player@example.com"
    assert request.groups == ["Men"]
    assert request.member_type == MemberType.STUDENT
    assert request.consent_given_at is not None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_submission_requires_consent(db_session):
    with pytest.raises(ValidationError, match="Consent"):
        await registration_service.submit_registration(
            db_session, **_adult_submission(consent=False)
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_adult_must_join_an_adult_group(db_session):
    with pytest.raises(ValidationError, match="18\\+"):
        await registration_service.submit_registration(
            db_session, **_adult_submission(groups=["U-18"])
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_under_18_needs_payment_manager(db_session):
    with pytest.raises(ValidationError, match="payment manager"):
        await registration_service.submit_registration(
            db_session,
            **_adult_submission(groups=["U-15"], year_of_birth=2011),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_senior_youth_squads_require_age_14(db_session):
    parent = MemberFactory.create()
    db_session.add(parent)
    await db_session.commit()

    with pytest.raises(ValidationError, match="U-15 requires age 14"):
        await registration_service.submit_registration(
            db_session,
            **_adult_submission(
                groups=["U-15"],
                year_of_birth=2014,
                has_payment_manager=True,
                payment_manager_id=parent.id,
            ),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_submission_with_taken_email_is_duplicate(db_session):
    db_session.add(MemberFactory.create(email="new.player@example.com"))
    await db_session.commit()

    with pytest.raises(DuplicateEmailError):
        await registration_service.submit_registration(
            db_session, **_adult_submission()
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_member_submission_completes_profile_in_place(db_session):
    member = MemberFactory.create(profile_completed=False, phone=None, groups=[])
    db_session.add(member)
    await db_session.commit()

    result = await registration_service.submit_registration(
        db_session,
        **_adult_submission(subject_id=member.id, email=member.email),
    )

    assert isinstance(result, Member)
    assert result.profile_completed is True
    assert result.groups == ["Men"]
    assert await db_session.get(RegistrationRequest, member.id) is None


# ---------------------------------------------------------------------------
# Approval / rejection / resubmission
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_approve_creates_member_and_deletes_request(db_session):
    admin = AdminFactory.create()
    request = RegistrationRequestFactory.create(phone=None)
    db_session.add_all([admin, request])
    await db_session.commit()

    member = await registration_service.approve_registration(
        db_session,
        request_id=request.id,
        approver_id=admin.id,
        overrides={"phone": "07700900999", "notes": "Welcome"},
    )

    assert member.id == request.id
    assert member.email == request.email
    assert member.phone == "07700900999"
    assert member.profile_completed is True
    assert member.approval["approved_by"] == admin.id
    assert member.approval["notes"] == "Welcome"
    assert member.admin_history[0]["action"] == "approved"
    assert await db_session.get(RegistrationRequest, request.id) is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_approve_without_phone_leaves_profile_incomplete(db_session):
    admin = AdminFactory.create()
    request = RegistrationRequestFactory.create(phone=None)
    db_session.add_all([admin, request])
    await db_session.commit()

    member = await registration_service.approve_registration(
        db_session, request_id=request.id, approver_id=admin.id
    )

    assert member.profile_completed is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_legacy_group_override_sets_groups(db_session):
    admin = AdminFactory.create()
    request = RegistrationRequestFactory.create()
    db_session.add_all([admin, request])
    await db_session.commit()

    member = await registration_service.approve_registration(
        db_session,
        request_id=request.id,
        approver_id=admin.id,
        overrides={"group": "men"},
    )

    assert member.group == "men"
    assert member.groups == ["Men"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_approval_finds_nothing(db_session):
    admin = AdminFactory.create()
    request = RegistrationRequestFactory.create()
    db_session.add_all([admin, request])
    await db_session.commit()

    await registration_service.approve_registration(
        db_session, request_id=request.id, approver_id=admin.id
    )
    with pytest.raises(NotFoundError):
        await registration_service.approve_registration(
            db_session, request_id=request.id, approver_id=admin.id
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_approve_with_email_already_taken_is_duplicate(db_session):
    admin = AdminFactory.create()
    request = RegistrationRequestFactory.create()
    db_session.add_all(
        [admin, request, MemberFactory.create(email=request.email)]
    )
    await db_session.commit()

    with pytest.raises(DuplicateEmailError):
        await registration_service.approve_registration(
            db_session, request_id=request.id, approver_id=admin.id
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reject_records_history(db_session):
    request = RegistrationRequestFactory.create()
    db_session.add(request)
    await db_session.commit()

    rejected = await registration_service.reject_registration(
        db_session,
        request_id=request.id,
        approver_id="admin-1",
        reason=RejectionReason.INCOMPLETE,
        notes="Missing phone",
        allow_resubmit=False,
    )

    assert rejected.status == RegistrationStatus.REJECTED
    assert rejected.can_resubmit is False
    assert rejected.rejection_history[-1]["reason"] == "incomplete"
    assert rejected.rejection_history[-1]["previous_status"] == "pending"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reject_of_approved_request_fails(db_session):
    request = RegistrationRequestFactory.create(status=RegistrationStatus.APPROVED)
    db_session.add(request)
    await db_session.commit()

    with pytest.raises(AlreadyApprovedError):
        await registration_service.reject_registration(
            db_session,
            request_id=request.id,
            approver_id="admin-1",
            reason=RejectionReason.OTHER,
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_resubmit_reopens_rejected_request(db_session):
    request = RegistrationRequestFactory.create(
        status=RegistrationStatus.REJECTED,
        rejection_reason=RejectionReason.WRONG_GROUP,
        can_resubmit=True,
    )
    db_session.add(request)
    await db_session.commit()

    resubmitted = await registration_service.resubmit_registration(
        db_session,
        subject_id=request.id,
        group="Women",
        member_type="standard",
        phone=" 07700900555 ",
    )

    assert resubmitted.status == RegistrationStatus.PENDING
    assert resubmitted.groups == ["Women"]
    assert resubmitted.phone == "07700900555"
    assert resubmitted.resubmission_count == 1
    assert resubmitted.last_rejection_reason == "wrong_group"
    assert resubmitted.rejection_reason is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_resubmit_requires_rejected_state(db_session):
    request = RegistrationRequestFactory.create()
    db_session.add(request)
    await db_session.commit()

    with pytest.raises(NotInRejectedStateError):
        await registration_service.resubmit_registration(
            db_session,
            subject_id=request.id,
            group="women",
            member_type="standard",
            phone="0770",
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_resubmit_blocked_when_disallowed(db_session):
    request = RegistrationRequestFactory.create(
        status=RegistrationStatus.REJECTED, can_resubmit=False
    )
    db_session.add(request)
    await db_session.commit()

    with pytest.raises(ResubmissionDisallowedError):
        await registration_service.resubmit_registration(
            db_session,
            subject_id=request.id,
            group="women",
            member_type="standard",
            phone="0770",
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_fresh_submission_blocked_when_resubmission_disallowed(db_session):
    request = RegistrationRequestFactory.create(
        status=RegistrationStatus.REJECTED, can_resubmit=False
    )
    db_session.add(request)
    await db_session.commit()

    with pytest.raises(ResubmissionDisallowedError):
        await registration_service.submit_registration(
            db_session, **_adult_submission(subject_id=request.id)
        )

    await db_session.refresh(request)
    assert request.status == RegistrationStatus.REJECTED
    assert request.can_resubmit is False
    assert request.resubmission_count == 0


# ---------------------------------------------------------------------------
# Payment-manager delegation
# ---------------------------------------------------------------------------


async def _youth_submission(db_session, parent):
    return await registration_service.submit_registration(
        db_session,
        **_adult_submission(
            subject_id="youth-1",
            email="youth@example.com",
            name="Young Player",
            groups=["U-15"],
            year_of_birth=2012,
            month_of_birth=1,
            has_payment_manager=True,
            payment_manager_id=parent.id,
        ),
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_youth_submission_waits_on_parent(db_session):
    parent = MemberFactory.create(name="Parent One")
    db_session.add(parent)
    await db_session.commit()

    request = await _youth_submission(db_session, parent)

    assert request.status == RegistrationStatus.PENDING_PARENT_APPROVAL
    assert request.payment_manager_name == "Parent One"
    parent_request = await db_session.get(ParentRequest, request.parent_request_id)
    assert parent_request.parent_id == parent.id
    assert parent_request.status == ParentRequestStatus.PENDING

    mine = await registration_service.my_requests(db_session, subject_id=parent.id)
    assert [p.id for p in mine["parent_requests"]] == [parent_request.id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_resubmitting_without_manager_closes_parent_request(db_session):
    parent = MemberFactory.create()
    db_session.add(parent)
    await db_session.commit()
    first = await _youth_submission(db_session, parent)
    parent_request_id = first.parent_request_id

    request = await registration_service.submit_registration(
        db_session,
        **_adult_submission(
            subject_id="youth-1",
            email="youth@example.com",
            name="Young Player",
        ),
    )

    assert request.status == RegistrationStatus.PENDING
    assert request.parent_request_id is None
    stale = await db_session.get(ParentRequest, parent_request_id)
    assert stale.status == ParentRequestStatus.REJECTED
    assert stale.resolved_by == "youth-1"
    mine = await registration_service.my_requests(db_session, subject_id=parent.id)
    assert mine["parent_requests"] == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_parent_approval_then_admin_approval_links_youth(db_session):
    parent = MemberFactory.create()
    admin = AdminFactory.create()
    db_session.add_all([parent, admin])
    await db_session.commit()
    request = await _youth_submission(db_session, parent)

    decided = await registration_service.approve_delegation(
        db_session, parent_request_id=request.parent_request_id, parent_id=parent.id
    )
    assert decided.status == ParentRequestStatus.APPROVED
    assert request.status == RegistrationStatus.PENDING_ADMIN_APPROVAL
    assert request.parent_approved_by == parent.id

    youth = await registration_service.approve_registration(
        db_session, request_id=request.id, approver_id=admin.id
    )

    assert youth.payment_manager_id == parent.id
    assert youth.has_payment_manager is True
    assert youth.approval["parent_approved_by"] == parent.id
    assert youth.id in parent.linked_youth_ids


@pytest.mark.asyncio
@pytest.mark.unit
async def test_only_the_named_parent_can_decide(db_session):
    parent = MemberFactory.create()
    other = MemberFactory.create()
    db_session.add_all([parent, other])
    await db_session.commit()
    request = await _youth_submission(db_session, parent)

    with pytest.raises(AuthorizationError):
        await registration_service.approve_delegation(
            db_session, parent_request_id=request.parent_request_id, parent_id=other.id
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_parent_rejection_marks_registration(db_session):
    parent = MemberFactory.create()
    db_session.add(parent)
    await db_session.commit()
    request = await _youth_submission(db_session, parent)

    decided = await registration_service.reject_delegation(
        db_session,
        parent_request_id=request.parent_request_id,
        parent_id=parent.id,
        reason="Not my child",
    )

    assert decided.status == ParentRequestStatus.REJECTED
    assert request.status == RegistrationStatus.REJECTED_BY_PARENT
    assert request.can_resubmit is True

    with pytest.raises(StateConflictError):
        await registration_service.approve_delegation(
            db_session, parent_request_id=decided.id, parent_id=parent.id
        )
