"""HTTP tests for registration review, member administration and kids."""

import pytest
from services.members_service.app.main import app
from services.members_service.models import (
    KidProfile,
    Member,
    MemberRole,
    MemberStatus,
    RegistrationRequest,
)
from tests.conftest import make_member_user, override_auth
from tests.factories import (
    AdminFactory,
    KidFactory,
    MemberFactory,
    RegistrationRequestFactory,
)


async def _admin(db_session):
    admin = AdminFactory.create(id="admin-1", email="admin-1@example.com")
    db_session.add(admin)
    await db_session.commit()
    return admin


@pytest.mark.asyncio
@pytest.mark.integration
async def test_players_cannot_use_admin_routes(members_client, db_session):
    player = MemberFactory.create(id="player-1")
    db_session.add(player)
    await db_session.commit()

    with override_auth(app, make_member_user("player-1")):
        response = await members_client.get("/admin/registrations")

    assert response.status_code == 403
    assert response.json()["error"] == "Admin access required"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_approve_registration_creates_member(members_client, db_session):
    await _admin(db_session)
    db_session.add(
        RegistrationRequestFactory.create(id="reg-1", email="newbie@example.com")
    )
    await db_session.commit()

    with override_auth(app, make_member_user("admin-1")):
        listing = await members_client.get("/admin/registrations?status=pending")
        assert [r["id"] for r in listing.json()] == ["reg-1"]

        response = await members_client.post(
            "/admin/registrations/reg-1/approve", json={"member_type": "student"}
        )
        again = await members_client.post("/admin/registrations/reg-1/approve")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "reg-1"
    assert body["status"] == "active"
    assert body["member_type"] == "student"
    assert body["groups"] == ["Women"]

    assert again.status_code == 404
    assert await db_session.get(RegistrationRequest, "reg-1") is None
    assert await db_session.get(Member, "reg-1") is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reject_registration(members_client, db_session):
    await _admin(db_session)
    db_session.add(RegistrationRequestFactory.create(id="reg-2"))
    await db_session.commit()

    with override_auth(app, make_member_user("admin-1")):
        response = await members_client.post(
            "/admin/registrations/reg-2/reject",
            json={"reason": "wrong_group", "notes": "Pick the women's group"},
        )
        invalid = await members_client.post(
            "/admin/registrations/reg-2/reject", json={"reason": "bored"}
        )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "rejected"
    assert body["rejection_reason"] == "wrong_group"
    assert body["can_resubmit"] is True
    assert invalid.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_member_status_and_role_endpoints(members_client, db_session):
    await _admin(db_session)
    db_session.add(MemberFactory.create(id="player-2"))
    await db_session.commit()

    with override_auth(app, make_member_user("admin-1")):
        disabled = await members_client.patch(
            "/admin/members/player-2/status",
            json={"action": "disable", "reason": "Unpaid fees"},
        )
        self_action = await members_client.patch(
            "/admin/members/admin-1/status", json={"action": "disable"}
        )
        unknown = await members_client.patch(
            "/admin/members/player-2/status", json={"action": "explode"}
        )
        promoted = await members_client.patch(
            "/admin/members/player-2/role", json={"role": "admin"}
        )

    assert disabled.status_code == 200
    assert disabled.json()["status"] == "disabled"
    assert disabled.json()["status_history"][-1]["reason"] == "Unpaid fees"
    assert self_action.status_code == 403
    assert unknown.status_code == 400
    assert promoted.status_code == 200
    assert promoted.json()["role"] == MemberRole.ADMIN.value


@pytest.mark.asyncio
@pytest.mark.integration
async def test_disabled_admin_loses_access(members_client, db_session):
    db_session.add(AdminFactory.create(id="admin-off", status=MemberStatus.DISABLED))
    await db_session.commit()

    with override_auth(app, make_member_user("admin-off")):
        response = await members_client.get("/admin/members")

    assert response.status_code == 403
    assert response.json()["error"] == "Your account is disabled"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_kids_endpoints(members_client, db_session):
    await _admin(db_session)
    parent = MemberFactory.create(id="parent-1", email="parent@example.com")
    db_session.add(parent)
    await db_session.commit()

    with override_auth(app, make_member_user("admin-1")):
        created = await members_client.post(
            "/admin/kids",
            json={
                "parent_email": "parent@example.com",
                "name": "Junior",
                "year_of_birth": 2017,
            },
        )
        kid_id = created.json()["id"]
        deactivated = await members_client.patch(f"/admin/kids/{kid_id}/deactivate")
        twice = await members_client.patch(f"/admin/kids/{kid_id}/deactivate")
        reactivated = await members_client.patch(f"/admin/kids/{kid_id}/reactivate")

    assert created.status_code == 201
    assert created.json()["parent_id"] == "parent-1"
    assert deactivated.json()["status"] == "inactive"
    assert twice.status_code == 409
    assert reactivated.json()["status"] == "active"

    with override_auth(app, make_member_user("parent-1")):
        switched = await members_client.patch(
            "/me/active-profile", json={"profile_id": kid_id}
        )
        me = await members_client.get("/me")

    assert switched.status_code == 200
    assert switched.json()["kind"] == "kid"
    assert me.json()["active_profile"]["id"] == kid_id
    assert [k["id"] for k in me.json()["kids"]] == [kid_id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_switch_to_someone_elses_kid_is_refused(members_client, db_session):
    parent = MemberFactory.create(id="parent-2")
    kid = KidFactory.create()
    db_session.add_all([parent, kid])
    await db_session.commit()

    with override_auth(app, make_member_user("parent-2")):
        response = await members_client.patch(
            "/me/active-profile", json={"profile_id": kid.id}
        )

    assert response.status_code == 403
    assert await db_session.get(KidProfile, kid.id) is not None
