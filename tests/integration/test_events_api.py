"""HTTP tests for events, RSVPs, payments and participation requests."""

from datetime import datetime, timedelta, timezone

import pytest
from services.events_service.app.main import app
from services.events_service.models import AttendanceRecord, PaymentStatus
from tests.conftest import make_member_user, override_auth
from tests.factories import (
    AdminFactory,
    AttendanceFactory,
    EventFactory,
    MemberFactory,
)


async def _people(db_session):
    admin = AdminFactory.create(id="admin-1")
    player = MemberFactory.create(id="player-1", name="Pat Player")
    db_session.add_all([admin, player])
    await db_session.commit()
    return admin, player


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_creates_and_lists_event(events_client, db_session):
    await _people(db_session)
    starts_at = (datetime.now(timezone.utc) + timedelta(days=10)).isoformat()

    with override_auth(app, make_member_user("admin-1")):
        created = await events_client.post(
            "/admin/events",
            json={
                "title": "Friday Nets",
                "event_type": "net_practice",
                "starts_at": starts_at,
                "fee": 12.5,
                "target_groups": ["Men"],
            },
        )
    with override_auth(app, make_member_user("player-1")):
        listing = await events_client.get("/events")

    assert created.status_code == 201
    body = created.json()
    assert body["fee"] == 12.5
    assert body["created_by"] == "admin-1"
    assert [e["id"] for e in listing.json()] == [body["id"]]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_players_cannot_create_events(events_client, db_session):
    await _people(db_session)

    with override_auth(app, make_member_user("player-1")):
        response = await events_client.post(
            "/admin/events",
            json={
                "title": "Rogue Nets",
                "event_type": "net_practice",
                "starts_at": "2030-01-01T10:00:00Z",
            },
        )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_rsvp_and_mark_paid(events_client, db_session):
    await _people(db_session)
    event = EventFactory.create(starts_at=datetime.now(timezone.utc) + timedelta(days=7))
    db_session.add(event)
    await db_session.commit()

    with override_auth(app, make_member_user("player-1")):
        rsvp = await events_client.post(
            f"/events/{event.id}/attending", json={"attending": "YES"}
        )
        paid = await events_client.post(f"/events/{event.id}/paid", json={})
        again = await events_client.post(f"/events/{event.id}/paid", json={})
        mine = await events_client.get("/events/attendance/me")

    assert rsvp.status_code == 200
    assert rsvp.json()["attending"] == "YES"
    assert rsvp.json()["fee_due"] == 20.0
    assert paid.json()["payment_status"] == PaymentStatus.PENDING.value
    assert again.status_code == 409
    assert "error" in again.json()
    assert [r["event_id"] for r in mine.json()] == [event.id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_rsvp_after_cutoff_is_refused(events_client, db_session):
    await _people(db_session)
    event = EventFactory.create(starts_at=datetime.now(timezone.utc) + timedelta(hours=20))
    db_session.add(event)
    await db_session.commit()

    with override_auth(app, make_member_user("player-1")):
        rsvp = await events_client.post(
            f"/events/{event.id}/attending", json={"attending": "YES"}
        )
        late = await events_client.post(f"/events/{event.id}/request", json={})

    assert rsvp.status_code == 409
    assert late.status_code == 201
    assert late.json()["status"] == "pending"

    with override_auth(app, make_member_user("admin-1")):
        pending = await events_client.get("/admin/participation-requests?status=pending")
        approved = await events_client.post(
            f"/admin/participation-requests/{late.json()['id']}/approve"
        )

    assert [r["id"] for r in pending.json()] == [late.json()["id"]]
    assert approved.status_code == 200
    assert approved.json()["request"]["status"] == "approved"
    assert approved.json()["attendance"]["attended"] is True
    assert approved.json()["attendance"]["attending"] == "YES"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_updates_payments(events_client, db_session):
    await _people(db_session)
    event = EventFactory.create()
    db_session.add(event)
    await db_session.commit()
    db_session.add(
        AttendanceFactory.create(
            event_id=event.id,
            subject_id="player-1",
            payment_status=PaymentStatus.PENDING,
        )
    )
    await db_session.commit()

    with override_auth(app, make_member_user("admin-1")):
        pending = await events_client.get("/admin/payments?payment_status=PENDING")
        updated = await events_client.post(
            "/admin/payments/update",
            json={
                "status": "paid",
                "updates": [
                    {
                        "event_id": event.id,
                        "subject_id": "player-1",
                        "subject_type": "adult",
                    }
                ],
            },
        )
        nothing = await events_client.post(
            "/admin/payments/update",
            json={"status": "paid", "updates": [{"event_id": event.id}]},
        )

    assert [r["subject_id"] for r in pending.json()] == ["player-1"]
    assert updated.json() == {"updated": 1}
    assert nothing.status_code == 400
    record = await db_session.get(AttendanceRecord, pending.json()[0]["id"])
    assert record.payment_status == PaymentStatus.PAID
    assert record.confirmed_by == "admin-1"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_and_cancel_event(events_client, db_session):
    await _people(db_session)
    doomed = EventFactory.create()
    cancelled = EventFactory.create()
    db_session.add_all([doomed, cancelled])
    await db_session.commit()
    db_session.add(AttendanceFactory.create(event_id=doomed.id))
    await db_session.commit()

    with override_auth(app, make_member_user("admin-1")):
        deleted = await events_client.delete(f"/admin/events/{doomed.id}")
        gone = await events_client.get(f"/events/{doomed.id}")
        cancel = await events_client.post(f"/admin/events/{cancelled.id}/cancel")

    assert deleted.json() == {"ok": True, "attendance_deleted": 1}
    assert gone.status_code == 404
    assert cancel.json()["status"] == "cancelled"
