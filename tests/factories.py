"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs. Enum columns take enum members, not strings.

Usage:
    member = MemberFactory.create(email="custom@example.com")
    db_session.add(member)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timedelta, timezone

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _id(prefix: str = "uid") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _in_days(days: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@example.com"


# ---------------------------------------------------------------------------
# Members Service
# ---------------------------------------------------------------------------


class MemberFactory:
    @staticmethod
    def create(**overrides):
        from services.members_service.models import (
            Member,
            MemberRole,
            MemberStatus,
            MemberType,
        )

        defaults = {
            "id": _id("member"),
            "email": _unique_email(),
            "name": "Test Member",
            "role": MemberRole.PLAYER,
            "status": MemberStatus.ACTIVE,
            "gender": "Male",
            "groups": ["Men"],
            "member_type": MemberType.STANDARD,
            "phone": "07700900000",
            "year_of_birth": 1990,
            "month_of_birth": 6,
            "profile_completed": True,
            "has_payment_manager": False,
            "kid_ids": [],
            "linked_youth_ids": [],
            "admin_history": [],
            "status_history": [],
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Member(**defaults)


class AdminFactory:
    @staticmethod
    def create(**overrides):
        from services.members_service.models import MemberRole

        overrides.setdefault("id", _id("admin"))
        overrides.setdefault("name", "Test Admin")
        overrides.setdefault("role", MemberRole.ADMIN)
        return MemberFactory.create(**overrides)


class RegistrationRequestFactory:
    @staticmethod
    def create(**overrides):
        from services.members_service.models import (
            MemberType,
            RegistrationRequest,
            RegistrationStatus,
        )

        defaults = {
            "id": _id("reg"),
            "email": _unique_email(),
            "name": "Pending Player",
            "status": RegistrationStatus.PENDING,
            "gender": "Female",
            "groups": ["Women"],
            "member_type": MemberType.STANDARD,
            "phone": "07700900001",
            "year_of_birth": 1995,
            "month_of_birth": 3,
            "has_payment_manager": False,
            "resubmission_count": 0,
            "rejection_history": [],
            "consent_given_at": _now(),
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return RegistrationRequest(**defaults)


class ParentRequestFactory:
    @staticmethod
    def create(parent_id=None, youth_id=None, **overrides):
        from services.members_service.models import ParentRequest, ParentRequestStatus

        defaults = {
            "id": _id("preq"),
            "parent_id": parent_id or _id("member"),
            "youth_id": youth_id or _id("reg"),
            "youth_name": "Young Player",
            "youth_email": _unique_email(),
            "youth_groups": ["U-15"],
            "status": ParentRequestStatus.PENDING,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return ParentRequest(**defaults)


class KidFactory:
    @staticmethod
    def create(parent_id=None, **overrides):
        from services.members_service.models import KidProfile, KidStatus

        defaults = {
            "id": _id("kid"),
            "parent_id": parent_id or _id("member"),
            "name": "Test Kid",
            "year_of_birth": 2016,
            "month_of_birth": 4,
            "age": 10,
            "parent_emails": [],
            "linked_parents": [],
            "status": KidStatus.ACTIVE,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return KidProfile(**defaults)


# ---------------------------------------------------------------------------
# Events Service
# ---------------------------------------------------------------------------


class EventFactory:
    @staticmethod
    def create(**overrides):
        from services.events_service.models import Event, EventStatus, EventType

        defaults = {
            "id": _id("event"),
            "title": "Tuesday Nets",
            "event_type": EventType.NET_PRACTICE,
            "target_groups": ["Men", "Women"],
            "kids_event": False,
            "fee_pence": 2000,
            "starts_at": _in_days(7),
            "location": "Main Ground",
            "status": EventStatus.SCHEDULED,
            "created_by": _id("admin"),
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Event(**defaults)


class AttendanceFactory:
    @staticmethod
    def create(event_id=None, subject_id=None, **overrides):
        from services.events_service.models import (
            AttendanceRecord,
            AttendanceSource,
            AttendingChoice,
            PaymentStatus,
            RecordStatus,
            SubjectType,
        )

        defaults = {
            "id": _id("att"),
            "event_id": event_id or _id("event"),
            "subject_id": subject_id or _id("member"),
            "subject_type": SubjectType.ADULT,
            "name": "Test Member",
            "category": "men",
            "groups": ["Men"],
            "attending": AttendingChoice.YES,
            "attended": False,
            "source": AttendanceSource.RSVP,
            "fee_due_pence": 2000,
            "payment_status": PaymentStatus.UNPAID,
            "record_status": RecordStatus.ACTIVE,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return AttendanceRecord(**defaults)
