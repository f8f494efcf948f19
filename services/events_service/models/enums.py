"""Enum definitions for events service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class EventType(str, enum.Enum):
    NET_PRACTICE = "net_practice"
    LEAGUE_MATCH = "league_match"
    FAMILY_EVENT = "family_event"
    MEMBERSHIP_FEE = "membership_fee"


class EventStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


class SubjectType(str, enum.Enum):
    """Who an attendance record or participation request is for."""

    ADULT = "adult"  # members and linked youth accounts
    KID = "kid"


class AttendingChoice(str, enum.Enum):
    YES = "YES"
    NO = "NO"


class PaymentStatus(str, enum.Enum):
    """Self-service stops at PENDING; PAID and REJECTED are admin decisions."""

    UNPAID = "UNPAID"
    PENDING = "PENDING"
    PAID = "PAID"
    REJECTED = "REJECTED"


class RecordStatus(str, enum.Enum):
    """Soft status of an attendance record; mirrors the kid's profile status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AttendanceSource(str, enum.Enum):
    RSVP = "rsvp"
    ADMIN = "admin"
    PARTICIPATION = "participation"
    PAYMENT = "payment"


EVENT_TARGET_GROUPS = ("Men", "Women", "U-13", "U-15", "U-18", "Kids")
KIDS_GROUP = "Kids"
