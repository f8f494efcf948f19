"""Enum definitions for members service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class MemberRole(str, enum.Enum):
    PLAYER = "player"
    ADMIN = "admin"


class MemberStatus(str, enum.Enum):
    """Account status of an approved member. ``removed`` is a soft delete."""

    ACTIVE = "active"
    DISABLED = "disabled"
    REMOVED = "removed"


class MemberType(str, enum.Enum):
    """Membership tier; students get the fee discount."""

    STANDARD = "standard"
    STUDENT = "student"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"


class RegistrationStatus(str, enum.Enum):
    """Lifecycle of a prospective member's registration request.

    ``pending_parent_approval`` waits on the named payment manager,
    ``pending_admin_approval`` follows the payment manager's consent.
    """

    PENDING = "pending"
    PENDING_PARENT_APPROVAL = "pending_parent_approval"
    PENDING_ADMIN_APPROVAL = "pending_admin_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    REJECTED_BY_PARENT = "rejected_by_parent"


class RejectionReason(str, enum.Enum):
    INCORRECT_INFO = "incorrect_info"
    INCOMPLETE = "incomplete"
    WRONG_GROUP = "wrong_group"
    DUPLICATE = "duplicate"
    OTHER = "other"


class ParentRequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class KidStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class StatusAction(str, enum.Enum):
    """Admin actions recorded in a member's status history."""

    DISABLE = "disable"
    ENABLE = "enable"
    REMOVE = "remove"
    RESTORE = "restore"
    PROMOTE = "promote"
    DEMOTE = "demote"


class ProfileKind(str, enum.Enum):
    """Which kind of subject a member is currently acting as."""

    SELF = "self"
    KID = "kid"
    YOUTH = "youth"


# Cohort names a member may belong to. "Kids" is an event target only.
MEMBER_GROUPS = ("Men", "Women", "U-13", "U-15", "U-18")
ADULT_GROUPS = ("Men", "Women")
