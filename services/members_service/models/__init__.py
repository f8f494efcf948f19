"""Members Service models package.

Re-exports all models and enums so that:
  - ``from services.members_service.models import Member`` works
  - Alembic env.py sees every table through one import

Model definitions are split across:
  - models/member.py      : Member
  - models/registration.py: RegistrationRequest, ParentRequest
  - models/kid.py         : KidProfile
"""

from services.members_service.models.enums import (  # noqa: F401
    ADULT_GROUPS,
    MEMBER_GROUPS,
    Gender,
    KidStatus,
    MemberRole,
    MemberStatus,
    MemberType,
    ParentRequestStatus,
    ProfileKind,
    RegistrationStatus,
    RejectionReason,
    StatusAction,
)
from services.members_service.models.kid import KidProfile  # noqa: F401
from services.members_service.models.member import Member  # noqa: F401
from services.members_service.models.registration import (  # noqa: F401
    ParentRequest,
    RegistrationRequest,
)

__all__ = [
    "ADULT_GROUPS",
    "MEMBER_GROUPS",
    "Gender",
    "KidProfile",
    "KidStatus",
    "Member",
    "MemberRole",
    "MemberStatus",
    "MemberType",
    "ParentRequest",
    "ParentRequestStatus",
    "ProfileKind",
    "RegistrationRequest",
    "RegistrationStatus",
    "RejectionReason",
    "StatusAction",
]
