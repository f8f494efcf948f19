"""Members Service schemas package.

Schema files:
  - schemas/member.py      : Member, status/role updates, active profile
  - schemas/registration.py: sign-in, registration, parent requests
  - schemas/kid.py         : Kid profiles
"""

from services.members_service.schemas.kid import (  # noqa: F401
    KidCreate,
    KidResponse,
    LinkParentRequest,
)
from services.members_service.schemas.member import (  # noqa: F401
    MemberDetailResponse,
    MemberResponse,
    MemberRoleUpdate,
    MemberStatusUpdate,
    ProfileResponse,
    SwitchProfileRequest,
)
from services.members_service.schemas.registration import (  # noqa: F401
    MyRequestsResponse,
    ParentRequestDecision,
    ParentRequestResponse,
    RegistrationApprove,
    RegistrationReject,
    RegistrationResponse,
    RegistrationResubmit,
    RegistrationSubmit,
    SessionLoginRequest,
    SessionLoginResponse,
    SubmitRegistrationResponse,
)
