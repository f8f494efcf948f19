"""Domain error taxonomy shared by every service.

Core services raise these; ``libs.common.error_handler`` renders them as
``{"error": message}`` with the class status code. ``message`` is the
user-facing text; the class name is the internal kind.
"""

from typing import Any, Optional


class ClubError(Exception):
    """Base class for expected, user-visible failures."""

    status_code: int = 500
    default_message: str = "Unexpected error"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


# ---------------------------------------------------------------------------
# Taxonomy roots
# ---------------------------------------------------------------------------


class ValidationError(ClubError):
    status_code = 400
    default_message = "Invalid input"


class AuthenticationError(ClubError):
    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(ClubError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ClubError):
    status_code = 404
    default_message = "Not found"


class StateConflictError(ClubError):
    status_code = 409
    default_message = "Operation not allowed in the current state"


class InfrastructureError(ClubError):
    status_code = 500
    default_message = "Storage failure"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class InvalidTokenError(AuthenticationError):
    default_message = "Invalid token"


# ---------------------------------------------------------------------------
# Registration lifecycle
# ---------------------------------------------------------------------------


class AccountSetupError(InfrastructureError):
    default_message = (
        "Your registration is approved but your account is not set up. "
        "Please contact an admin."
    )


class AlreadyApprovedError(StateConflictError):
    default_message = "Request already approved"


class NotInRejectedStateError(StateConflictError):
    default_message = "Registration is not in rejected state"


class ResubmissionDisallowedError(AuthorizationError):
    default_message = "Resubmission is not allowed for this registration"


class DuplicateEmailError(StateConflictError):
    default_message = "An account with this email already exists"


# ---------------------------------------------------------------------------
# Member status
# ---------------------------------------------------------------------------


class InvalidActionError(ValidationError):
    default_message = "Invalid action"


class InvalidTransitionError(StateConflictError):
    default_message = "Invalid status transition"


class SelfActionError(AuthorizationError):
    default_message = "Cannot change your own account status"


class LastAdminError(AuthorizationError):
    default_message = (
        "Cannot disable/remove the last active admin. Promote another member first."
    )


# ---------------------------------------------------------------------------
# Delegation
# ---------------------------------------------------------------------------


class NotAccessibleError(AuthorizationError):
    default_message = "Profile is not accessible to this user"


# ---------------------------------------------------------------------------
# Events, attendance and payments
# ---------------------------------------------------------------------------


class EventLockedError(StateConflictError):
    default_message = "Event has started or already passed"


class AttendanceCutoffError(StateConflictError):
    default_message = "Attendance is closed for this event"


class PaymentStateError(StateConflictError):
    default_message = "Payment already marked"


class NotAttendedYetError(StateConflictError):
    default_message = (
        "Awaiting attendance confirmation. Admin must confirm attendance "
        "before payment can be marked."
    )


class NoValidPaymentsError(ValidationError):
    default_message = "No valid payments to update"


class ParticipationDisabledError(StateConflictError):
    default_message = "Participation requests not permitted for this event"


class TooEarlyError(StateConflictError):
    default_message = "Cut-off not reached yet"


class EventStartedError(StateConflictError):
    default_message = "Event has already started"


class DuplicateRequestError(StateConflictError):
    default_message = "Participation request already exists"
