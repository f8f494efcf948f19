from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.identity import read_session_artifact, verify_assertion
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.errors import AuthenticationError, AuthorizationError
from libs.db.session import get_async_db
from services.members_service.models import Member, MemberRole, MemberStatus

security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Resolve the caller from the session cookie, or from a Bearer identity
    assertion for callers who have no session yet (pending registrations).
    """
    cookie = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if cookie:
        return read_session_artifact(cookie)
    if token is not None:
        return verify_assertion(token.credentials)
    raise AuthenticationError("Not authenticated")


async def get_current_member(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_async_db)],
) -> Member:
    """
    Load the Member behind the caller; refuse unknown, disabled or removed accounts.
    """
    member = await db.get(Member, current_user.user_id)
    if member is None:
        raise AuthorizationError("Not registered")
    if member.status == MemberStatus.DISABLED:
        raise AuthorizationError("Your account is disabled")
    if member.status == MemberStatus.REMOVED:
        raise AuthorizationError("Your account has been removed")
    return member


async def require_admin(
    member: Annotated[Member, Depends(get_current_member)],
) -> Member:
    """
    Ensure the caller is an active admin.
    """
    if member.role != MemberRole.ADMIN:
        raise AuthorizationError("Admin access required")
    return member
