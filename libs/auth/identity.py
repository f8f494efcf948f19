"""Identity assertion verification and session token issuance.

The identity provider signs a JWT carrying ``sub``, ``email``, ``name`` and
``picture``. After a successful sign-in we issue our own short-lived session
token, signed with SESSION_SECRET, carrying the same subject.
"""

from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.errors import InvalidTokenError

SESSION_TOKEN_TYPE = "session"


def verify_assertion(token: str) -> AuthUser:
    """Validate an identity-provider assertion and return its claims."""
    settings = get_settings()
    options = {"verify_aud": settings.IDP_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.IDP_JWT_SECRET,
            algorithms=[settings.IDP_JWT_ALGORITHM],
            audience=settings.IDP_AUDIENCE,
            options=options,
        )
        return AuthUser(**payload)
    except (JWTError, PydanticValidationError) as exc:
        raise InvalidTokenError("Invalid identity token") from exc


def issue_session_artifact(user: AuthUser, ttl: Optional[timedelta] = None) -> str:
    """Sign a session token for an already verified identity."""
    settings = get_settings()
    ttl = ttl or timedelta(days=settings.SESSION_COOKIE_DAYS)
    now = utc_now()
    claims = {
        "sub": user.user_id,
        "email": user.email,
        "name": user.name,
        "typ": SESSION_TOKEN_TYPE,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(claims, settings.SESSION_SECRET, algorithm="HS256")


def read_session_artifact(token: str) -> AuthUser:
    """Validate a session token issued by ``issue_session_artifact``."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SESSION_SECRET, algorithms=["HS256"])
    except JWTError as exc:
        raise InvalidTokenError("Session expired. Please sign in again.") from exc
    if payload.get("typ") != SESSION_TOKEN_TYPE:
        raise InvalidTokenError("Invalid session")
    try:
        return AuthUser(**payload)
    except PydanticValidationError as exc:
        raise InvalidTokenError("Invalid session") from exc
