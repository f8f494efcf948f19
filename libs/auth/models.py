from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    Identity claims for an authenticated caller.

    Built from either an identity-provider assertion or our own session token;
    ``user_id`` is the provider's subject id and doubles as the member id.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    picture: Optional[str] = None
