"""Bearer token models."""

from typing import NewType

from pydantic import BaseModel, Field

AuthToken = NewType("AuthToken", str)


class TokenClaims(BaseModel):
    """JWT payload. iat/exp are Unix timestamps in seconds."""

    id: int
    username: str
    iat: int
    exp: int


class AuthResult(BaseModel):
    """Successful sign-up or login."""

    token: str = Field(..., description="Bearer token for subsequent requests")
    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Username")
