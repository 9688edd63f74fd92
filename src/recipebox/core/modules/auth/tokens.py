from datetime import datetime, timedelta

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from recipebox.core.modules.auth.models import AuthToken, TokenClaims
from recipebox.core.modules.user.models import Identity
from recipebox.errors import AuthError
from recipebox.utils import now

ALGORITHM = "HS256"


class TokenSigner:
    """Signs and verifies stateless HS256 bearer tokens."""

    def __init__(self, secret: str, ttl: timedelta) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._ttl = ttl

    def issue(self, identity: Identity, issued_at: datetime | None = None) -> AuthToken:
        issued_at = issued_at or now()
        claims = TokenClaims(
            id=identity.id,
            username=identity.username,
            iat=int(issued_at.timestamp()),
            exp=int((issued_at + self._ttl).timestamp()),
        )
        return AuthToken(jwt.encode(claims.model_dump(), self._secret, algorithm=ALGORITHM))

    def verify(self, token: str) -> Identity:
        """Decode the token, raising AuthError if it is malformed, forged or expired."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
            claims = TokenClaims.model_validate(payload)
        except (JWTError, PydanticValidationError) as e:
            raise AuthError("Invalid token") from e
        return Identity(id=claims.id, username=claims.username)
