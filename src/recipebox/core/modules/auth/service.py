from datetime import timedelta

import bcrypt
import structlog

from recipebox.core.core import Service
from recipebox.core.modules.auth.models import AuthResult, AuthToken
from recipebox.core.modules.auth.tokens import TokenSigner
from recipebox.core.modules.user.models import Identity, User
from recipebox.core.modules.user.validators import MAX_PASSWORD_BYTES
from recipebox.errors import AuthError

logger = structlog.get_logger(__name__)


class AuthService(Service):
    """Sign-up, login and bearer token verification."""

    def __init__(self) -> None:
        super().__init__()
        self._signer: TokenSigner | None = None
        self._dummy_hash: bytes | None = None

    @property
    def signer(self) -> TokenSigner:
        if self._signer is None:
            config = self.core.config
            self._signer = TokenSigner(config.jwt_secret, timedelta(days=config.token_ttl_days))
        return self._signer

    async def signup(self, username: str, password: str) -> AuthResult:
        """Create the account and mint its first token. Input must already be validated."""
        user = await self.core.services.user.create_user(username, password)
        return self._issue(user)

    async def login(self, username: str, password: str) -> AuthResult:
        """Check credentials and mint a fresh token; earlier tokens stay valid."""
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            # Sign-up never accepts such passwords, so this cannot match
            raise AuthError("Invalid credentials")

        user = await self.core.services.user.find_by_username(username)
        if user is None:
            # Burn a comparison anyway so unknown users cost as much as wrong passwords
            bcrypt.checkpw(password.encode("utf-8"), self._get_dummy_hash())
            logger.info("login_failed", username=username)
            raise AuthError("Invalid credentials")

        if not bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8")):
            logger.info("login_failed", username=username)
            raise AuthError("Invalid credentials")

        return self._issue(user)

    def verify(self, auth_token: AuthToken) -> Identity:
        """Resolve a bearer token to the identity that requested it."""
        return self.signer.verify(auth_token)

    def _issue(self, user: User) -> AuthResult:
        identity = Identity.from_domain(user)
        token = self.signer.issue(identity)
        return AuthResult(token=token, id=user.id, username=user.username)

    def _get_dummy_hash(self) -> bytes:
        if self._dummy_hash is None:
            salt = bcrypt.gensalt(rounds=self.core.config.bcrypt_rounds)
            self._dummy_hash = bcrypt.hashpw(b"recipebox-timing-equalizer", salt)
        return self._dummy_hash
