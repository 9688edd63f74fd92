import bcrypt
import structlog
from pymongo.errors import DuplicateKeyError

from recipebox.core.core import Service
from recipebox.core.modules.counter.models import Sequence
from recipebox.core.modules.user.models import User
from recipebox.errors import ConflictError

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Credential store: usernames, bcrypt hashes, integer ids."""

    collection_name = "users"

    async def on_start(self) -> None:
        """Create the unique username index."""
        await self.collection.create_index([("username", 1)], unique=True)

    async def find_by_username(self, username: str) -> User | None:
        doc = await self.collection.find_one({"username": username})
        if doc is None:
            return None
        return User.model_validate(doc)

    async def create_user(self, username: str, password: str) -> User:
        """Create user with hashed password.

        The pre-check and the unique index both end up as ConflictError, so a
        concurrent sign-up with the same name is indistinguishable from a plain duplicate.
        """
        if await self.find_by_username(username) is not None:
            raise ConflictError

        password_hash = self.hash_password(password)
        user_id = await self.core.services.counter.get_next_id(Sequence.USER)
        user = User(id=user_id, username=username, password_hash=password_hash)
        try:
            await self.collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError from e

        logger.info("user_created", user_id=user.id, username=username)
        return user

    def hash_password(self, password: str) -> str:
        rounds = self.core.config.bcrypt_rounds
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")
