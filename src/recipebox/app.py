from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from pymongo.asynchronous.database import AsyncDatabase

from recipebox.config import Config
from recipebox.core.core import Core
from recipebox.core.modules.auth.models import AuthResult, AuthToken
from recipebox.core.modules.recipe.models import Recipe, RecipeCreate, RecipeUpdate
from recipebox.core.modules.user.models import Identity
from recipebox.core.modules.user.validators import validate_credentials_present, validate_signup
from recipebox.errors import ForbiddenError


class App:
    """Facade for all application operations; callers hand in an already verified Identity."""

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, database)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    @property
    def config(self) -> Config:
        return self._core.config

    def is_store_ready(self) -> bool:
        return self._core.store.ready

    def ensure_store_ready(self) -> None:
        """Raise UnavailableError if the store could not be opened."""
        self._core.store.ensure_ready()

    # === Auth ===
    async def signup(self, username: str | None, password: str | None) -> AuthResult:
        """Create an account and return its first token."""
        username, password = validate_signup(username, password)
        return await self._core.services.auth.signup(username, password)

    async def login(self, username: str | None, password: str | None) -> AuthResult:
        """Authenticate and return a fresh token."""
        username, password = validate_credentials_present(username, password)
        return await self._core.services.auth.login(username, password)

    def verify_token(self, auth_token: AuthToken) -> Identity:
        """Resolve a bearer token to its identity. Raises AuthError."""
        return self._core.services.auth.verify(auth_token)

    # === Recipes ===
    async def list_recipes(self, identity: Identity) -> list[Recipe]:
        return await self._core.services.recipe.list_recipes(identity.id)

    async def count_recipes(self, identity: Identity) -> int:
        return await self._core.services.recipe.count_recipes(identity.id)

    async def create_recipe(self, identity: Identity, data: RecipeCreate) -> Recipe:
        """Create a recipe owned by the verified caller."""
        return await self._core.services.recipe.create_recipe(identity.id, data)

    async def create_anonymous_recipe(self, owner_id: int, data: RecipeCreate) -> Recipe:
        """Create a recipe for a client-asserted owner (legacy compatibility mode)."""
        if not self.config.allow_anonymous_recipes:
            raise ForbiddenError("Anonymous recipe creation is disabled")
        return await self._core.services.recipe.create_recipe(owner_id, data)

    async def update_recipe(self, identity: Identity, recipe_id: int, update: RecipeUpdate) -> Recipe:
        """Partially update a recipe (owner only)."""
        return await self._core.services.recipe.update_recipe(identity.id, recipe_id, update)

    async def delete_recipe(self, identity: Identity, recipe_id: int) -> None:
        """Delete a recipe (owner only)."""
        await self._core.services.recipe.delete_recipe(identity.id, recipe_id)
