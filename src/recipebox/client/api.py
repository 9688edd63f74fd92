"""Async client for the RecipeBox REST API with local fallback.

Reads prefer the server and fall back to :class:`SessionCache` when the server
is unreachable or answers with an error. Mutations that cannot reach the
server are applied to the cache and reported as unsynced.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Self

import aiohttp
import structlog

from recipebox.client.cache import CachedRecipe, SessionCache, merge
from recipebox.client.validators import validate_signup_form
from recipebox.errors import ValidationError

logger = structlog.get_logger(__name__)


class ApiError(Exception):
    """Request failed. ``status`` is None when the server could not be reached."""

    def __init__(self, status: int | None, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    @property
    def retryable(self) -> bool:
        return self.status is None or self.status >= 500


@dataclass
class ListResult:
    recipes: list[CachedRecipe]
    synced: bool
    error: str | None = None
    stale: bool = False  # a newer fetch started before this one finished
    discarded: list[CachedRecipe] = field(default_factory=list)  # local entries the server overrode


@dataclass
class MutationResult:
    recipe: CachedRecipe | None
    synced: bool
    error: str | None = None


class RecipeApiClient:
    """REST client bound to one SessionCache.

    Use as an async context manager so the underlying aiohttp session is closed.
    """

    def __init__(
        self,
        base_url: str,
        cache: SessionCache,
        *,
        timeout: float = 10.0,
        retries: int = 1,
        backoff: float = 1.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._session: aiohttp.ClientSession | None = None
        self._generation = 0

    async def __aenter__(self) -> Self:
        self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    # === Auth ===
    async def signup(self, username: str, password: str, confirm_password: str) -> dict[str, Any]:
        validate_signup_form(username, password, confirm_password)
        body = await self._request("POST", "/api/auth/signup", json={"username": username, "password": password}, auth=False)
        self.cache.set_session(body["token"], body["id"])
        return body

    async def login(self, username: str, password: str) -> dict[str, Any]:
        if not username or not password:
            raise ValidationError("Username and password are required")
        body = await self._request("POST", "/api/auth/login", json={"username": username, "password": password}, auth=False)
        self.cache.set_session(body["token"], body["id"])
        return body

    def logout(self) -> None:
        self.cache.clear_token()

    async def me(self) -> dict[str, Any]:
        return await self._request("GET", "/api/auth/me")

    # === Recipes ===
    async def list_recipes(self) -> ListResult:
        """Fetch the server list (with retries) or fall back to the cached copy."""
        self._generation += 1
        generation = self._generation

        if not self.cache.token:
            return ListResult(recipes=self.cache.recipes(), synced=False, error="Not signed in")

        last_error: ApiError | None = None
        for attempt in range(1, self.retries + 2):
            try:
                body = await self._request("GET", "/api/recipes")
            except ApiError as e:
                last_error = e
                if e.retryable and attempt <= self.retries:
                    await asyncio.sleep(self.backoff * attempt)
                    continue
                break

            if generation != self._generation:
                logger.debug("stale_list_response_discarded", generation=generation, latest=self._generation)
                return ListResult(recipes=self.cache.recipes(), synced=False, stale=True)

            server_list = [CachedRecipe.model_validate(item) for item in body]
            effective, discarded = merge(server_list, self.cache.recipes())
            self.cache.replace_recipes(effective)
            if discarded:
                logger.info("local_changes_discarded", count=len(discarded))
            return ListResult(recipes=effective, synced=True, discarded=discarded)

        logger.warning("list_recipes_fallback", error=str(last_error))
        return ListResult(recipes=self.cache.recipes(), synced=False, error=str(last_error))

    async def count_recipes(self) -> int:
        body = await self._request("GET", "/api/recipes/count")
        return int(body["count"])

    async def create_recipe(
        self,
        title: str,
        image: str | None = None,
        calories: float | None = None,
        ingredients: list[dict[str, Any]] | None = None,
    ) -> MutationResult:
        if not title or not title.strip():
            raise ValidationError("Title is required")
        payload = {"title": title, "image": image, "calories": calories, "ingredients": ingredients or []}
        try:
            body = await self._request("POST", "/api/recipes", json=payload)
        except ApiError as e:
            recipe = self.cache.add_local(payload)
            return MutationResult(recipe=recipe, synced=False, error=e.message)
        recipe = CachedRecipe.model_validate(body)
        self.cache.put(recipe)
        return MutationResult(recipe=recipe, synced=True)

    async def update_recipe(self, recipe_id: int | str, **fields: Any) -> MutationResult:
        existing = self.cache.get(recipe_id)
        if existing is not None and existing.is_local:
            return MutationResult(recipe=self.cache.update_local(recipe_id, fields), synced=False)
        try:
            body = await self._request("PUT", f"/api/recipes/{recipe_id}", json=fields)
        except ApiError as e:
            return MutationResult(recipe=self.cache.update_local(recipe_id, fields), synced=False, error=e.message)
        recipe = CachedRecipe.model_validate(body)
        self.cache.put(recipe)
        return MutationResult(recipe=recipe, synced=True)

    async def delete_recipe(self, recipe_id: int | str) -> MutationResult:
        existing = self.cache.get(recipe_id)
        if existing is not None and existing.is_local:
            self.cache.remove(recipe_id)
            return MutationResult(recipe=existing, synced=False)
        try:
            await self._request("DELETE", f"/api/recipes/{recipe_id}")
        except ApiError as e:
            self.cache.remove(recipe_id)
            return MutationResult(recipe=existing, synced=False, error=e.message)
        self.cache.remove(recipe_id)
        return MutationResult(recipe=existing, synced=True)

    # === Transport ===
    async def _request(self, method: str, path: str, *, json: Any = None, auth: bool = True) -> Any:
        if self._session is None:
            raise RuntimeError("RecipeApiClient must be used as an async context manager")

        headers = {"Accept": "application/json"}
        if auth and self.cache.token:
            headers["Authorization"] = f"Bearer {self.cache.token}"

        try:
            async with self._session.request(method, f"{self.base_url}{path}", json=json, headers=headers) as resp:
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = None
                status = resp.status
                reason = resp.reason or ""
        except TimeoutError as e:
            raise ApiError(None, "Request timed out") from e
        except aiohttp.ClientError as e:
            raise ApiError(None, f"Backend unreachable: {e}") from e

        if status >= 400:
            message = body.get("message", reason) if isinstance(body, dict) else reason
            if status == 401 and auth:
                # Server rejected the token; forget it so the next call does not resend it
                self.cache.clear_token()
            raise ApiError(status, message or f"HTTP {status}")
        return body
