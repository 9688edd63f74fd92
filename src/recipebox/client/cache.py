"""Durable client-side copy of the session token and the last-known recipe list.

The server is authoritative: every successful list fetch replaces the cached
list through :func:`merge`. Changes made while the backend is unreachable are
kept locally with ``unsynced=True`` and are dropped by the next sync.
"""

import os
import uuid
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from recipebox.utils import now

logger = structlog.get_logger(__name__)

LOCAL_ID_PREFIX = "local-"


class CachedRecipe(BaseModel):
    """Recipe as the client sees it; ``id`` is a string for recipes never saved on the server."""

    id: int | str
    owner_id: int | None = None
    title: str
    image: str | None = None
    calories: float | None = None
    ingredients: list[dict[str, Any]] = Field(default_factory=list)
    created_at: str | None = None
    unsynced: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @property
    def is_local(self) -> bool:
        return isinstance(self.id, str) and self.id.startswith(LOCAL_ID_PREFIX)

    def same_content(self, other: "CachedRecipe") -> bool:
        return self.model_dump(exclude={"unsynced"}) == other.model_dump(exclude={"unsynced"})


class CacheState(BaseModel):
    token: str | None = None
    user_id: int | None = None
    recipes: list[CachedRecipe] = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def merge(
    server_list: list[CachedRecipe], local_list: list[CachedRecipe]
) -> tuple[list[CachedRecipe], list[CachedRecipe]]:
    """Reconcile the server list with the local copy, server wins.

    Returns (effective_list, conflicts). effective_list is the server list.
    conflicts holds the local entries the merge threw away: unsynced local
    changes, and cached copies whose content differs from the server's.
    """
    server_by_id = {recipe.id: recipe for recipe in server_list}
    conflicts: list[CachedRecipe] = []
    for local in local_list:
        if local.unsynced:
            conflicts.append(local)
            continue
        server = server_by_id.get(local.id)
        if server is not None and not local.same_content(server):
            conflicts.append(local)
    return list(server_list), conflicts


def default_cache_path() -> Path:
    base = os.environ.get("XDG_CACHE_HOME") or Path.home() / ".cache"
    return Path(base) / "recipebox" / "session.json"


class SessionCache:
    """JSON-file backed session cache (the client-side equivalent of localStorage)."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_cache_path()
        self._state = self._load()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def token(self) -> str | None:
        return self._state.token

    @property
    def user_id(self) -> int | None:
        return self._state.user_id

    def set_session(self, token: str, user_id: int) -> None:
        """Store a fresh token; cached recipes of a different user are discarded."""
        if self._state.user_id is not None and self._state.user_id != user_id:
            self._state.recipes = []
        self._state.token = token
        self._state.user_id = user_id
        self._save()

    def clear_token(self) -> None:
        self._state.token = None
        self._save()

    def recipes(self) -> list[CachedRecipe]:
        return list(self._state.recipes)

    def get(self, recipe_id: int | str) -> CachedRecipe | None:
        return next((r for r in self._state.recipes if r.id == recipe_id), None)

    def replace_recipes(self, recipes: list[CachedRecipe]) -> None:
        self._state.recipes = list(recipes)
        self._save()

    def put(self, recipe: CachedRecipe) -> None:
        """Insert or replace a recipe; new entries go first (newest-first order)."""
        for index, existing in enumerate(self._state.recipes):
            if existing.id == recipe.id:
                self._state.recipes[index] = recipe
                break
        else:
            self._state.recipes.insert(0, recipe)
        self._save()

    def add_local(self, fields: dict[str, Any]) -> CachedRecipe:
        """Record a recipe created while offline."""
        recipe = CachedRecipe.model_validate(
            {
                **fields,
                "id": f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}",
                "owner_id": self._state.user_id,
                "created_at": now().isoformat(),
                "unsynced": True,
            }
        )
        self.put(recipe)
        return recipe

    def update_local(self, recipe_id: int | str, fields: dict[str, Any]) -> CachedRecipe | None:
        """Apply a partial update locally with the server's truthiness rule."""
        existing = self.get(recipe_id)
        if existing is None:
            return None
        changes = {key: value for key, value in fields.items() if value and key in {"title", "image", "calories", "ingredients"}}
        updated = existing.model_copy(update={**changes, "unsynced": True})
        self.put(updated)
        return updated

    def remove(self, recipe_id: int | str) -> bool:
        before = len(self._state.recipes)
        self._state.recipes = [r for r in self._state.recipes if r.id != recipe_id]
        if len(self._state.recipes) == before:
            return False
        self._save()
        return True

    def clear(self) -> None:
        self._state = CacheState()
        self._save()

    def _load(self) -> CacheState:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return CacheState()
        try:
            return CacheState.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("session_cache_corrupt", path=str(self._path))
            return CacheState()

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(self._state.model_dump_json(by_alias=True), encoding="utf-8")
        tmp_path.replace(self._path)
