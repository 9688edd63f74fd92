from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from recipebox.core.db import MongoModel
from recipebox.utils import now


class Ingredient(BaseModel):
    """One ingredient line, e.g. "2 cups flour"."""

    text: str

    model_config = ConfigDict(extra="ignore")


class Recipe(MongoModel):
    """Saved recipe, owned by exactly one user.

    Indexed on owner_id.
    """

    owner_id: int = Field(validation_alias=AliasChoices("owner_id", "ownerId"), serialization_alias="ownerId")
    title: str
    image: str | None = None
    calories: float | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=now, validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt"
    )


class RecipeCreate(BaseModel):
    """Fields a caller may supply for a new recipe."""

    title: str | None = Field(None, description="Recipe title (required, non-empty)")
    image: str | None = Field(None, description="Image URL")
    calories: float | None = Field(None, description="Calories per serving")
    ingredients: list[Ingredient] | None = Field(None, description="Ordered ingredient lines")


class ClearableField(StrEnum):
    """Fields an update may explicitly unset."""

    IMAGE = "image"
    CALORIES = "calories"
    INGREDIENTS = "ingredients"


class RecipeUpdate(BaseModel):
    """Partial update.

    A field replaces the stored value only if it is truthy, so ``calories: 0`` or
    ``title: ""`` leave the stored value alone. Use ``clear`` to unset a field.
    """

    title: str | None = None
    image: str | None = None
    calories: float | None = None
    ingredients: list[Ingredient] | None = None
    clear: list[ClearableField] = Field(default_factory=list, description="Fields to unset")


def merge_recipe_update(existing: Recipe, update: RecipeUpdate) -> dict[str, Any]:
    """Compute the stored values after applying ``update`` to ``existing``."""
    merged: dict[str, Any] = {
        "title": update.title or existing.title,
        "image": update.image or existing.image,
        "calories": update.calories or existing.calories,
        "ingredients": update.ingredients or existing.ingredients,
    }
    for field in update.clear:
        merged[field.value] = [] if field == ClearableField.INGREDIENTS else None

    merged["ingredients"] = [Ingredient.model_validate(i).model_dump() for i in merged["ingredients"]]
    return merged
