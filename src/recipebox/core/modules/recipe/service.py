import structlog

from recipebox.core.core import Service
from recipebox.core.modules.counter.models import Sequence
from recipebox.core.modules.recipe.models import Recipe, RecipeCreate, RecipeUpdate, merge_recipe_update
from recipebox.errors import ForbiddenError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

# Newest first; recipes created in the same instant keep insertion order
LIST_SORT = [("created_at", -1), ("_id", 1)]


class RecipeService(Service):
    """Owner-checked CRUD over the recipes collection."""

    collection_name = "recipes"

    async def on_start(self) -> None:
        await self.collection.create_index([("owner_id", 1)])

    async def list_recipes(self, owner_id: int) -> list[Recipe]:
        cursor = self.collection.find({"owner_id": owner_id}).sort(LIST_SORT)
        return await Recipe.list_cursor(cursor)

    async def count_recipes(self, owner_id: int) -> int:
        return await self.collection.count_documents({"owner_id": owner_id})

    async def get_recipe(self, recipe_id: int) -> Recipe:
        doc = await self.collection.find_one({"_id": recipe_id})
        if doc is None:
            raise NotFoundError(f"Recipe {recipe_id} not found")
        return Recipe.model_validate(doc)

    async def create_recipe(self, owner_id: int, data: RecipeCreate) -> Recipe:
        """Persist a new recipe for owner_id. owner_id must come from a verified source."""
        if not data.title or not data.title.strip():
            raise ValidationError("Title is required")

        recipe_id = await self.core.services.counter.get_next_id(Sequence.RECIPE)
        recipe = Recipe(
            id=recipe_id,
            owner_id=owner_id,
            title=data.title,
            image=data.image,
            calories=data.calories,
            ingredients=data.ingredients or [],
        )
        await self.collection.insert_one(recipe.to_mongo())
        logger.debug("recipe_created", recipe_id=recipe.id, owner_id=owner_id)
        return recipe

    async def update_recipe(self, owner_id: int, recipe_id: int, update: RecipeUpdate) -> Recipe:
        existing = await self._get_owned_recipe(owner_id, recipe_id)
        merged = merge_recipe_update(existing, update)
        await self.collection.update_one({"_id": recipe_id}, {"$set": merged})
        logger.debug("recipe_updated", recipe_id=recipe_id, owner_id=owner_id)
        return await self.get_recipe(recipe_id)

    async def delete_recipe(self, owner_id: int, recipe_id: int) -> None:
        await self._get_owned_recipe(owner_id, recipe_id)
        await self.collection.delete_one({"_id": recipe_id})
        logger.info("recipe_deleted", recipe_id=recipe_id, owner_id=owner_id)

    async def _get_owned_recipe(self, owner_id: int, recipe_id: int) -> Recipe:
        """Fetch a recipe, raising NotFoundError if missing and ForbiddenError if owned by someone else."""
        recipe = await self.get_recipe(recipe_id)
        if recipe.owner_id != owner_id:
            logger.warning("recipe_access_denied", recipe_id=recipe_id, owner_id=recipe.owner_id, caller_id=owner_id)
            raise ForbiddenError
        return recipe
