from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field

from recipebox.core.modules.recipe.models import Recipe, RecipeCreate, RecipeUpdate
from recipebox.web.deps import AppDep, IdentityDep, require_store
from recipebox.web.openapi import ErrorResponse

# require_store runs before the bearer dependency, so a down store answers 503 ahead of 401
router = APIRouter(prefix="/recipes", tags=["recipes"], dependencies=[Depends(require_store)])
anonymous_router = APIRouter(prefix="/recipes", tags=["recipes"], dependencies=[Depends(require_store)])


class RecipeCountResponse(BaseModel):
    count: int = Field(..., description="Number of recipes owned by the caller", ge=0)


class OkResponse(BaseModel):
    ok: bool = True


class AnonymousRecipeRequest(RecipeCreate):
    """Recipe body carrying the owner id the client claims for itself."""

    owner_id: int = Field(..., validation_alias=AliasChoices("ownerId", "owner_id"), description="Client-asserted owner id")


@router.get(
    "",
    summary="List my recipes",
    description="All recipes owned by the caller, newest first.",
    operation_id="listRecipes",
    responses={
        200: {"description": "Recipes, newest first"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        503: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def list_recipes(app: AppDep, identity: IdentityDep) -> list[Recipe]:
    return await app.list_recipes(identity)


@router.get(
    "/count",
    summary="Count my recipes",
    operation_id="countRecipes",
    responses={
        200: {"description": "Recipe count"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        503: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def count_recipes(app: AppDep, identity: IdentityDep) -> RecipeCountResponse:
    return RecipeCountResponse(count=await app.count_recipes(identity))


@router.post(
    "",
    summary="Create recipe",
    description="Save a recipe owned by the caller. The owner always comes from the bearer token.",
    operation_id="createRecipe",
    status_code=201,
    responses={
        201: {"description": "Recipe created"},
        400: {"model": ErrorResponse, "description": "Missing title"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        503: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def create_recipe(request: RecipeCreate, app: AppDep, identity: IdentityDep) -> Recipe:
    return await app.create_recipe(identity, request)


@router.put(
    "/{recipe_id}",
    summary="Update recipe",
    description=(
        "Partially update a recipe. A field replaces the stored value only when it is non-empty and non-zero; "
        "list a field in `clear` to unset it."
    ),
    operation_id="updateRecipe",
    responses={
        200: {"description": "Updated recipe"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Recipe belongs to another user"},
        404: {"model": ErrorResponse, "description": "Recipe not found"},
        503: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def update_recipe(recipe_id: int, request: RecipeUpdate, app: AppDep, identity: IdentityDep) -> Recipe:
    return await app.update_recipe(identity, recipe_id, request)


@router.delete(
    "/{recipe_id}",
    summary="Delete recipe",
    operation_id="deleteRecipe",
    responses={
        200: {"description": "Recipe deleted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Recipe belongs to another user"},
        404: {"model": ErrorResponse, "description": "Recipe not found"},
        503: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def delete_recipe(recipe_id: int, app: AppDep, identity: IdentityDep) -> OkResponse:
    await app.delete_recipe(identity, recipe_id)
    return OkResponse()


@anonymous_router.post(
    "/anonymous",
    summary="Create recipe without authentication",
    description="Legacy compatibility route: trusts the ownerId in the body. Mounted only when enabled in config.",
    operation_id="createAnonymousRecipe",
    status_code=201,
    responses={
        201: {"description": "Recipe created"},
        400: {"model": ErrorResponse, "description": "Missing title"},
        503: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def create_anonymous_recipe(request: AnonymousRecipeRequest, app: AppDep) -> Recipe:
    data = RecipeCreate.model_validate(request.model_dump(exclude={"owner_id"}))
    return await app.create_anonymous_recipe(request.owner_id, data)
