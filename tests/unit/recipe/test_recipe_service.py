"""Tests for owner-checked recipe CRUD through the App facade."""

from datetime import timedelta

import pytest

from recipebox.core.modules.recipe.models import Ingredient, RecipeCreate, RecipeUpdate
from recipebox.core.modules.user.models import Identity
from recipebox.errors import ForbiddenError, NotFoundError, ValidationError

pytestmark = pytest.mark.anyio


async def make_users(app) -> tuple[Identity, Identity]:
    alice = await app.signup("alice", "secret1")
    bob = await app.signup("bob", "secret2")
    return Identity(id=alice.id, username="alice"), Identity(id=bob.id, username="bob")


async def test_create_sets_owner_from_identity(app):
    async with app.lifespan():
        alice, _ = await make_users(app)
        recipe = await app.create_recipe(alice, RecipeCreate(title="Soup"))

    assert recipe.owner_id == alice.id
    assert recipe.title == "Soup"
    assert recipe.ingredients == []


@pytest.mark.parametrize("title", [None, "", "   "])
async def test_create_requires_title(app, title):
    async with app.lifespan():
        alice, _ = await make_users(app)
        with pytest.raises(ValidationError, match="Title is required"):
            await app.create_recipe(alice, RecipeCreate(title=title))


async def test_round_trip_preserves_ingredient_order(app):
    async with app.lifespan():
        alice, _ = await make_users(app)
        created = await app.create_recipe(
            alice, RecipeCreate(title="T", ingredients=[Ingredient(text="a"), Ingredient(text="b")])
        )
        listed = await app.list_recipes(alice)

    found = next(r for r in listed if r.id == created.id)
    assert found.title == "T"
    assert [i.text for i in found.ingredients] == ["a", "b"]


async def test_list_returns_only_own_recipes_newest_first(app, fake_database):
    async with app.lifespan():
        alice, bob = await make_users(app)
        first = await app.create_recipe(alice, RecipeCreate(title="First"))
        await app.create_recipe(bob, RecipeCreate(title="Bob's"))
        second = await app.create_recipe(alice, RecipeCreate(title="Second"))

        # Pin timestamps so ordering does not depend on clock resolution
        docs = {doc["_id"]: doc for doc in fake_database.get_collection("recipes").docs}
        docs[second.id]["created_at"] = docs[first.id]["created_at"] + timedelta(seconds=1)

        listed = await app.list_recipes(alice)
        count = await app.count_recipes(alice)

    assert [r.id for r in listed] == [second.id, first.id]
    assert all(r.owner_id == alice.id for r in listed)
    assert count == len(listed) == 2


async def test_same_timestamp_keeps_insertion_order(app, fake_database):
    async with app.lifespan():
        alice, _ = await make_users(app)
        first = await app.create_recipe(alice, RecipeCreate(title="First"))
        second = await app.create_recipe(alice, RecipeCreate(title="Second"))

        docs = fake_database.get_collection("recipes").docs
        for doc in docs:
            doc["created_at"] = docs[0]["created_at"]

        listed = await app.list_recipes(alice)

    assert [r.id for r in listed] == [first.id, second.id]


async def test_list_empty_for_new_user(app):
    async with app.lifespan():
        alice, _ = await make_users(app)
        assert await app.list_recipes(alice) == []
        assert await app.count_recipes(alice) == 0


async def test_update_by_other_user_forbidden_and_unchanged(app):
    async with app.lifespan():
        alice, bob = await make_users(app)
        recipe = await app.create_recipe(alice, RecipeCreate(title="Soup", calories=100))
        with pytest.raises(ForbiddenError):
            await app.update_recipe(bob, recipe.id, RecipeUpdate(title="Hacked"))
        [stored] = await app.list_recipes(alice)

    assert stored.title == "Soup"


async def test_update_missing_recipe_not_found(app):
    async with app.lifespan():
        alice, _ = await make_users(app)
        with pytest.raises(NotFoundError):
            await app.update_recipe(alice, 999, RecipeUpdate(title="Nope"))


async def test_update_without_calories_keeps_calories(app):
    async with app.lifespan():
        alice, _ = await make_users(app)
        recipe = await app.create_recipe(alice, RecipeCreate(title="Soup", calories=320))
        updated = await app.update_recipe(alice, recipe.id, RecipeUpdate(title="Better soup"))

    assert updated.title == "Better soup"
    assert updated.calories == 320
    assert updated.created_at == recipe.created_at


async def test_delete_by_other_user_forbidden(app):
    async with app.lifespan():
        alice, bob = await make_users(app)
        recipe = await app.create_recipe(alice, RecipeCreate(title="Soup"))
        with pytest.raises(ForbiddenError):
            await app.delete_recipe(bob, recipe.id)
        assert await app.count_recipes(alice) == 1


async def test_delete_twice_not_found(app):
    async with app.lifespan():
        alice, _ = await make_users(app)
        recipe = await app.create_recipe(alice, RecipeCreate(title="Soup"))
        await app.delete_recipe(alice, recipe.id)
        with pytest.raises(NotFoundError):
            await app.delete_recipe(alice, recipe.id)


async def test_created_at_survives_storage(app):
    async with app.lifespan():
        alice, _ = await make_users(app)
        created = await app.create_recipe(alice, RecipeCreate(title="Soup"))
        listed = await app.list_recipes(alice)

    assert created.created_at.microsecond % 1000 == 0
    assert listed[0].created_at == created.created_at
