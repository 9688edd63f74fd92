import pytest

from recipebox.client.search import MealSearchClient, normalize_meal, normalize_meals

pytestmark = pytest.mark.anyio


MEAL = {
    "idMeal": "52772",
    "strMeal": "Teriyaki Chicken Casserole",
    "strMealThumb": "https://www.themealdb.com/images/media/meals/wvpsxx1468256321.jpg",
    "strIngredient1": "soy sauce",
    "strMeasure1": "3/4 cup",
    "strIngredient2": "water",
    "strMeasure2": "1/2 cup ",
    "strIngredient3": "",
    "strMeasure3": "",
    "strIngredient4": "garlic powder",
    "strMeasure4": None,
    "strIngredient5": None,
}


def test_normalize_meal():
    result = normalize_meal(MEAL)

    assert result.uri == "52772"
    assert result.label == "Teriyaki Chicken Casserole"
    assert result.image == MEAL["strMealThumb"]
    assert result.calories is None
    assert [(i.text, i.food) for i in result.ingredients] == [
        ("3/4 cup soy sauce", "soy sauce"),
        ("1/2 cup water", "water"),
        ("garlic powder", "garlic powder"),
    ]


def test_null_meals_means_no_results():
    assert normalize_meals({"meals": None}) == []


def test_normalize_meals_keeps_order():
    second = {"idMeal": "1", "strMeal": "Toast"}
    results = normalize_meals({"meals": [MEAL, second]})
    assert [r.label for r in results] == ["Teriyaki Chicken Casserole", "Toast"]
    assert results[1].ingredients == []
    assert results[1].image is None


@pytest.mark.parametrize("term", ["", "   "])
async def test_blank_term_skips_request(term):
    client = MealSearchClient(base_url="http://127.0.0.1:1")
    assert await client.search(term) == []
