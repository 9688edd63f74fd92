"""TheMealDB search client.

Maps the API's flat ``strIngredient1..20`` / ``strMeasure1..20`` layout to the
``{uri, label, image, calories, ingredients}`` shape the rest of the client uses.
"""

from typing import Any

import aiohttp
import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

MEALDB_URL = "https://www.themealdb.com/api/json/v1/1"
MAX_INGREDIENTS = 20


class SearchError(Exception):
    """Search request failed (timeout, network error, non-200 response)."""


class SearchIngredient(BaseModel):
    text: str
    food: str


class SearchResult(BaseModel):
    uri: str
    label: str
    image: str | None = None
    calories: float | None = None  # not provided by TheMealDB
    ingredients: list[SearchIngredient] = Field(default_factory=list)


def normalize_meal(meal: dict[str, Any]) -> SearchResult:
    ingredients = []
    for i in range(1, MAX_INGREDIENTS + 1):
        food = (meal.get(f"strIngredient{i}") or "").strip()
        if not food:
            continue
        measure = (meal.get(f"strMeasure{i}") or "").strip()
        ingredients.append(SearchIngredient(text=f"{measure} {food}".strip(), food=food))
    return SearchResult(
        uri=str(meal.get("idMeal", "")),
        label=meal.get("strMeal") or "",
        image=meal.get("strMealThumb") or None,
        ingredients=ingredients,
    )


def normalize_meals(payload: dict[str, Any]) -> list[SearchResult]:
    """Normalize a search.php response; ``{"meals": null}`` means no results."""
    return [normalize_meal(meal) for meal in payload.get("meals") or []]


class MealSearchClient:
    """Client for TheMealDB search endpoint (no API key required)."""

    def __init__(self, base_url: str = MEALDB_URL, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def search(self, term: str) -> list[SearchResult]:
        if not term or not term.strip():
            return []

        url = f"{self.base_url}/search.php"
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(url, params={"s": term.strip()}, headers={"Accept": "application/json"}) as resp:
                    if resp.status != 200:
                        logger.warning("meal_search_failed", status=resp.status, term=term)
                        raise SearchError(f"API error: {resp.status} {resp.reason}")
                    payload = await resp.json(content_type=None)
        except TimeoutError as e:
            raise SearchError("Request timed out. Please check your internet connection and try again.") from e
        except aiohttp.ClientError as e:
            raise SearchError(f"Failed to fetch recipes: {e}") from e

        results = normalize_meals(payload if isinstance(payload, dict) else {})
        logger.debug("meal_search", term=term, results=len(results))
        return results
