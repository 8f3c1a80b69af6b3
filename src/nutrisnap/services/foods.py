"""Food search service backed by FatSecret."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nutrisnap.adapters.fatsecret_client import FatSecretClient
from nutrisnap.domain.foods import FoodDetails, FoodSummary, ServingNutrition
from nutrisnap.services.cache import Cache
from nutrisnap.services.normalizer import coerce_amount

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class FoodSearchService:
    """Service for food lookups with caching."""

    client: FatSecretClient
    cache: Cache
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str, limit: int = 5) -> list[FoodSummary]:
        """Search FatSecret foods with caching."""
        cleaned = query.strip()
        if not cleaned:
            return []
        cache_key = f"fatsecret:search:{cleaned.lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.search_foods(cleaned, max_results=limit),
            action="search",
        )
        foods_block = payload.get("foods") or {}
        raw_foods = foods_block.get("food") if isinstance(foods_block, dict) else None
        foods = [_parse_summary(food) for food in _as_list(raw_foods)]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        _logger.info("FatSecret search: query=%s results=%s", cleaned, len(foods))
        return foods

    async def get_food(self, food_id: str) -> FoodDetails:
        """Retrieve food details with first-serving macros."""
        cache_key = f"fatsecret:food:{food_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodDetails):
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.get_food(food_id),
            action=f"get_food:{food_id}",
        )
        food = payload.get("food") or {}
        details = FoodDetails(
            summary=_parse_summary(food),
            serving=_parse_serving(food.get("servings")),
        )
        self.cache.set(cache_key, details, ttl_seconds=self.food_ttl_seconds)
        return details

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "FatSecret %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _as_list(value: object) -> list[dict[str, object]]:
    # FatSecret returns a bare object instead of a list when there is one result.
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    if isinstance(value, dict):
        return [value]
    return []


def _parse_summary(food: dict[str, object]) -> FoodSummary:
    return FoodSummary(
        food_id=str(food.get("food_id", "")),
        name=str(food.get("food_name") or "Unknown Food"),
        food_type=food.get("food_type"),
        brand_name=food.get("brand_name"),
        description=food.get("food_description"),
    )


def _parse_serving(servings: object) -> ServingNutrition:
    if isinstance(servings, dict):
        serving_list = _as_list(servings.get("serving"))
    else:
        serving_list = []
    if not serving_list:
        return ServingNutrition(
            calories=0.0,
            protein_g=0.0,
            fat_g=0.0,
            carbs_g=0.0,
            fiber_g=0.0,
            serving_description="100g",
        )
    serving = serving_list[0]
    return ServingNutrition(
        calories=coerce_amount(serving.get("calories")),
        protein_g=coerce_amount(serving.get("protein")),
        fat_g=coerce_amount(serving.get("fat")),
        carbs_g=coerce_amount(serving.get("carbohydrate")),
        fiber_g=coerce_amount(serving.get("fiber")),
        serving_description=str(serving.get("serving_description") or "100g"),
    )
