"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Query, Request, status

from nutrisnap.api.meals import router as meals_router
from nutrisnap.app_logging import configure_logging
from nutrisnap.containers import AppContainer
from nutrisnap.domain.foods import FoodDetails, FoodSummary


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(meals_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/glucose/analyze")
    async def analyze_meal(request: Request) -> dict[str, object]:
        """Predict the glucose response of a meal."""
        state_container: AppContainer = request.app.state.container
        payload = await read_json(request)
        return state_container.glucose_engine.analyze(payload)

    @app.post("/glucose/impact-curve")
    async def impact_curve(request: Request) -> dict[str, object]:
        """Build a glucose curve from a pre-aggregated impact score."""
        state_container: AppContainer = request.app.state.container
        payload = await read_json(request)
        return state_container.glucose_engine.impact_curve(payload)

    @app.get("/foods/search")
    async def search_foods(
        request: Request,
        q: str = Query(min_length=1),
        limit: int = Query(default=5, ge=1, le=50),
    ) -> dict[str, object]:
        """Search the food database."""
        state_container: AppContainer = request.app.state.container
        try:
            foods = await state_container.food_search_service.search(q, limit=limit)
        except httpx.HTTPError as exc:
            logger.exception("Food search failed for %r", q)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
        return {"foods": [_summary_payload(food) for food in foods]}

    @app.get("/foods/{food_id}")
    async def food_details(food_id: str, request: Request) -> dict[str, object]:
        """Return a food's serving macros in the engine's input shape."""
        state_container: AppContainer = request.app.state.container
        try:
            details = await state_container.food_search_service.get_food(food_id)
        except httpx.HTTPError as exc:
            logger.exception("Food lookup failed for %s", food_id)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
        return _details_payload(details)

    return app


async def read_json(request: Request) -> object:
    """Return the decoded JSON body, or None when it is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


def _summary_payload(food: FoodSummary) -> dict[str, object]:
    return {
        "foodId": food.food_id,
        "name": food.name,
        "foodType": food.food_type,
        "brandName": food.brand_name,
        "description": food.description,
    }


def _details_payload(details: FoodDetails) -> dict[str, object]:
    serving = details.serving
    return {
        **_summary_payload(details.summary),
        "serving": {
            "description": serving.serving_description,
            "calories": serving.calories,
            "protein": serving.protein_g,
            "fat": serving.fat_g,
            "carbohydrates": serving.carbs_g,
            "fiber": serving.fiber_g,
        },
        "mealFood": details.as_meal_food(),
    }
