"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrisnap.adapters.fatsecret_client import HttpxFatSecretClient
from nutrisnap.adapters.supabase_meal_entry_repository import (
    SupabaseMealEntryRepository,
)
from nutrisnap.config import Settings, build_model_parameters
from nutrisnap.services.cache import InMemoryCache
from nutrisnap.services.foods import FoodSearchService
from nutrisnap.services.glucose import GlucoseEngine
from nutrisnap.services.meals import MealEntryService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    glucose_engine: GlucoseEngine
    meal_entry_service: MealEntryService
    food_search_service: FoodSearchService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    glucose_engine = GlucoseEngine(build_model_parameters(resolved_settings))
    meal_entry_service = MealEntryService(
        engine=glucose_engine,
        repository=SupabaseMealEntryRepository(supabase_client),
    )
    fatsecret_client = HttpxFatSecretClient.create(
        client_id=resolved_settings.fatsecret_client_id,
        client_secret=resolved_settings.fatsecret_client_secret,
        token_url=resolved_settings.fatsecret_token_url,
        api_url=resolved_settings.fatsecret_api_url,
        token_cache=InMemoryCache(),
    )
    food_search_service = FoodSearchService(
        client=fatsecret_client,
        cache=InMemoryCache(),
        search_ttl_seconds=resolved_settings.food_search_ttl_seconds,
        food_ttl_seconds=resolved_settings.food_details_ttl_seconds,
    )

    async def close_resources() -> None:
        await fatsecret_client.close()

    return AppContainer(
        settings=resolved_settings,
        glucose_engine=glucose_engine,
        meal_entry_service=meal_entry_service,
        food_search_service=food_search_service,
        close_resources=close_resources,
    )
