"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest

from nutrisnap.adapters.fatsecret_client import FatSecretClient
from nutrisnap.config import Settings
from nutrisnap.containers import AppContainer
from nutrisnap.domain.meals import MealEntry
from nutrisnap.domain.parameters import ModelParameters
from nutrisnap.services.cache import InMemoryCache
from nutrisnap.services.foods import FoodSearchService
from nutrisnap.services.glucose import GlucoseEngine
from nutrisnap.services.meals import MealEntryRepository, MealEntryService


@dataclass
class InMemoryMealEntryRepository(MealEntryRepository):
    """In-memory meal entry repository for tests."""

    entries: dict[UUID, MealEntry] = field(default_factory=dict)

    def insert_entry(self, entry: MealEntry) -> MealEntry:
        self.entries[entry.id] = entry
        return entry

    def get_entry(self, entry_id: UUID) -> MealEntry | None:
        return self.entries.get(entry_id)

    def list_entries(  # noqa: PLR0913
        self,
        user_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
        descending: bool,
    ) -> list[MealEntry]:
        rows = [
            entry
            for entry in self.entries.values()
            if entry.user_id == user_id
            and (start is None or entry.logged_at >= start)
            and (end is None or entry.logged_at <= end)
        ]
        rows.sort(key=lambda entry: entry.logged_at, reverse=descending)
        return rows[:limit]

    def update_entry(self, entry: MealEntry) -> MealEntry:
        self.entries[entry.id] = entry
        return entry

    def delete_entry(self, entry_id: UUID) -> None:
        self.entries.pop(entry_id, None)


@dataclass
class FakeFatSecretClient(FatSecretClient):
    """Fake FatSecret client returning fixed payloads."""

    search_calls: int = 0
    food_calls: int = 0

    async def search_foods(self, query: str, max_results: int = 5) -> dict[str, object]:
        self.search_calls += 1
        return {
            "foods": {
                "food": {
                    "food_id": "4881",
                    "food_name": "White Bread",
                    "food_type": "Generic",
                    "food_description": "Per 1 slice - Calories: 67kcal",
                }
            }
        }

    async def get_food(self, food_id: str) -> dict[str, object]:
        self.food_calls += 1
        return {
            "food": {
                "food_id": food_id,
                "food_name": "White Bread",
                "food_type": "Generic",
                "servings": {
                    "serving": [
                        {
                            "serving_description": "1 slice",
                            "calories": "67",
                            "carbohydrate": "12.65",
                            "protein": "1.91",
                            "fat": "0.82",
                            "fiber": "0.6",
                        },
                        {
                            "serving_description": "100 g",
                            "calories": "266",
                            "carbohydrate": "50.61",
                            "protein": "7.64",
                            "fat": "3.29",
                            "fiber": "2.4",
                        },
                    ]
                },
            }
        }


@dataclass
class StepClock:
    """Clock that advances by a fixed step on every call."""

    now: datetime = field(default_factory=lambda: datetime(2024, 5, 1, 8, tzinfo=UTC))
    step: timedelta = timedelta(minutes=1)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


def white_bread(**overrides: object) -> dict[str, object]:
    """Return a white bread food payload."""
    food: dict[str, object] = {
        "name": "white bread",
        "macros": {"carbohydrates": 30, "protein": 5, "fat": 2},
    }
    food.update(overrides)
    return food


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        fatsecret_client_id="client-id",
        fatsecret_client_secret="client-secret",
    )


@pytest.fixture
def parameters() -> ModelParameters:
    return ModelParameters()


@pytest.fixture
def engine(parameters: ModelParameters) -> GlucoseEngine:
    return GlucoseEngine(parameters)


@pytest.fixture
def meal_repository() -> InMemoryMealEntryRepository:
    return InMemoryMealEntryRepository()


@pytest.fixture
def meal_service(
    engine: GlucoseEngine, meal_repository: InMemoryMealEntryRepository
) -> MealEntryService:
    return MealEntryService(
        engine=engine, repository=meal_repository, clock=StepClock()
    )


@pytest.fixture
def container(
    settings: Settings,
    engine: GlucoseEngine,
    meal_service: MealEntryService,
) -> AppContainer:
    food_search_service = FoodSearchService(
        client=FakeFatSecretClient(),
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        glucose_engine=engine,
        meal_entry_service=meal_service,
        food_search_service=food_search_service,
        close_resources=close_resources,
    )


def stored_entry(entry: MealEntry, **changes: object) -> MealEntry:
    """Return a copy of an entry with some fields changed."""
    return replace(entry, **changes)
