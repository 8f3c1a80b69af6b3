"""Domain models for meal entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class MealEntry:
    """A logged meal with its computed glucose response."""

    id: UUID
    user_id: str
    logged_at: datetime
    meal_type: str | None
    foods: list[dict[str, object]]
    baseline_glucose: int
    total_impact: float
    impact_level: str
    details: list[dict[str, object]]
    glucose_curve: list[dict[str, int]]
    advice: list[dict[str, str]]
    swap_suggestions: list[dict[str, object]]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class MealImpactRef:
    """Short reference to a meal in a summary."""

    id: UUID
    logged_at: datetime
    foods: list[str]
    impact: float


@dataclass(frozen=True)
class ImpactGroup:
    """Impact totals for a group of meals."""

    key: str
    total_impact: float
    meal_count: int

    @property
    def average_impact(self) -> float:
        """Average impact per meal in the group."""
        return self.total_impact / self.meal_count if self.meal_count else 0.0


@dataclass(frozen=True)
class MealSummary:
    """Impact statistics for a user's meals over a period."""

    total_meals: int
    average_impact: float
    highest: MealImpactRef | None
    lowest: MealImpactRef | None
    by_day: list[ImpactGroup]
    by_meal_type: list[ImpactGroup]
