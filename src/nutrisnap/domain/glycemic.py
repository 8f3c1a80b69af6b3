"""Domain models for the meal glycemic response engine."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

ESTIMATED_GI = "estimated"


class ImpactLevel(StrEnum):
    """Qualitative glucose impact of a whole meal."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GiSource(StrEnum):
    """Where a food's glycemic index came from."""

    EXPLICIT = "explicit"
    TABLE = "table"
    DEFAULT = "default"


@dataclass(frozen=True)
class FoodItem:
    """A food item with macros in grams, coerced to non-negative values."""

    name: str
    quantity: float = 1.0
    carbohydrates: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    glycemic_index: int | None = None


@dataclass(frozen=True)
class NormalizedFood:
    """A food item with its glycemic index resolved."""

    item: FoodItem
    glycemic_index: int
    gi_source: GiSource


@dataclass(frozen=True)
class ImpactDetail:
    """Per-item glucose impact."""

    name: str
    impact: float
    quantity: float
    resolved_gi: int | Literal["estimated"]


@dataclass(frozen=True)
class MealImpactResult:
    """Aggregate glucose impact of a meal."""

    total_impact: float
    impact_level: ImpactLevel
    details: tuple[ImpactDetail, ...]


@dataclass(frozen=True)
class MacroTotals:
    """Quantity-weighted macro totals of a meal."""

    carbohydrates: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0


@dataclass(frozen=True)
class CurvePoint:
    """Predicted glucose level at a minute offset after the meal."""

    time_offset_minutes: int
    glucose_level: int


GlucoseCurve = tuple[CurvePoint, ...]


@dataclass(frozen=True)
class Advice:
    """A single advisory tip."""

    kind: str
    title: str
    description: str


@dataclass(frozen=True)
class SwapOption:
    """A lower-impact alternative for a food."""

    alternative: str
    reduction_percent: int
    rationale: str


@dataclass(frozen=True)
class SwapSuggestion:
    """A swap option offered for a high-impact food in the meal."""

    original_food: str
    option: SwapOption


@dataclass(frozen=True)
class MealGlucoseReport:
    """Everything the engine derives for one meal."""

    baseline_glucose: int
    impact: MealImpactResult
    curve: GlucoseCurve
    advice: tuple[Advice, ...]
    swap_suggestions: tuple[SwapSuggestion, ...]
