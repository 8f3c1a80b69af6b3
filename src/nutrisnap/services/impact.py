"""Glucose impact scoring for individual foods and whole meals."""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from nutrisnap.domain.glycemic import (
    ESTIMATED_GI,
    FoodItem,
    GiSource,
    ImpactDetail,
    ImpactLevel,
    MacroTotals,
    MealImpactResult,
    NormalizedFood,
)
from nutrisnap.domain.parameters import ModelParameters

_logger = logging.getLogger(__name__)


@dataclass
class ImpactEstimator:
    """Scores foods by glycemic index, carbohydrates and macro modifiers."""

    parameters: ModelParameters

    def item_impact(self, food: NormalizedFood) -> float:
        """Return the impact of one item including quantity and modifiers."""
        item = food.item
        impact = (food.glycemic_index / 100) * item.carbohydrates * item.quantity
        for modifier in self.parameters.impact_modifiers:
            if _nutrient_amount(item, modifier.nutrient) > modifier.threshold_g:
                impact *= modifier.factor
        if not math.isfinite(impact):
            _logger.warning("Non-finite impact for %r clamped to 0", item.name)
            return 0.0
        return impact

    def estimate(self, foods: Sequence[NormalizedFood]) -> MealImpactResult:
        """Return per-item details and the aggregate impact of a meal."""
        details = tuple(
            ImpactDetail(
                name=food.item.name,
                impact=self.item_impact(food),
                quantity=food.item.quantity,
                resolved_gi=(
                    food.glycemic_index
                    if food.gi_source is GiSource.EXPLICIT
                    else ESTIMATED_GI
                ),
            )
            for food in foods
        )
        total = sum(detail.impact for detail in details)
        if not math.isfinite(total):
            _logger.warning("Non-finite meal impact clamped to 0")
            total = 0.0
        return MealImpactResult(
            total_impact=total,
            impact_level=self.classify(total),
            details=details,
        )

    def classify(self, total_impact: float) -> ImpactLevel:
        """Map an aggregate impact to its qualitative level."""
        if total_impact <= 0:
            return ImpactLevel.NONE
        if total_impact <= self.parameters.low_impact_max:
            return ImpactLevel.LOW
        if total_impact <= self.parameters.medium_impact_max:
            return ImpactLevel.MEDIUM
        return ImpactLevel.HIGH


def macro_totals(foods: Sequence[NormalizedFood]) -> MacroTotals:
    """Sum quantity-weighted macros over a meal."""
    carbohydrates = protein = fat = fiber = 0.0
    for food in foods:
        item = food.item
        carbohydrates += item.carbohydrates * item.quantity
        protein += item.protein * item.quantity
        fat += item.fat * item.quantity
        fiber += item.fiber * item.quantity
    return MacroTotals(
        carbohydrates=carbohydrates,
        protein=protein,
        fat=fat,
        fiber=fiber,
    )


def _nutrient_amount(item: FoodItem, nutrient: str) -> float:
    return float(getattr(item, nutrient))
