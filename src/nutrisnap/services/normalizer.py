"""Normalization of raw food items into typed, non-negative values."""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from nutrisnap.domain.glycemic import FoodItem, GiSource, NormalizedFood
from nutrisnap.domain.parameters import ModelParameters
from nutrisnap.services.lookup import NameLookup


@dataclass
class NutrientNormalizer:
    """Coerces raw food payloads into FoodItems and resolves their GI."""

    parameters: ModelParameters
    gi_lookup: NameLookup[int] = field(init=False)

    def __post_init__(self) -> None:
        self.gi_lookup = NameLookup(self.parameters.gi_table)

    def normalize(self, foods: Sequence[Mapping[str, object]]) -> list[NormalizedFood]:
        """Normalize every food, preserving input order."""
        return [self.resolve(parse_food_item(food, self.parameters)) for food in foods]

    def resolve(self, item: FoodItem) -> NormalizedFood:
        """Resolve the glycemic index of an already parsed item."""
        if item.glycemic_index is not None:
            return NormalizedFood(
                item=item,
                glycemic_index=item.glycemic_index,
                gi_source=GiSource.EXPLICIT,
            )
        gi, found = self.gi_lookup.find_or_default(
            item.name, self.parameters.default_gi
        )
        return NormalizedFood(
            item=item,
            glycemic_index=gi,
            gi_source=GiSource.TABLE if found else GiSource.DEFAULT,
        )


def parse_food_item(
    food: Mapping[str, object], parameters: ModelParameters
) -> FoodItem:
    """Build a FoodItem from a raw payload without ever failing on nutrition data."""
    macros = _as_mapping(food.get("macros"))
    micros = _as_mapping(food.get("micros"))
    raw_name = food.get("name")
    return FoodItem(
        name="" if raw_name is None else str(raw_name),
        quantity=_coerce_quantity(food.get("quantity")),
        carbohydrates=coerce_amount(macros.get("carbohydrates")),
        protein=coerce_amount(macros.get("protein")),
        fat=coerce_amount(macros.get("fat")),
        fiber=coerce_amount(micros.get("fiber")),
        glycemic_index=_coerce_gi(food.get("glycemicIndex"), parameters.max_gi),
    )


def coerce_amount(value: object) -> float:
    """Return a non-negative finite amount; anything unusable becomes 0."""
    number = _to_number(value)
    if number is None or number < 0:
        return 0.0
    return number


def _coerce_quantity(value: object) -> float:
    number = _to_number(value)
    if number is None:
        return 1.0
    return max(number, 0.0)


def _coerce_gi(value: object, max_gi: int) -> int | None:
    number = _to_number(value)
    if number is None:
        return None
    return min(max(round(number), 0), max_gi)


def _to_number(value: object) -> float | None:
    # Nutrients arrive either bare or wrapped as {"value": n, "unit": "g"}.
    if isinstance(value, Mapping):
        value = value.get("value")
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, int | float | str):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _as_mapping(value: object) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        return value
    return {}
