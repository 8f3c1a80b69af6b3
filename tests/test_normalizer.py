"""Tests for food normalization."""

from nutrisnap.domain.glycemic import GiSource
from nutrisnap.domain.parameters import ModelParameters
from nutrisnap.services.normalizer import NutrientNormalizer, coerce_amount


def test_coerces_wire_shapes_and_bad_values() -> None:
    normalizer = NutrientNormalizer(ModelParameters())

    [food] = normalizer.normalize(
        [
            {
                "name": "toast",
                "macros": {
                    "carbohydrates": {"value": 20, "unit": "g"},
                    "protein": "4.5",
                    "fat": -3,
                },
                "micros": {"fiber": "lots"},
            }
        ]
    )

    assert food.item.carbohydrates == 20.0
    assert food.item.protein == 4.5
    assert food.item.fat == 0.0
    assert food.item.fiber == 0.0
    assert food.item.quantity == 1.0


def test_coerce_amount_rejects_non_numbers() -> None:
    assert coerce_amount(None) == 0.0
    assert coerce_amount(True) == 0.0
    assert coerce_amount(float("nan")) == 0.0
    assert coerce_amount("inf") == 0.0
    assert coerce_amount([1]) == 0.0
    assert coerce_amount(" 7 ") == 7.0


def test_quantity_defaults_and_floor() -> None:
    normalizer = NutrientNormalizer(ModelParameters())

    foods = normalizer.normalize(
        [
            {"name": "a", "quantity": None},
            {"name": "b", "quantity": "two"},
            {"name": "c", "quantity": -2},
            {"name": "d", "quantity": 2.5},
        ]
    )

    assert [food.item.quantity for food in foods] == [1.0, 1.0, 0.0, 2.5]


def test_gi_resolution_order() -> None:
    normalizer = NutrientNormalizer(ModelParameters())

    foods = normalizer.normalize(
        [
            {"name": "white bread", "glycemicIndex": 0},
            {"name": "white bread"},
            {"name": "quinoa"},
            {"name": "", "glycemicIndex": 250},
            {},
        ]
    )

    assert [(food.glycemic_index, food.gi_source) for food in foods] == [
        (0, GiSource.EXPLICIT),
        (75, GiSource.TABLE),
        (50, GiSource.DEFAULT),
        (110, GiSource.EXPLICIT),
        (50, GiSource.DEFAULT),
    ]
