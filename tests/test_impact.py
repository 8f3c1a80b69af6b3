"""Tests for glucose impact scoring."""

import pytest

from nutrisnap.domain.glycemic import ESTIMATED_GI, ImpactLevel
from nutrisnap.domain.parameters import ModelParameters
from nutrisnap.services.impact import ImpactEstimator, macro_totals
from nutrisnap.services.normalizer import NutrientNormalizer


def _estimate(foods: list[dict[str, object]]):  # type: ignore[no-untyped-def]
    parameters = ModelParameters()
    normalized = NutrientNormalizer(parameters).normalize(foods)
    return ImpactEstimator(parameters).estimate(normalized)


def test_white_bread_impact() -> None:
    result = _estimate(
        [
            {
                "name": "white bread",
                "macros": {"carbohydrates": 30, "protein": 5, "fat": 2},
            }
        ]
    )

    assert result.total_impact == pytest.approx(22.5)
    assert result.impact_level is ImpactLevel.MEDIUM
    assert result.details[0].resolved_gi == ESTIMATED_GI


def test_all_modifiers_apply() -> None:
    result = _estimate(
        [
            {
                "name": "granola",
                "glycemicIndex": 50,
                "macros": {"carbohydrates": 40, "protein": 20, "fat": 12},
                "micros": {"fiber": 6},
            }
        ]
    )

    assert result.total_impact == pytest.approx(12.24)
    assert result.details[0].resolved_gi == 50


def test_quantity_scales_and_zero_quantity_stays_in_details() -> None:
    result = _estimate(
        [
            {"name": "rice", "quantity": 2, "macros": {"carbohydrates": 10}},
            {"name": "banana", "quantity": 0, "macros": {"carbohydrates": 25}},
        ]
    )

    assert [detail.name for detail in result.details] == ["rice", "banana"]
    assert result.details[0].impact == pytest.approx(14.0)
    assert result.details[1].impact == 0.0
    assert result.total_impact == pytest.approx(14.0)


def test_level_boundaries() -> None:
    estimator = ImpactEstimator(ModelParameters())

    assert estimator.classify(0) is ImpactLevel.NONE
    assert estimator.classify(15.0) is ImpactLevel.LOW
    assert estimator.classify(15.0001) is ImpactLevel.MEDIUM
    assert estimator.classify(30.0) is ImpactLevel.MEDIUM
    assert estimator.classify(30.0001) is ImpactLevel.HIGH


def test_exact_thresholds_through_the_pipeline() -> None:
    low = _estimate(
        [{"name": "x", "glycemicIndex": 50, "macros": {"carbohydrates": 30}}]
    )
    medium = _estimate(
        [{"name": "x", "glycemicIndex": 100, "macros": {"carbohydrates": 30}}]
    )

    assert low.total_impact == 15.0
    assert low.impact_level is ImpactLevel.LOW
    assert medium.total_impact == 30.0
    assert medium.impact_level is ImpactLevel.MEDIUM


def test_overflow_is_clamped_to_zero() -> None:
    result = _estimate(
        [
            {
                "name": "x",
                "glycemicIndex": 100,
                "quantity": 1e308,
                "macros": {"carbohydrates": 1e308},
            }
        ]
    )

    assert result.total_impact == 0.0
    assert result.impact_level is ImpactLevel.NONE


def test_macro_totals_are_quantity_weighted() -> None:
    parameters = ModelParameters()
    normalized = NutrientNormalizer(parameters).normalize(
        [
            {"name": "a", "quantity": 2, "macros": {"carbohydrates": 10, "fat": 1}},
            {"name": "b", "macros": {"protein": 3}, "micros": {"fiber": 4}},
        ]
    )

    totals = macro_totals(normalized)

    assert (totals.carbohydrates, totals.protein, totals.fat, totals.fiber) == (
        20.0,
        3.0,
        2.0,
        4.0,
    )
