"""Tests for glucose curve synthesis."""

import pytest

from nutrisnap.domain.glycemic import CurvePoint, MacroTotals
from nutrisnap.domain.parameters import ModelParameters
from nutrisnap.services.curve import (
    CurveSynthesizer,
    normalize_time_points,
    peak_value,
)

WHITE_BREAD = MacroTotals(carbohydrates=30, protein=5, fat=2, fiber=0)


def _levels(curve) -> list[int]:  # type: ignore[no-untyped-def]
    return [point.glucose_level for point in curve]


def _is_unimodal(levels: list[int]) -> bool:
    peak = levels.index(max(levels))
    rising = all(a <= b for a, b in zip(levels[: peak + 1], levels[1 : peak + 1]))
    falling = all(a >= b for a, b in zip(levels[peak:], levels[peak + 1 :]))
    return rising and falling


def test_shape_for_white_bread() -> None:
    shape = CurveSynthesizer(ModelParameters()).shape_for(WHITE_BREAD)

    assert shape.slowing_effect == pytest.approx(2.5)
    assert shape.peak_minutes == pytest.approx(31.25)
    assert shape.peak_impact == pytest.approx(106.65)
    assert shape.decay_rate == pytest.approx(0.6925)
    assert shape.rise_shape == pytest.approx(1.475)


def test_macro_curve_for_white_bread() -> None:
    curve = CurveSynthesizer(ModelParameters()).from_macros(WHITE_BREAD)

    assert len(curve) == 13
    assert curve[0] == CurvePoint(time_offset_minutes=0, glucose_level=83)
    assert _levels(curve)[:4] == [83, 119, 183, 183]
    assert curve[-1] == CurvePoint(time_offset_minutes=180, glucose_level=136)
    assert _is_unimodal(_levels(curve))


def test_macro_curve_caps_peak_impact() -> None:
    synthesizer = CurveSynthesizer(ModelParameters())

    curve = synthesizer.from_macros(
        MacroTotals(carbohydrates=100, protein=0, fat=0, fiber=0), time_points=[30]
    )

    assert _levels(curve) == [83, 193]


def test_fall_span_of_zero_uses_peak_value() -> None:
    synthesizer = CurveSynthesizer(ModelParameters())

    curve = synthesizer.from_macros(
        MacroTotals(carbohydrates=10, protein=0, fat=0, fiber=0), time_points=[30]
    )

    assert _levels(curve) == [83, 118]


def test_fiber_can_cancel_carbs() -> None:
    synthesizer = CurveSynthesizer(ModelParameters())

    curve = synthesizer.from_macros(
        MacroTotals(carbohydrates=2, protein=0, fat=0, fiber=20), baseline=95
    )

    assert set(_levels(curve)) == {95}


def test_custom_time_points_are_sorted_and_start_at_zero() -> None:
    synthesizer = CurveSynthesizer(ModelParameters())

    curve = synthesizer.from_macros(WHITE_BREAD, baseline=100, time_points=[90, 30, 30])

    assert [point.time_offset_minutes for point in curve] == [0, 30, 90]
    assert curve[0].glucose_level == 100
    assert min(_levels(curve)) >= 100


def test_normalize_time_points_rejects_negative() -> None:
    with pytest.raises(ValueError):
        normalize_time_points([0, -15])

    assert normalize_time_points([]) == [0]


def test_scalar_curve_values() -> None:
    curve = CurveSynthesizer(ModelParameters()).from_impact(22.5)

    assert len(curve) == 13
    levels = _levels(curve)
    assert levels[:5] == [83, 87, 98, 117, 108]
    assert levels[-1] == 85
    assert peak_value(curve) == 117
    assert _is_unimodal(levels)


def test_scalar_curve_treats_bad_impact_as_zero() -> None:
    synthesizer = CurveSynthesizer(ModelParameters())

    assert set(_levels(synthesizer.from_impact(-5, baseline=90))) == {90}
    assert set(_levels(synthesizer.from_impact(float("nan")))) == {83}


def test_flat_curve_uses_default_points() -> None:
    curve = CurveSynthesizer(ModelParameters()).flat(baseline=70)

    assert [point.time_offset_minutes for point in curve] == list(range(0, 181, 15))
    assert set(_levels(curve)) == {70}
