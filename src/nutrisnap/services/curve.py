"""Synthesis of predicted blood-glucose curves.

Two entry points share one output shape. ``from_macros`` is the full model:
fat, protein and fiber add up to a slowing effect that delays and flattens
the peak and slows the decay. ``from_impact`` is the simplified model for
callers that only hold an aggregate impact score.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from nutrisnap.domain.glycemic import CurvePoint, GlucoseCurve, MacroTotals
from nutrisnap.domain.parameters import ModelParameters

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurveShape:
    """Derived parameters of a macro-aware curve."""

    slowing_effect: float
    peak_minutes: float
    peak_impact: float
    decay_rate: float
    rise_shape: float


@dataclass
class CurveSynthesizer:
    """Builds glucose curves from meal macros or a scalar impact."""

    parameters: ModelParameters

    def shape_for(self, totals: MacroTotals) -> CurveShape:
        """Compute the peak, decay and rise shape for a meal's macros."""
        constants = self.parameters.macro_curve
        carb_impact = totals.carbohydrates * constants.carb_factor
        protein_impact = totals.protein * constants.protein_factor
        fiber_reduction = totals.fiber * constants.fiber_reduction
        slowing_effect = (
            totals.fat * constants.fat_slowing
            + totals.protein * constants.protein_slowing
            + totals.fiber * constants.fiber_slowing
        )
        net_carb_impact = max(0.0, carb_impact - fiber_reduction)
        total_impact = net_carb_impact + protein_impact

        peak_minutes = min(
            constants.base_peak_minutes
            + slowing_effect * constants.peak_delay_per_slowing,
            constants.max_peak_minutes,
        )
        peak_reduction = 1 - min(
            slowing_effect * constants.peak_reduction_per_slowing,
            constants.max_peak_reduction,
        )
        peak_impact = min(total_impact * peak_reduction, constants.max_impact)
        decay_rate = max(
            constants.base_decay_rate - slowing_effect * constants.decay_per_slowing,
            constants.min_decay_rate,
        )
        rise_shape = max(
            constants.min_rise_shape,
            constants.base_rise_shape
            - slowing_effect * constants.rise_shape_per_slowing,
        )
        return CurveShape(
            slowing_effect=slowing_effect,
            peak_minutes=peak_minutes,
            peak_impact=peak_impact,
            decay_rate=decay_rate,
            rise_shape=rise_shape,
        )

    def from_macros(
        self,
        totals: MacroTotals,
        baseline: int | None = None,
        time_points: Iterable[int] | None = None,
    ) -> GlucoseCurve:
        """Predict glucose at each time point from a meal's macro totals."""
        resolved_baseline = self._baseline(baseline)
        points = normalize_time_points(
            self.parameters.default_time_points if time_points is None else time_points
        )
        shape = self.shape_for(totals)
        if not math.isfinite(shape.peak_impact):
            _logger.warning("Non-finite peak impact; returning a flat curve")
            return _flat(points, resolved_baseline)
        if shape.peak_impact <= 0:
            return _flat(points, resolved_baseline)

        fall_span = points[-1] - shape.peak_minutes
        curve = []
        for minutes in points:
            if minutes == 0:
                value = float(resolved_baseline)
            elif minutes < shape.peak_minutes:
                progress = minutes / shape.peak_minutes
                value = resolved_baseline + shape.peak_impact * (
                    progress**shape.rise_shape
                )
            else:
                progress = (
                    (minutes - shape.peak_minutes) / fall_span if fall_span else 0.0
                )
                value = resolved_baseline + shape.peak_impact * math.exp(
                    -shape.decay_rate * progress
                )
            curve.append(
                CurvePoint(
                    time_offset_minutes=minutes,
                    glucose_level=_clamp(value, resolved_baseline),
                )
            )
        return tuple(curve)

    def flat(
        self, baseline: int | None = None, time_points: Iterable[int] | None = None
    ) -> GlucoseCurve:
        """Return a curve that stays at baseline for every time point."""
        return _flat(
            normalize_time_points(
                self.parameters.default_time_points
                if time_points is None
                else time_points
            ),
            self._baseline(baseline),
        )

    def from_impact(self, impact: float, baseline: int | None = None) -> GlucoseCurve:
        """Predict a fixed 15-minute curve from an aggregate impact score."""
        resolved_baseline = self._baseline(baseline)
        constants = self.parameters.scalar_curve
        if not math.isfinite(impact) or impact < 0:
            impact = 0.0
        rise = impact * constants.peak_multiplier
        curve = []
        for minutes in range(0, constants.horizon_minutes + 1, constants.step_minutes):
            if minutes == 0:
                value = float(resolved_baseline)
            elif minutes < constants.peak_minutes:
                ratio = minutes / constants.peak_minutes
                value = resolved_baseline + rise * ratio * ratio
            else:
                value = resolved_baseline + rise * math.exp(
                    -constants.decay_rate * (minutes - constants.peak_minutes)
                )
            curve.append(
                CurvePoint(
                    time_offset_minutes=minutes,
                    glucose_level=_clamp(value, resolved_baseline),
                )
            )
        return tuple(curve)

    def _baseline(self, baseline: int | None) -> int:
        if baseline is None:
            return self.parameters.baseline_glucose
        return baseline


def normalize_time_points(time_points: Iterable[int]) -> list[int]:
    """Return sorted, unique time points that always start at 0."""
    points = {int(point) for point in time_points}
    if any(point < 0 for point in points):
        raise ValueError("Time points must not be negative")
    points.add(0)
    return sorted(points)


def peak_value(curve: GlucoseCurve) -> int:
    """Return the highest glucose level of a curve."""
    return max(point.glucose_level for point in curve)


def _flat(points: list[int], baseline: int) -> GlucoseCurve:
    return tuple(
        CurvePoint(time_offset_minutes=minutes, glucose_level=baseline)
        for minutes in points
    )


def _clamp(value: float, baseline: int) -> int:
    if not math.isfinite(value):
        _logger.warning("Non-finite glucose value clamped to baseline")
        return baseline
    return max(round(value), baseline)
