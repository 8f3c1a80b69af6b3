"""Meal glycemic response engine."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from nutrisnap.domain.glycemic import (
    Advice,
    GlucoseCurve,
    ImpactDetail,
    MealGlucoseReport,
    SwapSuggestion,
)
from nutrisnap.domain.parameters import ModelParameters
from nutrisnap.services.advisory import AdvisoryGenerator
from nutrisnap.services.curve import CurveSynthesizer, peak_value
from nutrisnap.services.impact import ImpactEstimator, macro_totals
from nutrisnap.services.normalizer import NutrientNormalizer

_logger = logging.getLogger(__name__)

MAX_BASELINE_GLUCOSE = 1000
MAX_TIME_POINT_MINUTES = 1440

TimePoint = Annotated[int, Field(ge=0, le=MAX_TIME_POINT_MINUTES)]


class MealValidationError(ValueError):
    """Raised when a meal request is structurally malformed."""


class AnalyzeMealRequest(BaseModel):
    """Engine input: foods plus optional baseline and time points."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    foods: list[dict[str, Any]] = Field(default_factory=list)
    baseline_glucose: int | None = Field(
        default=None, alias="baselineGlucose", gt=0, le=MAX_BASELINE_GLUCOSE
    )
    time_points: list[TimePoint] | None = Field(default=None, alias="timePoints")


class ImpactCurveRequest(BaseModel):
    """Input for the curve built from a pre-aggregated impact score."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    total_impact: float = Field(alias="totalImpact", ge=0, allow_inf_nan=False)
    baseline_glucose: int | None = Field(
        default=None, alias="baselineGlucose", gt=0, le=MAX_BASELINE_GLUCOSE
    )

    @field_validator("total_impact", mode="before")
    @classmethod
    def reject_oversized_numbers(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                float(value)
            except OverflowError as exc:
                raise ValueError("Number is too large") from exc
        return value


@dataclass
class GlucoseEngine:
    """Runs the normalize, score, curve and advise pipeline for a meal."""

    parameters: ModelParameters
    normalizer: NutrientNormalizer = field(init=False)
    estimator: ImpactEstimator = field(init=False)
    synthesizer: CurveSynthesizer = field(init=False)
    advisor: AdvisoryGenerator = field(init=False)

    def __post_init__(self) -> None:
        self.normalizer = NutrientNormalizer(self.parameters)
        self.estimator = ImpactEstimator(self.parameters)
        self.synthesizer = CurveSynthesizer(self.parameters)
        self.advisor = AdvisoryGenerator(self.parameters)

    def analyze(self, payload: object) -> dict[str, object]:
        """Analyze a raw meal payload; failures come back as success=false."""
        try:
            request = parse_request(AnalyzeMealRequest, payload)
            report = self.analyze_meal(
                request.foods,
                baseline_glucose=request.baseline_glucose,
                time_points=request.time_points,
            )
        except MealValidationError as exc:
            _logger.warning("Rejected meal analysis request: %s", exc)
            return {"success": False, "error": str(exc)}
        return {"success": True, **report_to_payload(report)}

    def analyze_meal(
        self,
        foods: Sequence[Mapping[str, object]],
        baseline_glucose: int | None = None,
        time_points: Sequence[int] | None = None,
    ) -> MealGlucoseReport:
        """Return the full glucose report for a list of raw food payloads."""
        if isinstance(foods, str | bytes) or not isinstance(foods, Sequence):
            raise MealValidationError("foods must be an array")
        for index, food in enumerate(foods):
            if not isinstance(food, Mapping):
                raise MealValidationError(f"foods[{index}] must be an object")
        if time_points is not None and any(
            not 0 <= point <= MAX_TIME_POINT_MINUTES for point in time_points
        ):
            raise MealValidationError(
                f"timePoints must be within 0..{MAX_TIME_POINT_MINUTES}"
            )
        baseline = (
            self.parameters.baseline_glucose
            if baseline_glucose is None
            else baseline_glucose
        )
        if not 0 < baseline <= MAX_BASELINE_GLUCOSE:
            raise MealValidationError(
                f"baselineGlucose must be within 1..{MAX_BASELINE_GLUCOSE}"
            )

        normalized = self.normalizer.normalize(foods)
        impact = self.estimator.estimate(normalized)
        totals = macro_totals(normalized)
        if totals.carbohydrates > 0:
            curve = self.synthesizer.from_macros(
                totals, baseline=baseline, time_points=time_points
            )
        else:
            # A meal without carbohydrates stays at baseline even if it has protein.
            curve = self.synthesizer.flat(baseline=baseline, time_points=time_points)
        return MealGlucoseReport(
            baseline_glucose=baseline,
            impact=impact,
            curve=curve,
            advice=tuple(self.advisor.advice(impact.total_impact)),
            swap_suggestions=tuple(self.advisor.swap_suggestions(impact.details)),
        )

    def impact_curve(self, payload: object) -> dict[str, object]:
        """Build the simplified curve from a pre-aggregated impact score."""
        try:
            request = parse_request(ImpactCurveRequest, payload)
        except MealValidationError as exc:
            _logger.warning("Rejected impact curve request: %s", exc)
            return {"success": False, "error": str(exc)}
        baseline = (
            self.parameters.baseline_glucose
            if request.baseline_glucose is None
            else request.baseline_glucose
        )
        curve = self.synthesizer.from_impact(request.total_impact, baseline=baseline)
        return {
            "success": True,
            "totalImpact": request.total_impact,
            "impactLevel": self.estimator.classify(request.total_impact).value,
            "baselineGlucose": baseline,
            "peakValue": peak_value(curve),
            "curveData": curve_to_payload(curve),
        }


def report_to_payload(report: MealGlucoseReport) -> dict[str, object]:
    """Serialize a report to the camelCase wire shape."""
    return {
        "totalImpact": report.impact.total_impact,
        "impactLevel": report.impact.impact_level.value,
        "baselineGlucose": report.baseline_glucose,
        "curveData": curve_to_payload(report.curve),
        "advisory": [tip.description for tip in report.advice],
        "swapSuggestions": swaps_to_payload(report.swap_suggestions),
        "details": details_to_payload(report.impact.details),
    }


def curve_to_payload(curve: GlucoseCurve) -> list[dict[str, int]]:
    return [
        {
            "timeOffsetMinutes": point.time_offset_minutes,
            "glucoseLevel": point.glucose_level,
        }
        for point in curve
    ]


def advice_to_payload(advice: Sequence[Advice]) -> list[dict[str, str]]:
    return [
        {"type": tip.kind, "title": tip.title, "description": tip.description}
        for tip in advice
    ]


def swaps_to_payload(suggestions: Sequence[SwapSuggestion]) -> list[dict[str, object]]:
    return [
        {
            "originalFood": suggestion.original_food,
            "alternative": suggestion.option.alternative,
            "reductionPercent": suggestion.option.reduction_percent,
            "rationale": suggestion.option.rationale,
        }
        for suggestion in suggestions
    ]


def details_to_payload(details: Sequence[ImpactDetail]) -> list[dict[str, object]]:
    return [
        {
            "name": detail.name,
            "impact": detail.impact,
            "quantity": detail.quantity,
            "resolvedGI": detail.resolved_gi,
        }
        for detail in details
    ]


def parse_request(model: type[BaseModel], payload: object) -> Any:
    """Validate a raw payload against a request model."""
    if not isinstance(payload, Mapping):
        raise MealValidationError("Request body must be an object")
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        raise MealValidationError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message
