"""Meal entry service: persists meals with their computed glucose response."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from nutrisnap.domain.glycemic import MealGlucoseReport
from nutrisnap.domain.meals import ImpactGroup, MealEntry, MealImpactRef, MealSummary
from nutrisnap.services.glucose import (
    MAX_BASELINE_GLUCOSE,
    GlucoseEngine,
    TimePoint,
    advice_to_payload,
    curve_to_payload,
    details_to_payload,
    parse_request,
    swaps_to_payload,
)

_logger = logging.getLogger(__name__)

DEFAULT_MEAL_TYPE = "other"


class MealEntryNotFoundError(LookupError):
    """Raised when a meal entry does not exist."""


class MealEntryAccessError(PermissionError):
    """Raised when a meal entry belongs to another user."""


class MealEntryRepository(Protocol):
    """Persistence interface for meal entries."""

    def insert_entry(self, entry: MealEntry) -> MealEntry:
        """Store a new meal entry and return it."""

    def get_entry(self, entry_id: UUID) -> MealEntry | None:
        """Return a meal entry by id."""

    def list_entries(  # noqa: PLR0913
        self,
        user_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
        descending: bool,
    ) -> list[MealEntry]:
        """Return a user's meal entries logged within a time range."""

    def update_entry(self, entry: MealEntry) -> MealEntry:
        """Replace a stored meal entry and return it."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete a meal entry."""


class MealEntryRequest(BaseModel):
    """Payload for creating a meal entry."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    foods: list[dict[str, Any]] = Field(min_length=1)
    baseline_glucose: int | None = Field(
        default=None, alias="baselineGlucose", gt=0, le=MAX_BASELINE_GLUCOSE
    )
    time_points: list[TimePoint] | None = Field(default=None, alias="timePoints")
    meal_type: str | None = Field(default=None, alias="mealType")
    logged_at: datetime | None = Field(default=None, alias="loggedAt")


class MealEntryUpdate(BaseModel):
    """Payload for updating a meal entry; omitted fields are kept."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    foods: list[dict[str, Any]] | None = Field(default=None, min_length=1)
    baseline_glucose: int | None = Field(
        default=None, alias="baselineGlucose", gt=0, le=MAX_BASELINE_GLUCOSE
    )
    time_points: list[TimePoint] | None = Field(default=None, alias="timePoints")
    meal_type: str | None = Field(default=None, alias="mealType")
    logged_at: datetime | None = Field(default=None, alias="loggedAt")


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MealEntryService:
    """Creates, updates and summarizes meal entries for a user."""

    engine: GlucoseEngine
    repository: MealEntryRepository
    clock: Callable[[], datetime] = _utc_now

    def create_entry(self, user_id: str, payload: Mapping[str, object]) -> MealEntry:
        """Analyze a meal and persist it."""
        request = parse_request(MealEntryRequest, payload)
        report = self.engine.analyze_meal(
            request.foods,
            baseline_glucose=request.baseline_glucose,
            time_points=request.time_points,
        )
        now = self.clock()
        entry = MealEntry(
            id=uuid4(),
            user_id=user_id,
            logged_at=_as_utc(request.logged_at) if request.logged_at else now,
            meal_type=request.meal_type,
            foods=request.foods,
            created_at=now,
            updated_at=now,
            **_report_fields(report),
        )
        created = self.repository.insert_entry(entry)
        _logger.info(
            "Created meal entry %s for user %s (impact=%.1f)",
            created.id,
            user_id,
            created.total_impact,
        )
        return created

    def get_entry(self, user_id: str, entry_id: UUID) -> MealEntry:
        """Return a meal entry owned by the user."""
        entry = self.repository.get_entry(entry_id)
        if entry is None:
            raise MealEntryNotFoundError(str(entry_id))
        if entry.user_id != user_id:
            raise MealEntryAccessError(str(entry_id))
        return entry

    def list_entries(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 50,
        descending: bool = True,
    ) -> list[MealEntry]:
        """Return a user's meal entries, newest first by default."""
        return self.repository.list_entries(
            user_id,
            _as_utc(start) if start else None,
            _as_utc(end) if end else None,
            limit,
            descending,
        )

    def update_entry(
        self, user_id: str, entry_id: UUID, payload: Mapping[str, object]
    ) -> MealEntry:
        """Apply changes, recomputing the glucose response if the meal changed."""
        current = self.get_entry(user_id, entry_id)
        update = parse_request(MealEntryUpdate, payload)
        changes: dict[str, object] = {"updated_at": self.clock()}
        if update.meal_type is not None:
            changes["meal_type"] = update.meal_type
        if update.logged_at is not None:
            changes["logged_at"] = _as_utc(update.logged_at)
        if (
            update.foods is not None
            or update.baseline_glucose is not None
            or update.time_points is not None
        ):
            foods = update.foods if update.foods is not None else current.foods
            report = self.engine.analyze_meal(
                foods,
                baseline_glucose=update.baseline_glucose or current.baseline_glucose,
                time_points=(
                    update.time_points
                    if update.time_points is not None
                    else _curve_time_points(current)
                ),
            )
            changes["foods"] = foods
            changes.update(_report_fields(report))
        return self.repository.update_entry(replace(current, **changes))

    def delete_entry(self, user_id: str, entry_id: UUID) -> None:
        """Delete a meal entry owned by the user."""
        self.get_entry(user_id, entry_id)
        self.repository.delete_entry(entry_id)
        _logger.info("Deleted meal entry %s for user %s", entry_id, user_id)

    def summarize(
        self,
        user_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 500,
    ) -> MealSummary:
        """Return impact statistics over a user's meals in a period."""
        entries = self.list_entries(user_id, start, end, limit=limit)
        return summarize_entries(entries)


def summarize_entries(entries: list[MealEntry]) -> MealSummary:
    """Aggregate meal impacts overall, by day and by meal type."""
    if not entries:
        return MealSummary(
            total_meals=0,
            average_impact=0.0,
            highest=None,
            lowest=None,
            by_day=[],
            by_meal_type=[],
        )
    ranked = sorted(entries, key=lambda entry: entry.total_impact, reverse=True)
    total = sum(entry.total_impact for entry in entries)
    return MealSummary(
        total_meals=len(entries),
        average_impact=total / len(entries),
        highest=_impact_ref(ranked[0]),
        lowest=_impact_ref(ranked[-1]),
        by_day=_group(entries, lambda entry: entry.logged_at.date().isoformat()),
        by_meal_type=_group(
            entries, lambda entry: entry.meal_type or DEFAULT_MEAL_TYPE
        ),
    )


def _group(
    entries: list[MealEntry], key: Callable[[MealEntry], str]
) -> list[ImpactGroup]:
    totals: dict[str, tuple[float, int]] = {}
    for entry in entries:
        group_key = key(entry)
        impact, count = totals.get(group_key, (0.0, 0))
        totals[group_key] = (impact + entry.total_impact, count + 1)
    return [
        ImpactGroup(key=group_key, total_impact=impact, meal_count=count)
        for group_key, (impact, count) in totals.items()
    ]


def _impact_ref(entry: MealEntry) -> MealImpactRef:
    return MealImpactRef(
        id=entry.id,
        logged_at=entry.logged_at,
        foods=[str(food.get("name", "")) for food in entry.foods],
        impact=entry.total_impact,
    )


def _report_fields(report: MealGlucoseReport) -> dict[str, object]:
    return {
        "baseline_glucose": report.baseline_glucose,
        "total_impact": report.impact.total_impact,
        "impact_level": report.impact.impact_level.value,
        "details": details_to_payload(report.impact.details),
        "glucose_curve": curve_to_payload(report.curve),
        "advice": advice_to_payload(report.advice),
        "swap_suggestions": swaps_to_payload(report.swap_suggestions),
    }


def _curve_time_points(entry: MealEntry) -> list[int] | None:
    # The stored curve keeps the offsets the entry was computed on.
    if not entry.glucose_curve:
        return None
    return [int(point["timeOffsetMinutes"]) for point in entry.glucose_curve]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
