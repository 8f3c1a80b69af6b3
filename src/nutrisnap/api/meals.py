"""Meal entry API endpoints."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Any, Literal
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Body, HTTPException, Query, Request, status

from nutrisnap.services.glucose import MealValidationError
from nutrisnap.services.meals import MealEntryAccessError, MealEntryNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable

    from nutrisnap.containers import AppContainer
    from nutrisnap.domain.meals import ImpactGroup, MealEntry, MealImpactRef
    from nutrisnap.services.meals import MealEntryService

router = APIRouter(prefix="/users/{user_id}/meals", tags=["meals"])


def _service(request: Request) -> MealEntryService:
    container: AppContainer = request.app.state.container
    return container.meal_entry_service


def _run(func: Callable[[], Any]) -> Any:
    """Call a service method, mapping its errors to HTTP responses."""
    try:
        return func()
    except MealValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except MealEntryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except MealEntryAccessError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN) from exc


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_meal(
    user_id: str, request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, object]:
    """Analyze and store a meal."""
    service = _service(request)
    entry = _run(lambda: service.create_entry(user_id, payload))
    return {"success": True, "mealEntry": entry_payload(entry)}


@router.get("")
async def list_meals(  # noqa: PLR0913
    user_id: str,
    request: Request,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    order: Literal["asc", "desc"] = "desc",
) -> dict[str, object]:
    """List a user's meals in a date range."""
    entries = _service(request).list_entries(
        user_id, start, end, limit=limit, descending=order == "desc"
    )
    return {
        "success": True,
        "mealEntries": [entry_payload(entry) for entry in entries],
        "pagination": {"total": len(entries), "hasMore": len(entries) == limit},
    }


@router.get("/summary")
async def meals_summary(
    user_id: str,
    request: Request,
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict[str, object]:
    """Summarize a user's meal impacts in a date range."""
    summary = _service(request).summarize(user_id, start, end)
    return {
        "success": True,
        "summary": {
            "totalMeals": summary.total_meals,
            "averageGlucoseImpact": summary.average_impact,
            "highestImpactMeal": _ref_payload(summary.highest),
            "lowestImpactMeal": _ref_payload(summary.lowest),
            "impactByDay": [_group_payload(group, "date") for group in summary.by_day],
            "impactByMealType": [
                _group_payload(group, "type") for group in summary.by_meal_type
            ],
        },
    }


@router.get("/{meal_id}")
async def get_meal(user_id: str, meal_id: UUID, request: Request) -> dict[str, object]:
    """Return one meal entry."""
    service = _service(request)
    entry = _run(lambda: service.get_entry(user_id, meal_id))
    return {"success": True, "mealEntry": entry_payload(entry)}


@router.patch("/{meal_id}")
async def update_meal(
    user_id: str,
    meal_id: UUID,
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> dict[str, object]:
    """Update a meal entry, recomputing its glucose response when needed."""
    service = _service(request)
    entry = _run(lambda: service.update_entry(user_id, meal_id, payload))
    return {"success": True, "mealEntry": entry_payload(entry)}


@router.delete("/{meal_id}")
async def delete_meal(
    user_id: str, meal_id: UUID, request: Request
) -> dict[str, object]:
    """Delete a meal entry."""
    service = _service(request)
    _run(lambda: service.delete_entry(user_id, meal_id))
    return {"success": True}


def entry_payload(entry: MealEntry) -> dict[str, object]:
    """Serialize a meal entry to the camelCase wire shape."""
    return {
        "id": str(entry.id),
        "userId": entry.user_id,
        "loggedAt": entry.logged_at.isoformat(),
        "mealType": entry.meal_type,
        "foods": entry.foods,
        "baselineGlucose": entry.baseline_glucose,
        "estimatedGlucoseImpact": entry.total_impact,
        "impactLevel": entry.impact_level,
        "foodImpactDetails": entry.details,
        "glucoseCurve": entry.glucose_curve,
        "advice": entry.advice,
        "swapSuggestions": entry.swap_suggestions,
        "createdAt": entry.created_at.isoformat(),
        "updatedAt": entry.updated_at.isoformat(),
    }


def _ref_payload(ref: MealImpactRef | None) -> dict[str, object] | None:
    if ref is None:
        return None
    return {
        "id": str(ref.id),
        "loggedAt": ref.logged_at.isoformat(),
        "foods": ref.foods,
        "impact": ref.impact,
    }


def _group_payload(group: ImpactGroup, key_name: str) -> dict[str, object]:
    return {
        key_name: group.key,
        "totalImpact": group.total_impact,
        "mealCount": group.meal_count,
        "averageImpact": group.average_impact,
    }
