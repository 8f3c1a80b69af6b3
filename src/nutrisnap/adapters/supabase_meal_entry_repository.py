"""Supabase repository for meal entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nutrisnap.domain.meals import MealEntry
from nutrisnap.services.meals import MealEntryRepository

_COLUMNS = (
    "id, user_id, logged_at, meal_type, foods, baseline_glucose, total_impact, "
    "impact_level, details, glucose_curve, advice, swap_suggestions, "
    "created_at, updated_at"
)


@dataclass
class SupabaseMealEntryRepository(MealEntryRepository):
    """Supabase implementation for meal entries."""

    client: Client

    def insert_entry(self, entry: MealEntry) -> MealEntry:
        """Insert a meal entry row."""
        response = self.client.table("meal_entries").insert(_to_row(entry)).execute()
        if not response.data:
            raise RuntimeError("Failed to create meal entry")
        return _parse_entry(response.data[0])

    def get_entry(self, entry_id: UUID) -> MealEntry | None:
        """Return a meal entry by id."""
        response = (
            self.client.table("meal_entries")
            .select(_COLUMNS)
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def list_entries(  # noqa: PLR0913
        self,
        user_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
        descending: bool,
    ) -> list[MealEntry]:
        """Return a user's meal entries within a time range."""
        query = (
            self.client.table("meal_entries").select(_COLUMNS).eq("user_id", user_id)
        )
        if start is not None:
            query = query.gte("logged_at", start.isoformat())
        if end is not None:
            query = query.lte("logged_at", end.isoformat())
        response = query.order("logged_at", desc=descending).limit(limit).execute()
        return [_parse_entry(row) for row in response.data or []]

    def update_entry(self, entry: MealEntry) -> MealEntry:
        """Replace a meal entry row."""
        row = _to_row(entry)
        row.pop("id")
        row.pop("created_at")
        response = (
            self.client.table("meal_entries")
            .update(row)
            .eq("id", str(entry.id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update meal entry")
        return _parse_entry(response.data[0])

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete a meal entry row."""
        self.client.table("meal_entries").delete().eq("id", str(entry_id)).execute()


def _to_row(entry: MealEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "user_id": entry.user_id,
        "logged_at": entry.logged_at.isoformat(),
        "meal_type": entry.meal_type,
        "foods": entry.foods,
        "baseline_glucose": entry.baseline_glucose,
        "total_impact": entry.total_impact,
        "impact_level": entry.impact_level,
        "details": entry.details,
        "glucose_curve": entry.glucose_curve,
        "advice": entry.advice,
        "swap_suggestions": entry.swap_suggestions,
        "created_at": entry.created_at.isoformat(),
        "updated_at": entry.updated_at.isoformat(),
    }


def _parse_entry(row: dict[str, object]) -> MealEntry:
    return MealEntry(
        id=UUID(str(row["id"])),
        user_id=str(row["user_id"]),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
        meal_type=row.get("meal_type"),
        foods=list(row.get("foods") or []),
        baseline_glucose=int(row.get("baseline_glucose", 0)),
        total_impact=float(row.get("total_impact", 0.0)),
        impact_level=str(row.get("impact_level", "none")),
        details=list(row.get("details") or []),
        glucose_curve=list(row.get("glucose_curve") or []),
        advice=list(row.get("advice") or []),
        swap_suggestions=list(row.get("swap_suggestions") or []),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
