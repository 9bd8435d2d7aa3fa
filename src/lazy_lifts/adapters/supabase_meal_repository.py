"""Supabase repository for meal entries."""

from dataclasses import dataclass
from typing import Any

from supabase import Client

from lazy_lifts.adapters.supabase_support import execute, parse_rows, require_str
from lazy_lifts.domain.meals import MealEntry
from lazy_lifts.domain.timestamps import parse_timestamp
from lazy_lifts.services.meals import MealRepository

MEALS_TABLE = "meals"
MEAL_COLUMNS = "doc_id, timestamp, description, calories, protein, carbs, fat"


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals."""

    client: Client

    def list_meals(self, owner_id: str) -> list[MealEntry]:
        """Return the owner's meals, most recent first."""
        rows = execute(
            self.client.table(MEALS_TABLE)
            .select(MEAL_COLUMNS)
            .eq("owner_id", owner_id)
            .order("timestamp", desc=True),
            "list meals",
        )
        return parse_rows(rows, _parse_meal, MEALS_TABLE)

    def get_meal(self, owner_id: str, meal_id: str) -> MealEntry | None:
        """Return a meal by id."""
        rows = execute(
            self.client.table(MEALS_TABLE)
            .select(MEAL_COLUMNS)
            .eq("owner_id", owner_id)
            .eq("doc_id", meal_id)
            .limit(1),
            "load meal",
        )
        meals = parse_rows(rows, _parse_meal, MEALS_TABLE)
        return meals[0] if meals else None

    def save_meal(self, owner_id: str, entry: MealEntry) -> None:
        """Upsert a meal row."""
        execute(
            self.client.table(MEALS_TABLE).upsert(
                {
                    "owner_id": owner_id,
                    "doc_id": entry.id,
                    "timestamp": entry.timestamp.isoformat(),
                    "description": entry.description,
                    "calories": entry.calories,
                    "protein": entry.protein,
                    "carbs": entry.carbs,
                    "fat": entry.fat,
                },
                on_conflict="owner_id,doc_id",
            ),
            "save meal",
        )

    def delete_meal(self, owner_id: str, meal_id: str) -> bool:
        """Delete a meal row and report whether one was removed."""
        rows = execute(
            self.client.table(MEALS_TABLE)
            .delete()
            .eq("owner_id", owner_id)
            .eq("doc_id", meal_id),
            "delete meal",
        )
        return bool(rows)


def _parse_meal(row: dict[str, Any]) -> MealEntry:
    return MealEntry(
        id=str(row["doc_id"]),
        timestamp=parse_timestamp(row["timestamp"]),
        description=require_str(row, "description"),
        calories=float(row["calories"]),
        protein=float(row["protein"]),
        carbs=float(row["carbs"]),
        fat=float(row["fat"]),
    )
