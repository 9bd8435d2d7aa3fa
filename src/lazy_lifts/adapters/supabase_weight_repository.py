"""Supabase repository for weight entries."""

from dataclasses import dataclass
from typing import Any

from supabase import Client

from lazy_lifts.adapters.supabase_support import execute, parse_rows
from lazy_lifts.domain.timestamps import parse_timestamp
from lazy_lifts.domain.weights import WeightEntry
from lazy_lifts.services.weights import WeightRepository

WEIGHTS_TABLE = "weight_entries"


@dataclass
class SupabaseWeightRepository(WeightRepository):
    """Supabase implementation for weight entries."""

    client: Client

    def list_weights(self, owner_id: str) -> list[WeightEntry]:
        rows = execute(
            self.client.table(WEIGHTS_TABLE)
            .select("doc_id, weight, date")
            .eq("owner_id", owner_id)
            .order("date", desc=True),
            "list weights",
        )
        return parse_rows(rows, _parse_weight, WEIGHTS_TABLE)

    def get_weight(self, owner_id: str, entry_id: str) -> WeightEntry | None:
        rows = execute(
            self.client.table(WEIGHTS_TABLE)
            .select("doc_id, weight, date")
            .eq("owner_id", owner_id)
            .eq("doc_id", entry_id)
            .limit(1),
            "load weight",
        )
        entries = parse_rows(rows, _parse_weight, WEIGHTS_TABLE)
        return entries[0] if entries else None

    def save_weight(self, owner_id: str, entry: WeightEntry) -> None:
        execute(
            self.client.table(WEIGHTS_TABLE).upsert(
                {
                    "owner_id": owner_id,
                    "doc_id": entry.id,
                    "weight": entry.weight,
                    "date": entry.date.isoformat(),
                },
                on_conflict="owner_id,doc_id",
            ),
            "save weight",
        )

    def delete_weight(self, owner_id: str, entry_id: str) -> bool:
        rows = execute(
            self.client.table(WEIGHTS_TABLE)
            .delete()
            .eq("owner_id", owner_id)
            .eq("doc_id", entry_id),
            "delete weight",
        )
        return bool(rows)


def _parse_weight(row: dict[str, Any]) -> WeightEntry:
    return WeightEntry(
        id=str(row["doc_id"]),
        weight=float(row["weight"]),
        date=parse_timestamp(row["date"]),
    )
