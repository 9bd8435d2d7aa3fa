"""Supabase repository for workout cycles and completions."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from supabase import Client

from lazy_lifts.adapters.supabase_support import execute, parse_rows, require_str
from lazy_lifts.domain.program import SessionKey
from lazy_lifts.domain.timestamps import parse_optional_timestamp, parse_timestamp
from lazy_lifts.domain.workouts import CompletionRecord, CycleRecord
from lazy_lifts.services.cycles import CycleRepository

CYCLES_TABLE = "workout_cycles"
COMPLETIONS_TABLE = "workout_completions"
CONFLICT_COLUMNS = "owner_id,doc_id"


@dataclass
class SupabaseCycleRepository(CycleRepository):
    """Supabase implementation for cycles and completions."""

    client: Client

    def get_latest_cycle(self, owner_id: str) -> CycleRecord | None:
        """Return the highest-numbered cycle."""
        rows = execute(
            self.client.table(CYCLES_TABLE)
            .select("doc_id, cycle_number, start_date, completed_date")
            .eq("owner_id", owner_id)
            .order("cycle_number", desc=True)
            .limit(1),
            "load latest cycle",
        )
        cycles = parse_rows(rows, _parse_cycle, CYCLES_TABLE)
        return cycles[0] if cycles else None

    def get_cycle(self, owner_id: str, cycle_number: int) -> CycleRecord | None:
        """Return a cycle by number."""
        rows = execute(
            self.client.table(CYCLES_TABLE)
            .select("doc_id, cycle_number, start_date, completed_date")
            .eq("owner_id", owner_id)
            .eq("doc_id", f"cycle-{cycle_number}")
            .limit(1),
            "load cycle",
        )
        cycles = parse_rows(rows, _parse_cycle, CYCLES_TABLE)
        return cycles[0] if cycles else None

    def save_cycle(self, owner_id: str, cycle: CycleRecord) -> None:
        """Upsert a cycle row."""
        execute(
            self.client.table(CYCLES_TABLE).upsert(
                {
                    "owner_id": owner_id,
                    "doc_id": cycle.document_id,
                    "cycle_number": cycle.cycle_number,
                    "start_date": _isoformat(cycle.started_at),
                    "completed_date": _isoformat(cycle.completed_at),
                },
                on_conflict=CONFLICT_COLUMNS,
            ),
            "save cycle",
        )

    def close_cycle(
        self, owner_id: str, cycle_number: int, completed_at: datetime
    ) -> None:
        """Mark a cycle completed."""
        execute(
            self.client.table(CYCLES_TABLE)
            .update({"completed_date": completed_at.isoformat()})
            .eq("owner_id", owner_id)
            .eq("doc_id", f"cycle-{cycle_number}"),
            "close cycle",
        )

    def list_cycles(self, owner_id: str) -> list[CycleRecord]:
        """Return all cycles ordered by number."""
        rows = execute(
            self.client.table(CYCLES_TABLE)
            .select("doc_id, cycle_number, start_date, completed_date")
            .eq("owner_id", owner_id)
            .order("cycle_number", desc=False),
            "list cycles",
        )
        return parse_rows(rows, _parse_cycle, CYCLES_TABLE)

    def list_completions(
        self, owner_id: str, cycle_number: int | None = None
    ) -> list[CompletionRecord]:
        """Return completions, optionally filtered to one cycle."""
        query = (
            self.client.table(COMPLETIONS_TABLE)
            .select("doc_id, week, day, cycle, workout_name, completed_date")
            .eq("owner_id", owner_id)
        )
        if cycle_number is not None:
            query = query.eq("cycle", cycle_number)
        rows = execute(query.order("completed_date", desc=False), "list workouts")
        return parse_rows(rows, _parse_completion, COMPLETIONS_TABLE)

    def save_completion(self, owner_id: str, record: CompletionRecord) -> None:
        """Upsert a completion row keyed by its document id."""
        execute(
            self.client.table(COMPLETIONS_TABLE).upsert(
                {
                    "owner_id": owner_id,
                    "doc_id": record.document_id,
                    "week": record.key.week_label,
                    "day": record.key.day,
                    "cycle": record.cycle,
                    "workout_name": record.workout_name,
                    "completed_date": record.completed_at.isoformat(),
                },
                on_conflict=CONFLICT_COLUMNS,
            ),
            "save workout",
        )

    def delete_completion(self, owner_id: str, document_id: str) -> None:
        """Delete a completion row."""
        execute(
            self.client.table(COMPLETIONS_TABLE)
            .delete()
            .eq("owner_id", owner_id)
            .eq("doc_id", document_id),
            "delete workout",
        )


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_cycle(row: dict[str, Any]) -> CycleRecord:
    return CycleRecord(
        cycle_number=int(row["cycle_number"]),
        started_at=parse_optional_timestamp(row.get("start_date")),
        completed_at=parse_optional_timestamp(row.get("completed_date")),
    )


def _parse_completion(row: dict[str, Any]) -> CompletionRecord:
    week = int(str(row["week"]).removeprefix("Wk ").strip())
    return CompletionRecord(
        key=SessionKey.of(week, str(row["day"])),
        cycle=int(row["cycle"]),
        workout_name=require_str(row, "workout_name"),
        completed_at=parse_timestamp(row["completed_date"]),
    )
