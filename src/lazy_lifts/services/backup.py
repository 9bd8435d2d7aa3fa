"""Export and restore an owner's workout history."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from lazy_lifts.domain.errors import PersistenceError, ValidationError
from lazy_lifts.domain.program import SessionKey
from lazy_lifts.domain.timestamps import parse_optional_timestamp, parse_timestamp
from lazy_lifts.domain.workouts import CompletionRecord, CycleRecord
from lazy_lifts.services.cycles import CycleRepository

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class BackupService:
    """Service that snapshots cycles and completions to JSON."""

    repository: CycleRepository
    clock: Callable[[], datetime] = _utcnow

    def create_backup(self, owner_id: str) -> dict[str, object]:
        """Return every cycle and completion of an owner as plain data."""
        cycles = self.repository.list_cycles(owner_id)
        completions = self.repository.list_completions(owner_id)
        return {
            "cycles": [_cycle_to_dict(cycle) for cycle in cycles],
            "workouts": [_completion_to_dict(record) for record in completions],
            "timestamp": self.clock().isoformat(),
            "user_id": owner_id,
        }

    def write_backup(self, owner_id: str, directory: Path) -> Path:
        """Write a backup file into directory and return its path."""
        backup = self.create_backup(owner_id)
        stamp = self.clock().strftime("%Y-%m-%dT%H-%M-%S")
        path = directory / f"workout-backup-{stamp}.json"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(backup, indent=2), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to write backup: {path}") from exc
        _logger.info(
            "Backup written",
            extra={
                "path": str(path),
                "cycles": len(backup["cycles"]),
                "workouts": len(backup["workouts"]),
            },
        )
        return path

    def restore(self, owner_id: str, payload: dict[str, object]) -> tuple[int, int]:
        """Re-write cycles and completions from a backup.

        Returns the number of restored cycles and completions.
        """
        if payload.get("user_id") != owner_id:
            raise ValidationError("Backup belongs to a different user")
        try:
            cycles = [_cycle_from_dict(item) for item in payload.get("cycles") or []]
            completions = [
                _completion_from_dict(item) for item in payload.get("workouts") or []
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError("Malformed backup") from exc

        for cycle in cycles:
            self.repository.save_cycle(owner_id, cycle)
        for record in completions:
            self.repository.save_completion(owner_id, record)
        _logger.info(
            "Backup restored",
            extra={
                "owner_id": owner_id,
                "cycles": len(cycles),
                "workouts": len(completions),
            },
        )
        return len(cycles), len(completions)


def _cycle_to_dict(cycle: CycleRecord) -> dict[str, object]:
    return {
        "id": cycle.document_id,
        "cycleNumber": cycle.cycle_number,
        "startDate": cycle.started_at.isoformat() if cycle.started_at else None,
        "completedDate": (
            cycle.completed_at.isoformat() if cycle.completed_at else None
        ),
    }


def _completion_to_dict(record: CompletionRecord) -> dict[str, object]:
    return {
        "id": record.document_id,
        "week": record.key.week_label,
        "day": record.key.day,
        "cycle": record.cycle,
        "workoutName": record.workout_name,
        "completedDate": record.completed_at.isoformat(),
    }


def _cycle_from_dict(item: dict[str, object]) -> CycleRecord:
    return CycleRecord(
        cycle_number=int(item["cycleNumber"]),
        started_at=parse_optional_timestamp(item.get("startDate")),
        completed_at=parse_optional_timestamp(item.get("completedDate")),
    )


def _completion_from_dict(item: dict[str, object]) -> CompletionRecord:
    week = int(str(item["week"]).removeprefix("Wk ").strip())
    return CompletionRecord(
        key=SessionKey.of(week, str(item["day"])),
        cycle=int(item["cycle"]),
        workout_name=str(item["workoutName"]),
        completed_at=parse_timestamp(item["completedDate"]),
    )

