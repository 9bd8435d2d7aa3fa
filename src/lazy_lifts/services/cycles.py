"""Cycle progression tracker for the fixed lifting program."""

import hashlib
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from lazy_lifts.domain.errors import (
    NoActiveSessionError,
    NothingToUndoError,
    PersistenceError,
    ValidationError,
)
from lazy_lifts.domain.program import DAYS, WEEKS, ProgramTemplate, SessionKey
from lazy_lifts.domain.timestamps import parse_timestamp
from lazy_lifts.domain.workouts import CompletionRecord, CycleRecord, UndoRecord
from lazy_lifts.services.local_store import LocalStore

_logger = logging.getLogger(__name__)

PROGRESS_KEY = "workoutProgress"
UNDO_KEY = "lastCompletedWorkout"
MIGRATED_KEY = "workoutProgressMigrated"
ANONYMOUS_NAMESPACE = "anonymous"


class CycleRepository(Protocol):
    """Persistence interface for cycles and completions."""

    def get_latest_cycle(self, owner_id: str) -> CycleRecord | None:
        """Return the cycle with the highest number, if any."""

    def get_cycle(self, owner_id: str, cycle_number: int) -> CycleRecord | None:
        """Return a cycle by number, if present."""

    def save_cycle(self, owner_id: str, cycle: CycleRecord) -> None:
        """Create or overwrite a cycle record."""

    def close_cycle(
        self, owner_id: str, cycle_number: int, completed_at: datetime
    ) -> None:
        """Set completed_at on an existing cycle."""

    def list_cycles(self, owner_id: str) -> list[CycleRecord]:
        """Return all cycles, ordered by number."""

    def list_completions(
        self, owner_id: str, cycle_number: int | None = None
    ) -> list[CompletionRecord]:
        """Return completions, optionally only those of one cycle."""

    def save_completion(self, owner_id: str, record: CompletionRecord) -> None:
        """Create or overwrite a completion by its document id."""

    def delete_completion(self, owner_id: str, document_id: str) -> None:
        """Delete a completion by document id."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class SessionView:
    """One cell of the program grid."""

    week: int
    day: str
    name: str
    exercises: list[dict[str, object]]
    completed_at: datetime | None
    is_active: bool
    is_selected: bool


@dataclass(frozen=True)
class TrackerSnapshot:
    """Serializable view of a tracker's state."""

    cycle: int
    sessions: list[SessionView]
    active: SessionKey | None
    selected: SessionKey | None
    selected_is_active: bool
    selected_is_future: bool
    can_undo: bool


@dataclass
class CycleTracker:
    """State machine over the 32 program sessions of one owner."""

    program: ProgramTemplate
    repository: CycleRepository
    local_store: LocalStore
    undo_window: timedelta = timedelta(hours=1)
    clock: Callable[[], datetime] = _utcnow
    owner_id: str | None = None
    current_cycle: int = 1
    completed: dict[SessionKey, datetime | None] = field(default_factory=dict)
    active_session: SessionKey | None = None
    selected_session: SessionKey | None = None
    undo_record: UndoRecord | None = None

    def load_state(self, owner_id: str | None) -> None:
        """Hydrate state from the store, or local storage when anonymous."""
        self.owner_id = owner_id
        if owner_id:
            self._migrate_local_progress(owner_id)
            self._load_remote(owner_id)
        else:
            self._load_local()
        self.undo_record = self._read_undo_record()
        self.active_session = self._next_incomplete()
        self.selected_session = self.active_session

    def select_session(self, week: int, day: str) -> SessionKey:
        """Change the viewed session; the active pointer is untouched."""
        try:
            key = SessionKey.of(week, day)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        self.selected_session = key
        return key

    def log_active_session(self) -> CompletionRecord:
        """Mark the active session complete and roll over when all are done.

        The active pointer then advances to the next incomplete session; the
        selection stays where the user left it.
        """
        key = self.active_session
        if key is None:
            raise NoActiveSessionError("No incomplete workout to log")
        completed_at = self.clock()
        record = CompletionRecord(
            key=key,
            cycle=self.current_cycle,
            workout_name=self.program.get(key).name,
            completed_at=completed_at,
        )
        self.completed[key] = completed_at
        try:
            if self.owner_id:
                self.repository.save_completion(self.owner_id, record)
            else:
                self._write_local_progress()
        except PersistenceError:
            _logger.exception(
                "Failed to save workout", extra={"document_id": record.document_id}
            )
            self.completed[key] = None
            self._forget_undo_record()
            raise

        self.undo_record = UndoRecord(
            key=key, cycle=self.current_cycle, completed_at=completed_at
        )
        self._write_undo_record()

        next_key = self._next_incomplete()
        if next_key is None:
            self._roll_over(completed_at)
        else:
            self.active_session = next_key
        return record

    def undo_last_log(self) -> SessionKey | None:
        """Revert the most recent completion if it is inside the undo window."""
        record = self.undo_record
        if record is None:
            raise NothingToUndoError("Nothing to undo")
        if record.cycle != self.current_cycle:
            self._forget_undo_record()
            raise NothingToUndoError("Last workout belongs to a finished cycle")
        if self.clock() - record.completed_at >= self.undo_window:
            _logger.info(
                "Ignoring stale undo", extra={"document_id": _undo_document_id(record)}
            )
            return None

        key = record.key
        self.completed[key] = None
        try:
            if self.owner_id:
                self.repository.delete_completion(
                    self.owner_id, key.document_id(record.cycle)
                )
            else:
                self._write_local_progress()
        except PersistenceError:
            _logger.exception(
                "Failed to remove workout",
                extra={"document_id": _undo_document_id(record)},
            )
            self.completed[key] = record.completed_at
            raise

        self._forget_undo_record()
        self.active_session = key
        self.selected_session = key
        return key

    def can_undo(self) -> bool:
        """Return true when an undo would take effect."""
        record = self.undo_record
        if record is None or record.cycle != self.current_cycle:
            return False
        return self.clock() - record.completed_at < self.undo_window

    def snapshot(self) -> TrackerSnapshot:
        """Return a view of the grid, pointers and undo availability."""
        sessions = [
            SessionView(
                week=session.key.week,
                day=session.key.day,
                name=session.name,
                exercises=[
                    {
                        "name": exercise.name,
                        "sets": exercise.sets,
                        "target_reps": exercise.target_reps,
                    }
                    for exercise in session.exercises
                ],
                completed_at=self.completed.get(session.key),
                is_active=session.key == self.active_session,
                is_selected=session.key == self.selected_session,
            )
            for session in self.program.sessions
        ]
        selected, active = self.selected_session, self.active_session
        return TrackerSnapshot(
            cycle=self.current_cycle,
            sessions=sessions,
            active=active,
            selected=selected,
            selected_is_active=selected is not None and selected == active,
            selected_is_future=(
                selected is not None and active is not None and selected > active
            ),
            can_undo=self.can_undo(),
        )

    def _load_remote(self, owner_id: str) -> None:
        latest = self.repository.get_latest_cycle(owner_id)
        if latest is None:
            cycle_number = self._open_cycle(owner_id, 1)
        elif not latest.is_open:
            _logger.info(
                "Latest cycle is completed, starting new cycle",
                extra={"cycle": latest.cycle_number},
            )
            cycle_number = self._open_cycle(owner_id, latest.cycle_number + 1)
        else:
            cycle_number = latest.cycle_number

        completed = self._empty_program()
        for record in self.repository.list_completions(owner_id, cycle_number):
            if record.key in completed:
                completed[record.key] = record.completed_at
        self.current_cycle = cycle_number
        self.completed = completed

        if self._next_incomplete() is None:
            # Previous rollover stopped between its two writes.
            _logger.warning(
                "Repairing unfinished rollover", extra={"cycle": cycle_number}
            )
            self.repository.close_cycle(owner_id, cycle_number, self.clock())
            self.current_cycle = self._open_cycle(owner_id, cycle_number + 1)
            self.completed = self._empty_program()

    def _load_local(self) -> None:
        self.current_cycle = 1
        self.completed = self._empty_program()
        raw = self.local_store.get(PROGRESS_KEY)
        if raw is None:
            return
        try:
            cycle_number, completed = _parse_progress(raw)
        except ValueError:
            _logger.exception("Ignoring unreadable local workout progress")
            return
        self.current_cycle = cycle_number
        for key, completed_at in completed.items():
            if key in self.completed:
                self.completed[key] = completed_at
        if self._next_incomplete() is None:
            self.current_cycle += 1
            self.completed = self._empty_program()

    def _open_cycle(self, owner_id: str, cycle_number: int) -> int:
        if self.repository.get_cycle(owner_id, cycle_number) is None:
            self.repository.save_cycle(
                owner_id,
                CycleRecord(cycle_number=cycle_number, started_at=self.clock()),
            )
        return cycle_number

    def _roll_over(self, completed_at: datetime) -> None:
        finished = self.current_cycle
        if self.owner_id:
            try:
                self.repository.close_cycle(self.owner_id, finished, completed_at)
                self._open_cycle(self.owner_id, finished + 1)
            except PersistenceError:
                _logger.exception(
                    "Error transitioning to new cycle", extra={"cycle": finished}
                )
                self.active_session = None
                raise
        _logger.info("Cycle completed", extra={"cycle": finished})
        self.current_cycle = finished + 1
        self.completed = self._empty_program()
        self.active_session = self.program.first()
        self._forget_undo_record()
        if not self.owner_id:
            try:
                self._write_local_progress()
            except PersistenceError:
                _logger.warning("New cycle will be restored on next load")

    def _migrate_local_progress(self, owner_id: str) -> None:
        raw = self.local_store.get(PROGRESS_KEY)
        if raw is None:
            return
        digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()
        marker_key = f"{MIGRATED_KEY}:{owner_id}"
        if self.local_store.get(marker_key) != digest:
            try:
                cycle_number, completed = _parse_progress(raw)
                for key, completed_at in sorted(completed.items()):
                    self.repository.save_completion(
                        owner_id,
                        CompletionRecord(
                            key=key,
                            cycle=cycle_number,
                            workout_name=self.program.get(key).name,
                            completed_at=completed_at,
                        ),
                    )
                self.local_store.set(marker_key, digest)
            except (PersistenceError, ValueError):
                _logger.exception(
                    "Failed to migrate local workouts", extra={"owner_id": owner_id}
                )
                return
            _logger.info(
                "Migrated local workouts",
                extra={"owner_id": owner_id, "count": len(completed)},
            )
        try:
            self.local_store.remove(PROGRESS_KEY)
        except PersistenceError:
            _logger.warning("Failed to clear migrated local workouts")

    def _write_local_progress(self) -> None:
        self.local_store.set(
            PROGRESS_KEY,
            _serialize_progress(self.program, self.completed, self.current_cycle),
        )

    def _undo_key(self) -> str:
        return f"{UNDO_KEY}:{self.owner_id or ANONYMOUS_NAMESPACE}"

    def _read_undo_record(self) -> UndoRecord | None:
        raw = self.local_store.get(self._undo_key())
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            return UndoRecord(
                key=SessionKey.of(_parse_week_label(payload["week"]), payload["day"]),
                cycle=int(payload["cycle"]),
                completed_at=parse_timestamp(payload["date"]),
            )
        except (KeyError, TypeError, ValueError):
            _logger.exception("Error parsing last completed workout")
            self.local_store.remove(self._undo_key())
            return None

    def _write_undo_record(self) -> None:
        record = self.undo_record
        if record is None:
            return
        payload = {
            "week": record.key.week_label,
            "day": record.key.day,
            "cycle": record.cycle,
            "date": record.completed_at.isoformat(),
        }
        try:
            self.local_store.set(self._undo_key(), json.dumps(payload))
        except PersistenceError:
            _logger.warning("Undo record kept in memory only")

    def _forget_undo_record(self) -> None:
        self.undo_record = None
        try:
            self.local_store.remove(self._undo_key())
        except PersistenceError:
            _logger.warning("Failed to clear stored undo record")

    def _empty_program(self) -> dict[SessionKey, datetime | None]:
        return dict.fromkeys(self.program.keys())

    def _next_incomplete(self) -> SessionKey | None:
        for key in self.program.keys():
            if self.completed.get(key) is None:
                return key
        return None


@dataclass
class CycleService:
    """Keeps one loaded tracker per owner namespace."""

    program: ProgramTemplate
    repository: CycleRepository
    local_store: LocalStore
    undo_window: timedelta = timedelta(hours=1)
    clock: Callable[[], datetime] = _utcnow
    _trackers: dict[str, CycleTracker] = field(default_factory=dict)

    def tracker(self, owner_id: str | None) -> CycleTracker:
        """Return the loaded tracker for an owner, loading it on first use."""
        namespace = owner_id or ANONYMOUS_NAMESPACE
        tracker = self._trackers.get(namespace)
        if tracker is None:
            tracker = self.reload(owner_id)
        return tracker

    def reload(self, owner_id: str | None) -> CycleTracker:
        """Discard cached state and load the owner's tracker again."""
        namespace = owner_id or ANONYMOUS_NAMESPACE
        self._trackers.pop(namespace, None)
        tracker = CycleTracker(
            program=self.program,
            repository=self.repository,
            local_store=self.local_store,
            undo_window=self.undo_window,
            clock=self.clock,
        )
        tracker.load_state(owner_id)
        self._trackers[namespace] = tracker
        return tracker


def _serialize_progress(
    program: ProgramTemplate,
    completed: dict[SessionKey, datetime | None],
    cycle_number: int,
) -> str:
    weeks: dict[str, dict[str, object]] = {}
    for session in program.sessions:
        completed_at = completed.get(session.key)
        weeks.setdefault(session.key.week_label, {})[session.key.day] = {
            "name": session.name,
            "completed": completed_at.isoformat() if completed_at else None,
        }
    return json.dumps({"program": weeks, "cycle": cycle_number})


def _parse_progress(raw: str) -> tuple[int, dict[SessionKey, datetime]]:
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("Workout progress must be an object")
    cycle_number = int(payload.get("cycle") or 1)
    completed: dict[SessionKey, datetime] = {}
    program = payload.get("program") or {}
    if not isinstance(program, dict):
        raise ValueError("Workout progress program must be an object")
    for week_label, days in program.items():
        try:
            week = _parse_week_label(week_label)
        except ValueError:
            continue
        if not isinstance(days, dict):
            continue
        for day, data in days.items():
            if day not in DAYS or not isinstance(data, dict):
                continue
            if data.get("completed"):
                completed[SessionKey.of(week, day)] = parse_timestamp(
                    data["completed"]
                )
    return cycle_number, completed


def _parse_week_label(label: object) -> int:
    """Parse "Wk 3" (or the older "Week 3") into a week number."""
    text = str(label).replace("Week ", "Wk ").removeprefix("Wk ").strip()
    week = int(text)
    if week not in WEEKS:
        raise ValueError(f"Unknown week: {label}")
    return week


def _undo_document_id(record: UndoRecord) -> str:
    return record.key.document_id(record.cycle)
