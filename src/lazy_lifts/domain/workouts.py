"""Domain models for workout cycle tracking."""

from dataclasses import dataclass
from datetime import datetime

from lazy_lifts.domain.program import SessionKey


@dataclass(frozen=True)
class CompletionRecord:
    """A session finished within a cycle."""

    key: SessionKey
    cycle: int
    workout_name: str
    completed_at: datetime

    @property
    def document_id(self) -> str:
        return self.key.document_id(self.cycle)


@dataclass(frozen=True)
class CycleRecord:
    """One pass through the program; open while completed_at is None."""

    cycle_number: int
    started_at: datetime | None
    completed_at: datetime | None = None

    @property
    def document_id(self) -> str:
        return f"cycle-{self.cycle_number}"

    @property
    def is_open(self) -> bool:
        return self.completed_at is None


@dataclass(frozen=True)
class UndoRecord:
    """The most recent completion, which may still be undone."""

    key: SessionKey
    cycle: int
    completed_at: datetime
