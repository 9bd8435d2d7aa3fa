"""Body-weight log."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from lazy_lifts.domain.errors import MissingOwnerError, ValidationError
from lazy_lifts.domain.weights import WeightEntry

_logger = logging.getLogger(__name__)


class WeightRepository(Protocol):
    """Persistence interface for weight entries."""

    def list_weights(self, owner_id: str) -> list[WeightEntry]:
        """Return all entries of an owner."""

    def get_weight(self, owner_id: str, entry_id: str) -> WeightEntry | None:
        """Return an entry by id, if present."""

    def save_weight(self, owner_id: str, entry: WeightEntry) -> None:
        """Create or overwrite an entry by id."""

    def delete_weight(self, owner_id: str, entry_id: str) -> bool:
        """Delete an entry and return whether it existed."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class WeightService:
    """Service for recording and editing body-weight measurements."""

    repository: WeightRepository
    clock: Callable[[], datetime] = _utcnow

    def add_weight(self, owner_id: str | None, weight: float) -> WeightEntry:
        owner = _require_owner(owner_id)
        now = self.clock()
        entry = WeightEntry(
            id=f"weight-{int(now.timestamp() * 1000)}",
            weight=_validate_weight(weight),
            date=now,
        )
        self.repository.save_weight(owner, entry)
        _logger.info("Weight logged", extra={"weight_id": entry.id})
        return entry

    def list_weights(self, owner_id: str | None) -> list[WeightEntry]:
        """Return the owner's entries, most recent first."""
        owner = _require_owner(owner_id)
        return sorted(
            self.repository.list_weights(owner),
            key=lambda entry: (entry.date, entry.id),
            reverse=True,
        )

    def update_weight(
        self, owner_id: str | None, entry_id: str, weight: float
    ) -> WeightEntry:
        owner = _require_owner(owner_id)
        existing = self.repository.get_weight(owner, entry_id)
        if existing is None:
            raise ValidationError(f"Unknown weight entry: {entry_id}")
        entry = WeightEntry(
            id=existing.id, weight=_validate_weight(weight), date=existing.date
        )
        self.repository.save_weight(owner, entry)
        return entry

    def delete_weight(self, owner_id: str | None, entry_id: str) -> None:
        owner = _require_owner(owner_id)
        if not self.repository.delete_weight(owner, entry_id):
            _logger.info(
                "Weight to delete was not found", extra={"weight_id": entry_id}
            )


def _require_owner(owner_id: str | None) -> str:
    if not owner_id:
        raise MissingOwnerError("Please sign in to track weight")
    return owner_id


def _validate_weight(weight: float) -> float:
    if not isinstance(weight, int | float) or weight <= 0:
        raise ValidationError("Weight must be a positive number")
    return float(weight)
