"""Meal logging service."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from lazy_lifts.domain.errors import (
    EstimationError,
    MissingOwnerError,
    ValidationError,
)
from lazy_lifts.domain.meals import MealDraft, MealEntry
from lazy_lifts.domain.nutrition import NutritionEstimate
from lazy_lifts.services.nutrition import NutritionService
from lazy_lifts.services.transcription import TranscriptionService

_logger = logging.getLogger(__name__)

MealListener = Callable[[list[MealEntry]], None]


class MealRepository(Protocol):
    """Persistence interface for meal entries."""

    def list_meals(self, owner_id: str) -> list[MealEntry]:
        """Return all meals of an owner, most recent first."""

    def get_meal(self, owner_id: str, meal_id: str) -> MealEntry | None:
        """Return a meal by id, if present."""

    def save_meal(self, owner_id: str, entry: MealEntry) -> None:
        """Create or overwrite a meal by id."""

    def delete_meal(self, owner_id: str, meal_id: str) -> bool:
        """Delete a meal and return whether it existed."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MealLogService:
    """Service that estimates, persists and publishes meal entries."""

    repository: MealRepository
    nutrition_service: NutritionService
    transcription_service: TranscriptionService
    clock: Callable[[], datetime] = _utcnow
    timezone_name: str = "UTC"
    editing_ids: dict[str, str] = field(default_factory=dict)
    deleting_ids: dict[str, str] = field(default_factory=dict)
    _listeners: dict[str, list[MealListener]] = field(default_factory=dict)

    def list_meals(self, owner_id: str | None) -> list[MealEntry]:
        """Return the owner's meals, most recent first."""
        owner = _require_owner(owner_id)
        return _ordered(self.repository.list_meals(owner))

    def subscribe(
        self, owner_id: str | None, listener: MealListener
    ) -> Callable[[], None]:
        """Deliver the full meal list now and after every change.

        Returns a callable that removes the listener.
        """
        owner = _require_owner(owner_id)
        self._listeners.setdefault(owner, []).append(listener)
        listener(self.list_meals(owner))

        def unsubscribe() -> None:
            listeners = self._listeners.get(owner, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self._listeners.pop(owner, None)

        return unsubscribe

    def upsert_meal(self, owner_id: str | None, draft: MealDraft) -> MealEntry:
        """Create a meal, or edit it in place when the id already exists."""
        owner = _require_owner(owner_id)
        _validate_draft(draft)
        existing = self.repository.get_meal(owner, draft.id) if draft.id else None
        if existing is None:
            entry = MealEntry(
                id=self._mint_id(owner),
                timestamp=self._aware(draft.timestamp) or self.clock(),
                description=draft.description.strip(),
                calories=float(draft.calories),
                protein=float(draft.protein),
                carbs=float(draft.carbs),
                fat=float(draft.fat),
            )
            self.repository.save_meal(owner, entry)
            _logger.info("Meal created", extra={"meal_id": entry.id})
        else:
            with self._slot(self.editing_ids, owner, existing.id):
                entry = MealEntry(
                    id=existing.id,
                    timestamp=self._aware(draft.timestamp) or existing.timestamp,
                    description=draft.description.strip(),
                    calories=float(draft.calories),
                    protein=float(draft.protein),
                    carbs=float(draft.carbs),
                    fat=float(draft.fat),
                )
                self.repository.save_meal(owner, entry)
            _logger.info("Meal updated", extra={"meal_id": entry.id})
        self._publish(owner)
        return entry

    def delete_meal(self, owner_id: str | None, meal_id: str) -> None:
        """Delete a meal; unknown ids are ignored."""
        owner = _require_owner(owner_id)
        with self._slot(self.deleting_ids, owner, meal_id):
            existed = self.repository.delete_meal(owner, meal_id)
        if not existed:
            _logger.info("Meal to delete was not found", extra={"meal_id": meal_id})
            return
        self._publish(owner)

    async def log_from_description(
        self, owner_id: str | None, description: str
    ) -> MealEntry:
        """Estimate macros for a text description and log the meal."""
        owner = _require_owner(owner_id)
        text = description.strip()
        if not text:
            raise ValidationError("Describe what you ate")
        estimate = await self.nutrition_service.estimate_text(text)
        return self.upsert_meal(owner, _draft_from_estimate(text, estimate))

    async def log_from_photo(
        self, owner_id: str | None, image_bytes: bytes
    ) -> MealEntry:
        """Estimate macros from a food photo and log the meal."""
        owner = _require_owner(owner_id)
        if not image_bytes:
            raise ValidationError("No image provided")
        estimate = await self.nutrition_service.estimate_image(image_bytes)
        description = (estimate.description or "").strip() or "Photo meal"
        return self.upsert_meal(owner, _draft_from_estimate(description, estimate))

    async def log_from_audio(
        self, owner_id: str | None, audio_bytes: bytes, filename: str = "meal.webm"
    ) -> MealEntry:
        """Transcribe a voice note, then log it like a text description."""
        owner = _require_owner(owner_id)
        result = await self.transcription_service.transcribe(audio_bytes, filename)
        if not result.ok:
            raise EstimationError(result.error or "No speech detected")
        return await self.log_from_description(owner, result.text)

    async def re_estimate(
        self, owner_id: str | None, meal_id: str, description: str
    ) -> MealEntry:
        """Replace a meal's description and macros, keeping its timestamp."""
        owner = _require_owner(owner_id)
        existing = self.repository.get_meal(owner, meal_id)
        if existing is None:
            raise ValidationError(f"Unknown meal: {meal_id}")
        text = description.strip()
        if not text:
            raise ValidationError("Describe what you ate")
        with self._slot(self.editing_ids, owner, meal_id):
            estimate = await self.nutrition_service.estimate_text(text)
        draft = _draft_from_estimate(text, estimate)
        return self.upsert_meal(
            owner,
            MealDraft(
                id=existing.id,
                description=draft.description,
                calories=draft.calories,
                protein=draft.protein,
                carbs=draft.carbs,
                fat=draft.fat,
            ),
        )

    @contextmanager
    def _slot(
        self, slots: dict[str, str], owner_id: str, meal_id: str
    ) -> Iterator[None]:
        """Hold the owner's single edit or delete slot."""
        if owner_id in slots:
            raise ValidationError("Another meal is already being changed")
        slots[owner_id] = meal_id
        try:
            yield
        finally:
            slots.pop(owner_id, None)

    def _aware(self, timestamp: datetime | None) -> datetime | None:
        """Read naive timestamps as wall-clock time in the configured zone."""
        if timestamp is None or timestamp.tzinfo is not None:
            return timestamp
        return timestamp.replace(tzinfo=ZoneInfo(self.timezone_name))

    def _mint_id(self, owner_id: str) -> str:
        """Return a millisecond timestamp id not yet used by the owner."""
        candidate = int(self.clock().timestamp() * 1000)
        while self.repository.get_meal(owner_id, str(candidate)) is not None:
            candidate += 1
        return str(candidate)

    def _publish(self, owner_id: str) -> None:
        listeners = list(self._listeners.get(owner_id, []))
        if not listeners:
            return
        meals = self.list_meals(owner_id)
        for listener in listeners:
            listener(list(meals))


def _require_owner(owner_id: str | None) -> str:
    if not owner_id:
        raise MissingOwnerError("Please sign in to log meals")
    return owner_id


def _validate_draft(draft: MealDraft) -> None:
    if not draft.description.strip():
        raise ValidationError("Meal description is required")
    for name in ("calories", "protein", "carbs", "fat"):
        value = getattr(draft, name)
        if not isinstance(value, int | float) or value < 0:
            raise ValidationError(f"{name} must be a non-negative number")


def _draft_from_estimate(description: str, estimate: NutritionEstimate) -> MealDraft:
    return MealDraft(
        description=description,
        calories=estimate.calories,
        protein=estimate.protein,
        carbs=estimate.carbs,
        fat=estimate.fat,
    )


def _ordered(meals: list[MealEntry]) -> list[MealEntry]:
    return sorted(meals, key=lambda meal: (meal.timestamp, meal.id), reverse=True)
