"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date

from fastapi import FastAPI, Header, Request, status
from fastapi.responses import JSONResponse

from lazy_lifts.api.admin import router as admin_router
from lazy_lifts.api.models import (
    EstimateRequest,
    MealRequest,
    SelectSessionRequest,
    WeightRequest,
)
from lazy_lifts.app_logging import configure_logging
from lazy_lifts.containers import AppContainer
from lazy_lifts.domain.errors import (
    EstimationError,
    LazyLiftsError,
    MissingOwnerError,
    PersistenceError,
    StaleUndoError,
    ValidationError,
)
from lazy_lifts.domain.meals import MealDraft, MealEntry, YearGroup
from lazy_lifts.domain.program import SessionKey
from lazy_lifts.domain.weights import WeightEntry
from lazy_lifts.services.cycles import TrackerSnapshot


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(LazyLiftsError)
    async def handle_app_error(
        _request: Request, exc: LazyLiftsError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning("Request failed", extra={"error": type(exc).__name__})
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/workouts")
    async def workout_state(
        request: Request, x_owner_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Return the program grid and tracker pointers."""
        tracker = _container(request).cycle_service.tracker(x_owner_id)
        return _snapshot_payload(tracker.snapshot())

    @app.post("/workouts/select")
    async def select_workout(
        body: SelectSessionRequest,
        request: Request,
        x_owner_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Change the viewed session."""
        tracker = _container(request).cycle_service.tracker(x_owner_id)
        tracker.select_session(body.week, body.day)
        return _snapshot_payload(tracker.snapshot())

    @app.post("/workouts/log")
    async def log_workout(
        request: Request, x_owner_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Mark the active session complete."""
        tracker = _container(request).cycle_service.tracker(x_owner_id)
        record = tracker.log_active_session()
        payload = _snapshot_payload(tracker.snapshot())
        payload["logged"] = {
            **_key_payload(record.key),
            "cycle": record.cycle,
            "completed_at": record.completed_at.isoformat(),
        }
        return payload

    @app.post("/workouts/undo")
    async def undo_workout(
        request: Request, x_owner_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Undo the most recent log; stale or missing undos are ignored."""
        tracker = _container(request).cycle_service.tracker(x_owner_id)
        try:
            undone = tracker.undo_last_log()
        except StaleUndoError:
            undone = None
        payload = _snapshot_payload(tracker.snapshot())
        payload["undone"] = _key_payload(undone) if undone else None
        return payload

    @app.get("/meals")
    async def list_meals(
        request: Request, x_owner_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Return meals grouped by year and day."""
        owner = _require_owner(x_owner_id)
        groups = _container(request).stats_service.get_grouped(owner)
        return {"years": [_year_payload(group) for group in groups]}

    @app.get("/meals/weekly")
    async def weekly_meals(
        request: Request,
        reference_date: date | None = None,
        x_owner_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Return the trailing 7-day trend."""
        owner = _require_owner(x_owner_id)
        week = _container(request).stats_service.get_week(owner, reference_date)
        return {"days": [asdict(day) for day in week]}

    @app.post("/meals")
    async def upsert_meal(
        body: MealRequest,
        request: Request,
        x_owner_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Create or edit a meal entry."""
        entry = _container(request).meal_log_service.upsert_meal(
            x_owner_id,
            MealDraft(
                description=body.description,
                calories=body.calories,
                protein=body.protein,
                carbs=body.carbs,
                fat=body.fat,
                id=body.id,
                timestamp=body.timestamp,
            ),
        )
        return _meal_payload(entry)

    @app.post("/meals/estimate")
    async def estimate_meal(
        body: EstimateRequest,
        request: Request,
        x_owner_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Log a meal from a description, or re-estimate an existing one."""
        service = _container(request).meal_log_service
        if body.meal_id:
            entry = await service.re_estimate(
                x_owner_id, body.meal_id, body.description
            )
        else:
            entry = await service.log_from_description(x_owner_id, body.description)
        return _meal_payload(entry)

    @app.post("/meals/photo")
    async def photo_meal(
        request: Request, x_owner_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Log a meal from a raw image request body."""
        image_bytes = await request.body()
        entry = await _container(request).meal_log_service.log_from_photo(
            x_owner_id, image_bytes
        )
        return _meal_payload(entry)

    @app.post("/meals/audio")
    async def audio_meal(
        request: Request,
        filename: str = "meal.webm",
        x_owner_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Log a meal from a raw audio request body."""
        audio_bytes = await request.body()
        entry = await _container(request).meal_log_service.log_from_audio(
            x_owner_id, audio_bytes, filename
        )
        return _meal_payload(entry)

    @app.delete("/meals/{meal_id}")
    async def delete_meal(
        meal_id: str, request: Request, x_owner_id: str | None = Header(default=None)
    ) -> dict[str, str]:
        """Delete a meal; unknown ids succeed."""
        _container(request).meal_log_service.delete_meal(x_owner_id, meal_id)
        return {"status": "ok"}

    @app.get("/weights")
    async def list_weights(
        request: Request, x_owner_id: str | None = Header(default=None)
    ) -> dict[str, object]:
        """Return weight entries, most recent first."""
        entries = _container(request).weight_service.list_weights(x_owner_id)
        return {"weights": [_weight_payload(entry) for entry in entries]}

    @app.post("/weights")
    async def add_weight(
        body: WeightRequest,
        request: Request,
        x_owner_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Record a weight measurement."""
        entry = _container(request).weight_service.add_weight(
            x_owner_id, body.weight
        )
        return _weight_payload(entry)

    @app.put("/weights/{entry_id}")
    async def update_weight(
        entry_id: str,
        body: WeightRequest,
        request: Request,
        x_owner_id: str | None = Header(default=None),
    ) -> dict[str, object]:
        """Change a recorded weight."""
        entry = _container(request).weight_service.update_weight(
            x_owner_id, entry_id, body.weight
        )
        return _weight_payload(entry)

    @app.delete("/weights/{entry_id}")
    async def delete_weight(
        entry_id: str, request: Request, x_owner_id: str | None = Header(default=None)
    ) -> dict[str, str]:
        """Delete a weight entry."""
        _container(request).weight_service.delete_weight(x_owner_id, entry_id)
        return {"status": "ok"}

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _require_owner(owner_id: str | None) -> str:
    if not owner_id:
        raise MissingOwnerError("Please sign in to view meals")
    return owner_id


def _status_for(exc: LazyLiftsError) -> int:
    if isinstance(exc, MissingOwnerError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, PersistenceError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(exc, EstimationError):
        return status.HTTP_502_BAD_GATEWAY
    if isinstance(exc, StaleUndoError):
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _key_payload(key: SessionKey | None) -> dict[str, object] | None:
    if key is None:
        return None
    return {"week": key.week, "day": key.day}


def _snapshot_payload(snapshot: TrackerSnapshot) -> dict[str, object]:
    return {
        "cycle": snapshot.cycle,
        "active": _key_payload(snapshot.active),
        "selected": _key_payload(snapshot.selected),
        "selected_is_active": snapshot.selected_is_active,
        "selected_is_future": snapshot.selected_is_future,
        "can_undo": snapshot.can_undo,
        "sessions": [
            {
                "week": view.week,
                "day": view.day,
                "name": view.name,
                "exercises": view.exercises,
                "completed_at": (
                    view.completed_at.isoformat() if view.completed_at else None
                ),
                "is_active": view.is_active,
                "is_selected": view.is_selected,
            }
            for view in snapshot.sessions
        ],
    }


def _meal_payload(entry: MealEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp.isoformat(),
        "description": entry.description,
        "calories": entry.calories,
        "protein": entry.protein,
        "carbs": entry.carbs,
        "fat": entry.fat,
    }


def _year_payload(group: YearGroup) -> dict[str, object]:
    return {
        "year": group.year,
        "days": [
            {
                "date": day.date.isoformat(),
                "total_calories": day.total_calories,
                "total_protein": day.total_protein,
                "total_carbs": day.total_carbs,
                "total_fat": day.total_fat,
                "entries": [_meal_payload(entry) for entry in day.entries],
            }
            for day in group.days
        ],
    }


def _weight_payload(entry: WeightEntry) -> dict[str, object]:
    return {"id": entry.id, "weight": entry.weight, "date": entry.date.isoformat()}
