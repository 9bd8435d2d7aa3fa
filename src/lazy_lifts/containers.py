"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from openai import AsyncOpenAI
from supabase import create_client

from lazy_lifts.adapters.json_file_local_store import JsonFileLocalStore
from lazy_lifts.adapters.openai_nutrition_client import OpenAINutritionClient
from lazy_lifts.adapters.openai_transcription_client import OpenAITranscriptionClient
from lazy_lifts.adapters.supabase_cycle_repository import SupabaseCycleRepository
from lazy_lifts.adapters.supabase_meal_repository import SupabaseMealRepository
from lazy_lifts.adapters.supabase_weight_repository import SupabaseWeightRepository
from lazy_lifts.config import Settings
from lazy_lifts.domain.program import build_program
from lazy_lifts.services.backup import BackupService
from lazy_lifts.services.cycles import CycleService
from lazy_lifts.services.local_store import InMemoryLocalStore, LocalStore
from lazy_lifts.services.meals import MealLogService
from lazy_lifts.services.nutrition import NutritionService
from lazy_lifts.services.stats import StatsService
from lazy_lifts.services.transcription import TranscriptionService
from lazy_lifts.services.weights import WeightService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cycle_service: CycleService
    meal_log_service: MealLogService
    stats_service: StatsService
    weight_service: WeightService
    nutrition_service: NutritionService
    transcription_service: TranscriptionService
    backup_service: BackupService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cycle_repository = SupabaseCycleRepository(supabase_client)
    meal_repository = SupabaseMealRepository(supabase_client)
    weight_repository = SupabaseWeightRepository(supabase_client)

    local_store: LocalStore
    if resolved_settings.local_store_path is not None:
        local_store = JsonFileLocalStore(resolved_settings.local_store_path)
    else:
        local_store = InMemoryLocalStore()

    openai_client = AsyncOpenAI(api_key=resolved_settings.openai_api_key)
    nutrition_service = NutritionService(
        client=OpenAINutritionClient(openai_client),
        text_model=resolved_settings.openai_text_model,
        vision_model=resolved_settings.openai_vision_model,
        store=resolved_settings.openai_store,
    )
    transcription_service = TranscriptionService(
        client=OpenAITranscriptionClient(openai_client),
        model=resolved_settings.openai_transcription_model,
    )
    cycle_service = CycleService(
        program=build_program(),
        repository=cycle_repository,
        local_store=local_store,
        undo_window=timedelta(minutes=resolved_settings.undo_window_minutes),
    )
    meal_log_service = MealLogService(
        repository=meal_repository,
        nutrition_service=nutrition_service,
        transcription_service=transcription_service,
        timezone_name=resolved_settings.timezone,
    )
    stats_service = StatsService(meal_repository, resolved_settings.timezone)
    weight_service = WeightService(weight_repository)
    backup_service = BackupService(cycle_repository)

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        cycle_service=cycle_service,
        meal_log_service=meal_log_service,
        stats_service=stats_service,
        weight_service=weight_service,
        nutrition_service=nutrition_service,
        transcription_service=transcription_service,
        backup_service=backup_service,
        close_resources=close_resources,
    )
