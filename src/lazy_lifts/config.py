"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    openai_api_key: str
    openai_text_model: str = "gpt-3.5-turbo"
    openai_vision_model: str = "gpt-4o"
    openai_transcription_model: str = "whisper-1"
    openai_store: bool = False
    local_store_path: Path | None = None
    timezone: str = "UTC"
    undo_window_minutes: int = 60
    backup_dir: Path = Path("backups")
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
