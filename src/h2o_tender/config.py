"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    telegram_chat_id: int
    supabase_url: str
    supabase_service_key: str
    supabase_table: str = "hydration_store"
    api_token: str
    timezone: str = "UTC"
    rollover_poll_seconds: float = 60
    rollover_align_to_midnight: bool = False
    history_days_to_keep: int = 30
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
