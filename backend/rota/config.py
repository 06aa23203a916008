import uuid
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Rota Holiday"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://rota:rota@db:5432/rota"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    log_level: str = "INFO"

    # Local clock used for "now" and "today".
    timezone: str = "Europe/London"

    # Fixed anniversary of the holiday year (6 April -> 5 April).
    holiday_year_start_month: int = 4
    holiday_year_start_day: int = 6

    # Legacy behaviour: scale zero-hours accrual by the employment day-count as well.
    zero_hours_window_prorata: bool = False

    pending_change_interval_seconds: int = 60
    pending_change_lookback_days: int = 7
    pending_change_batch_size: int = 50

    identity_namespace: uuid.UUID = uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
