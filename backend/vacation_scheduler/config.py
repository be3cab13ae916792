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

    app_name: str = "Vacation Scheduler"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://vacations:vacations@db:5432/vacations"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:5175"]
    timezone: str = "UTC"
    log_level: str = "INFO"

    # Allotment pools.
    base_total_days: int = 30
    base_flexible_days: int = 7
    base_block_days: int = 23
    flexible_range_max_days: int = 7

    # Advance (borrowing) rules.
    advance_days_per_month: float = 2.5
    advance_max_days: float = 30

    max_reschedule_sources: int = 2


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
