"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - Credentials come from environment variables or .env (never hardcoded beyond dev defaults)
    - get_settings() is cached (lru_cache): single instance per process
    - database_isolation_level empty/None means "use the driver default"

Design Decisions:
    - Defaults match the docker-compose database and the production pool sizing
      (10 connections, 30s acquisition timeout, 30 min max lifetime)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://biblioteca:biblioteca@db:5432/biblioteca"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 10
    database_max_overflow: int = 0
    database_pool_timeout_seconds: float = 30
    database_pool_recycle_seconds: int = 1800
    database_isolation_level: str | None = "READ COMMITTED"

    @field_validator("database_isolation_level", mode="before")
    @classmethod
    def blank_isolation_is_default(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # Lending rules
    loan_default_days: int = 14

    # Overdue sweep
    sweep_enabled: bool = True
    sweep_interval_hours: float = 24
    sweep_on_startup: bool = True

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
