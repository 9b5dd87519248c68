"""Application configuration via pydantic-settings.

Values are loaded from environment variables (.env file).
Settings are organized into logical groups and composed into a single Settings object.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./finiate.db",
        description="Async SQLAlchemy connection string (aiosqlite or asyncpg)",
    )
    sqlite_foreign_keys: bool = Field(
        default=True,
        description="Issue PRAGMA foreign_keys=ON on every SQLite connection",
    )
    sqlite_busy_timeout: float = Field(
        default=5.0,
        description="Seconds a SQLite writer waits for the database lock",
    )
    sqlite_wal: bool = Field(
        default=True,
        description="Run file-backed SQLite databases in WAL journal mode",
    )
    db_pool_size: int = Field(default=10, description="Connection pool size (server databases)")
    db_max_overflow: int = Field(default=20, description="Pool overflow (server databases)")

    @property
    def database_url_sync(self) -> str:
        """Synchronous database URL for Alembic offline mode."""
        return self.database_url.replace("+asyncpg", "").replace("+aiosqlite", "")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


class StoreSettings(BaseSettings):
    """Record validation toggles for the agenda and log stores."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="store_", extra="ignore")

    enforce_time_window: bool = Field(
        default=False,
        description="Reject agendas whose terminate_at precedes initiate_at",
    )


class Settings(BaseSettings):
    """Root settings composing all sub-settings.

    Usage:
        settings = Settings()
        settings.db.database_url
        settings.store.enforce_time_window
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Composed settings (loaded from same .env)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Module-level singleton — import this wherever settings are needed.
settings = Settings()
