"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates fields and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StorageBackend = Literal["disk", "sqlite", "memory"]


class Settings(BaseSettings):
    """Object cache settings loaded from environment variables.

    Optional:
        CACHE_DIR: Directory holding the stored records
        STORAGE_BACKEND: Storage engine (disk, sqlite, memory)
        SQLITE_FILENAME: Database file name inside CACHE_DIR for the sqlite engine
        LOG_LEVEL: Logging level
        LOG_FILE: JSON Lines log file, console only when unset
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    CACHE_DIR: Path = Field(
        default=Path(".cache/objects"), description="Directory for stored records"
    )
    STORAGE_BACKEND: StorageBackend = Field(
        default="disk", description="Storage engine backing the object cache"
    )
    SQLITE_FILENAME: str = Field(
        default="objects.db", description="SQLite database file name inside CACHE_DIR"
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON Lines log file")

    @field_validator("SQLITE_FILENAME")
    @classmethod
    def validate_sqlite_filename(cls, v: str) -> str:
        """Validate that SQLITE_FILENAME is a bare file name."""
        if not v or "/" in v or "\\" in v:
            raise ValueError("SQLITE_FILENAME must be a file name without path separators")
        return v

    @property
    def sqlite_path(self) -> Path:
        """Full path of the SQLite database file."""
        return self.CACHE_DIR / self.SQLITE_FILENAME

    def ensure_directories(self) -> None:
        """Create the cache directory if it doesn't exist."""
        self.CACHE_DIR.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
