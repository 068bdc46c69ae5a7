"""
Configuration settings for MentalSum.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    database_url: str = Field(
        default="sqlite:///~/.mentalsum/mentalsum.db",
        description="SQLAlchemy connection string (SQLite file by default)",
    )
    problem_history_limit: int = Field(
        default=100,
        ge=0,
        description="Completed problems kept in each user's history",
    )

    # ========================================
    # Practice
    # ========================================
    random_seed: int | None = Field(
        default=None,
        description="Seed for the problem engine RNG (None for a random seed)",
    )
    feedback_pause_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Pause after each answer before the next problem",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    @field_validator("database_url")
    @classmethod
    def _expand_sqlite_home(cls, value: str) -> str:
        prefix = "sqlite:///"
        if value.startswith(prefix) and "~" in value:
            return prefix + os.path.expanduser(value[len(prefix):])
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    def get_storage_config(self) -> dict[str, Any]:
        """Get storage configuration as a dictionary."""
        return {
            "database_url": self.database_url,
            "problem_history_limit": self.problem_history_limit,
            "echo": self.log_level == "DEBUG",
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
