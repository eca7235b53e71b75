"""Runtime configuration for the workload simulator service."""

from __future__ import annotations

import enum
import logging
import os
from functools import lru_cache

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .profiles import CATALOG, DEFAULT_PROFILE, Profile

logger = structlog.get_logger(__name__)

MAX_OFFLOAD_WORKERS = 200


class Strategy(enum.StrEnum):
    """How the HTTP front end schedules simulated queries."""

    THREADS = "threads"
    TASKS = "tasks"
    OFFLOAD = "offload"


def _default_offload_workers() -> int:
    return min(10 * (os.cpu_count() or 1), MAX_OFFLOAD_WORKERS)


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WORKLOAD_SIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    profile: str = Field(default=DEFAULT_PROFILE.name, description="Catalog profile name.")
    seed: int | None = Field(default=None, description="Seed for deterministic sampling.")
    strategy: Strategy = Field(default=Strategy.THREADS)
    thread_pool_size: int = Field(default=200, ge=1, description="Request threads for the threads strategy.")
    offload_workers: int = Field(default_factory=_default_offload_workers, ge=1)
    cpu_check_interval: int = Field(default=256, ge=1, description="Hashes between clock checks.")
    log_level: str = Field(default="INFO", description="Python logging level.")
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8000, ge=1, le=65535)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Normalise configured log level to uppercase."""
        return str(value or "").upper() or "INFO"

    @field_validator("profile", mode="before")
    @classmethod
    def normalize_profile(cls, value: str) -> str:
        """Normalise the profile name to the catalog's upper-case keys."""
        return str(value or "").strip().upper() or DEFAULT_PROFILE.name

    @field_validator("strategy", mode="before")
    @classmethod
    def normalize_strategy(cls, value: str) -> str:
        """Accept strategy names in any case."""
        return str(value or "").strip().lower() or Strategy.THREADS.value

    def resolve_profile(self) -> Profile:
        """Return the configured catalog profile, falling back to MEDIUM.

        Returns:
            The catalog profile named by ``profile``, or the default when unknown.

        """
        resolved = CATALOG.get(self.profile)
        if resolved is None:
            logger.warning("profile.unknown", requested=self.profile, fallback=DEFAULT_PROFILE.name)
            return DEFAULT_PROFILE
        return resolved

    @property
    def log_level_value(self) -> int:
        """Return the numeric logging level for configured log level."""
        level_names = logging.getLevelNamesMapping()
        return level_names.get(self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Returns:
        The cached Settings instance.

    """
    return Settings()
