"""Runtime settings, read from GENREPO_* environment variables or a .env file."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class RepositorySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GENREPO_", env_file=".env", extra="ignore")

    database_url: str | None = None
    echo_sql: bool = False
    log_level: str = "INFO"
    log_performance: bool = True  # include elapsed time in LoggingInterceptor lines
    slow_operation_threshold_ms: float = 1000.0  # <= 0 disables slow-operation warnings


@lru_cache
def get_settings() -> RepositorySettings:
    return RepositorySettings()


def configure_logging(settings: RepositorySettings | None = None) -> None:
    """Apply a basic root logging configuration at the configured level.

    The library never calls this itself; applications opt in.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
