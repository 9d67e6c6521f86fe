"""Process-level settings for joinery.

Joint options are passed in code; what comes from the environment is how the
hosting process logs.  ``JoinerySettings`` reads ``JOINERY_*`` variables and
an optional ``.env`` file.

Examples:
    >>> from joinery.core.settings import get_settings, configure_from_settings
    >>> configure_from_settings()          # uses JOINERY_LOG_LEVEL etc.

Tags:
    settings, configuration, pydantic, environment, joinery
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from joinery.core.logging import configure_logging

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class JoinerySettings(BaseSettings):
    """Settings read from ``JOINERY_``-prefixed environment variables.

    Fields
    ──────
    log_level    : structlog log level
    log_json     : JSON output; unset means auto-detect (JSON when not a tty)
    service_name : value of ``service.name`` on every log line
    """

    model_config = SettingsConfigDict(
        env_prefix="JOINERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = Field(default="joinery", min_length=1)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.upper()
        if v not in _LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LEVELS)}")
        return v


@lru_cache
def get_settings() -> JoinerySettings:
    return JoinerySettings()


def configure_from_settings(settings: JoinerySettings | None = None) -> JoinerySettings:
    """Apply logging configuration from settings (cached settings by default)."""
    settings = settings or get_settings()
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_json,
        service=settings.service_name,
    )
    return settings


__all__ = ["JoinerySettings", "get_settings", "configure_from_settings"]
