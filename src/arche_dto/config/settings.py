# src/arche_dto/config/settings.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""arche-dto Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated process configuration for the DTO library. Only the
    bootstrap module reads it; DTO classes are configured through class
    attributes and never read the environment.

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown keys.
    - Environment enumeration for coarse behavior toggles.
    - Singleton accessor `get_settings()` with LRU cache.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"})


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed configuration for arche-dto."""

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ARCHE_DTO_ENVIRONMENT",
    )

    # ---------------------------
    # Logging
    # ---------------------------
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO'). If not set, INFO is used.",
        validation_alias="ARCHE_DTO_LOG_LEVEL",
    )

    # ---------------------------
    # Metrics
    # ---------------------------
    metrics_enabled: bool = Field(
        default=False,
        description="Register the Prometheus construction observer at bootstrap.",
        validation_alias="ARCHE_DTO_METRICS_ENABLED",
    )

    model_config = SettingsConfigDict(
        extra="forbid",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str | None) -> str | None:
        """Upper-case the log level and reject unknown names.

        Raises:
            ValueError: If the level is not a standard logging level name.
        """
        if value is None or not value.strip():
            return None
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {value!r}.")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process settings."""
    settings = Settings()
    logger.debug(
        "settings.loaded",
        extra={
            "environment": settings.environment.value,
            "metrics_enabled": settings.metrics_enabled,
        },
    )
    return settings
