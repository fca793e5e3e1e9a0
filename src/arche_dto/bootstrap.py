# src/arche_dto/bootstrap.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Process bootstrap for arche-dto.

Synopsis:
    Wires the ambient stack for applications embedding the library:

    * Root JSON logging at the configured level.
    * Prometheus construction metrics when ``metrics_enabled`` is set.

    Safe to call more than once; repeated calls never duplicate handlers or
    observers.

Typical usage:
    from arche_dto.bootstrap import configure

    configure()
"""

from __future__ import annotations

from arche_dto.application.services.observers import register_observer
from arche_dto.config.settings import Settings, get_settings
from arche_dto.infrastructure.logging.logger import configure_root_logging, get_json_logger
from arche_dto.infrastructure.observability.metrics import PrometheusConstructionObserver

__all__ = ["configure", "get_metrics_observer"]

logger = get_json_logger(__name__)

_METRICS_OBSERVER = PrometheusConstructionObserver()


def get_metrics_observer() -> PrometheusConstructionObserver:
    """Return the process-wide Prometheus observer used by :func:`configure`."""
    return _METRICS_OBSERVER


def configure(settings: Settings | None = None) -> Settings:
    """Configure logging and metrics from settings.

    Args:
        settings: Explicit settings. Defaults to :func:`get_settings`.

    Returns:
        The settings that were applied.
    """
    resolved = settings or get_settings()
    configure_root_logging(resolved.log_level)

    if resolved.metrics_enabled:
        register_observer(_METRICS_OBSERVER)

    logger.info(
        "arche_dto.bootstrap.configured",
        extra={
            "environment": resolved.environment.value,
            "metrics_enabled": resolved.metrics_enabled,
        },
    )
    return resolved
