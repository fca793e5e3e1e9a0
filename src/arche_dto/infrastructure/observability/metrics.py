# src/arche_dto/infrastructure/observability/metrics.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Prometheus metrics for DTO construction (registry-aware, hot-reload safe).

Collectors are exposed through accessor functions that return a *singleton*
bound to the **current** ``prometheus_client.REGISTRY``:

- Safe under hot reload and tests that swap the default registry.
- No duplicate-registration errors.
- Cache automatically resets when the active registry changes.

:class:`PrometheusConstructionObserver` plugs these collectors into the DTO
pipeline through the application-level observer registry.

Example:
    register_observer(PrometheusConstructionObserver())
    SignupDTO({"email": "a@b.com"})
    get_dto_constructions_total().labels(dto="SignupDTO", outcome="ok")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from contextlib import suppress
from typing import Final, cast

import prometheus_client as prom
from prometheus_client import Counter, Histogram

from arche_dto.application.interfaces.construction_observer import ConstructionOutcome

__all__ = [
    "PrometheusConstructionObserver",
    "get_dto_construction_latency_seconds",
    "get_dto_constructions_total",
    "get_dto_validation_failures_total",
]

_log = logging.getLogger(__name__)

# Construction is in-process and fast; buckets start well below a millisecond.
_BUCKETS: Final[tuple[float, ...]] = (
    0.0001,
    0.00025,
    0.0005,
    0.001,
    0.0025,
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
)

# Cache keyed by metric name within the currently-active registry.
_registry_id: int | None = None
_cache: dict[str, Counter | Histogram] = {}
_lock = threading.RLock()


# ---------------------------------------------------------------------------
# Registry-handling primitives


def _ensure_registry() -> None:
    """Reset the cache if the active registry changed."""
    global _registry_id
    with _lock:
        rid = id(prom.REGISTRY)
        if _registry_id != rid:
            _cache.clear()
            _registry_id = rid


def _lookup_existing(
    name: str, kind: type[Counter] | type[Histogram]
) -> Counter | Histogram | None:
    """Return a previously-registered collector of ``kind`` from the active registry."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, kind):
                return col
    return None


def _get_or_create(
    kind: type[Counter] | type[Histogram],
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...],
    buckets: tuple[float, ...] | None = None,
) -> Counter | Histogram:
    """Get or create a registry-bound collector with stable identity.

    Strategy:
    1. Return from module cache if present for the active registry.
    2. If the registry already has a collector by this name, reuse it.
    3. Otherwise, register a new collector on the active registry.
    4. If concurrent registration triggers a duplication error, retry step 2.
    """
    _ensure_registry()
    with _lock:
        cached = _cache.get(name)
        if isinstance(cached, kind):
            return cached

        existing = _lookup_existing(name, kind)
        if existing is not None:
            _cache[name] = existing
            return existing

        try:
            if buckets is not None:
                collector = kind(
                    name, help_text, labelnames, buckets=buckets, registry=prom.REGISTRY
                )
            else:
                collector = kind(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, kind)
                if again is not None:
                    _cache[name] = again
                    return again
            _log.exception("Failed to register Prometheus collector %s", name)
            raise
        _cache[name] = collector
        return collector


# ---------------------------------------------------------------------------
# DTO metrics


def get_dto_constructions_total() -> Counter:
    """Return counter of DTO construction attempts.

    Labels:
        dto: DTO class name.
        outcome: One of ``ok|rejected``.
    """
    collector = _get_or_create(
        Counter,
        "arche_dto_constructions_total",
        "DTO construction attempts by outcome",
        labelnames=("dto", "outcome"),
    )
    return cast(Counter, collector)


def get_dto_construction_latency_seconds() -> Histogram:
    """Return histogram of DTO pipeline latency.

    Labels:
        dto: DTO class name.
    """
    collector = _get_or_create(
        Histogram,
        "arche_dto_construction_latency_seconds",
        "Latency (seconds) of the DTO construction pipeline",
        labelnames=("dto",),
        buckets=_BUCKETS,
    )
    return cast(Histogram, collector)


def get_dto_validation_failures_total() -> Counter:
    """Return counter of per-field validation failures.

    Labels:
        dto: DTO class name.
        field: Dotted key of the failing field.
    """
    collector = _get_or_create(
        Counter,
        "arche_dto_validation_failures_total",
        "Validation failures by DTO and field",
        labelnames=("dto", "field"),
    )
    return cast(Counter, collector)


class PrometheusConstructionObserver:
    """Construction observer that records outcomes as Prometheus metrics."""

    def record(
        self,
        dto_name: str,
        outcome: ConstructionOutcome,
        duration_s: float,
        failed_fields: Sequence[str] = (),
    ) -> None:
        """Record one construction attempt."""
        get_dto_constructions_total().labels(dto=dto_name, outcome=outcome.value).inc()
        get_dto_construction_latency_seconds().labels(dto=dto_name).observe(duration_s)
        failures = get_dto_validation_failures_total()
        for field in failed_fields:
            failures.labels(dto=dto_name, field=field).inc()
