# src/arche_dto/application/services/observers.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Process-wide registry of construction observers.

Observers are notified synchronously, in registration order. An observer
that raises is logged and skipped; it never fails the construction it
observes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from arche_dto.application.interfaces.construction_observer import (
    ConstructionObserver,
    ConstructionOutcome,
)

__all__ = [
    "clear_observers",
    "get_observers",
    "notify",
    "register_observer",
    "unregister_observer",
]

logger = logging.getLogger(__name__)

_observers: list[ConstructionObserver] = []
_lock = threading.RLock()


def register_observer(observer: ConstructionObserver) -> None:
    """Register ``observer``; registering the same object twice is a no-op."""
    with _lock:
        if not any(existing is observer for existing in _observers):
            _observers.append(observer)


def unregister_observer(observer: ConstructionObserver) -> None:
    """Remove ``observer`` if registered."""
    with _lock:
        _observers[:] = [existing for existing in _observers if existing is not observer]


def clear_observers() -> None:
    """Remove every registered observer."""
    with _lock:
        _observers.clear()


def get_observers() -> tuple[ConstructionObserver, ...]:
    """Return a snapshot of the registered observers."""
    with _lock:
        return tuple(_observers)


def notify(
    dto_name: str,
    outcome: ConstructionOutcome,
    duration_s: float,
    failed_fields: Sequence[str] = (),
) -> None:
    """Fan a construction result out to every registered observer."""
    for observer in get_observers():
        try:
            observer.record(dto_name, outcome, duration_s, failed_fields)
        except Exception:
            logger.exception(
                "dto.observer.failed",
                extra={"dto": dto_name, "observer": type(observer).__name__},
            )
