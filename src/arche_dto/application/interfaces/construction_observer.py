# src/arche_dto/application/interfaces/construction_observer.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Application-level DTO construction observer interface.

Synopsis:
    Hook through which the DTO construction pipeline reports outcomes to
    outer layers (metrics, audit logging) without importing them.

    Concrete observers live in infrastructure (for example
    ``arche_dto.infrastructure.observability.metrics.PrometheusConstructionObserver``)
    and are registered at process bootstrap.

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol, runtime_checkable

__all__ = ["ConstructionObserver", "ConstructionOutcome"]


class ConstructionOutcome(str, Enum):
    """Result of a DTO construction attempt."""

    OK = "ok"
    REJECTED = "rejected"


@runtime_checkable
class ConstructionObserver(Protocol):
    """Receives one notification per DTO construction."""

    def record(
        self,
        dto_name: str,
        outcome: ConstructionOutcome,
        duration_s: float,
        failed_fields: Sequence[str] = (),
    ) -> None:
        """Record a construction attempt.

        Args:
            dto_name: Class name of the DTO.
            outcome: Whether the pipeline produced a DTO.
            duration_s: Wall-clock time spent in the pipeline, in seconds.
            failed_fields: Keys that failed validation (empty on success).
        """
        ...
