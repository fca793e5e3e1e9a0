# src/arche_dto/domain/services/deep_merge.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Recursive mapping merge.

Purpose:
    Merge two field mappings the way DTO defaults and transforms are layered:
    the incoming mapping wins, except that when both sides hold a mapping for
    the same key the two are merged recursively.

Layer:
    domain/services

Notes:
    * Pure: neither argument is mutated and the result shares no mutable
      containers with the inputs.
    * Sequences are replaced wholesale, never concatenated.
    * Key order: keys of ``base`` first (in their order), then keys only
      present in ``incoming``.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

__all__ = ["deep_merge", "drop_nulls"]


def deep_merge(base: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` deep-merged with ``incoming``.

    Args:
        base: Lower-precedence mapping (e.g., defaults).
        incoming: Higher-precedence mapping (e.g., raw input or transform output).

    Returns:
        A new dictionary holding the merged result.

    Example:
        >>> deep_merge({"a": {"x": 1, "y": 2}, "b": [1]}, {"a": {"y": 3}, "b": [2]})
        {'a': {'x': 1, 'y': 3}, 'b': [2]}
    """
    merged: dict[str, Any] = {key: copy.deepcopy(value) for key, value in base.items()}
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def drop_nulls(items: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``items`` without top-level ``None`` values."""
    return {key: copy.deepcopy(value) for key, value in items.items() if value is not None}
