# src/arche_dto/application/schemas/dto/factory.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""DTO factory.

Purpose:
    Build DTO classes from plain configuration values (rules, defaults,
    transform, flags) instead of a hand-written subclass.

Layer: application/schemas/dto
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from typing import Any

from arche_dto.application.schemas.dto.base import DTO

__all__ = ["define_dto"]

Transform = Callable[[Mapping[str, Any]], Mapping[str, Any]]


def define_dto(
    name: str,
    *,
    rules: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
    transform: Transform | None = None,
    whitelist: bool | None = None,
    strip_nulls: bool | None = None,
    strict: bool | None = None,
    coerce: bool | None = None,
    base: type[DTO] = DTO,
) -> type[DTO]:
    """Create a DTO subclass from configuration values.

    Any argument left as ``None`` is inherited from ``base``.

    Args:
        name: Class name of the generated DTO (must be an identifier).
        rules: Rule-set returned by ``rules()``.
        defaults: Mapping returned (as a fresh deep copy) by ``defaults()``.
        transform: Callable used as ``transform(fields)``.
        whitelist: Value of the ``whitelist`` flag.
        strip_nulls: Value of the ``strip_nulls`` flag.
        strict: Value of the ``strict`` flag.
        coerce: Value of the ``coerce`` flag.
        base: DTO class to extend.

    Returns:
        The generated DTO class.

    Raises:
        ValueError: If ``name`` is not a valid identifier.
        TypeError: If ``base`` is not a DTO subclass.
    """
    if not name.isidentifier():
        raise ValueError(f"DTO name must be a valid identifier, got {name!r}.")
    if not (isinstance(base, type) and issubclass(base, DTO)):
        raise TypeError("base must be a DTO subclass.")

    namespace: dict[str, Any] = {"__qualname__": name, "__module__": base.__module__}

    flags = {
        "whitelist": whitelist,
        "strip_nulls": strip_nulls,
        "strict": strict,
        "coerce": coerce,
    }
    namespace.update({flag: value for flag, value in flags.items() if value is not None})

    if rules is not None:
        rule_set = dict(rules)

        def _rules(self: DTO) -> Mapping[str, Any]:
            return dict(rule_set)

        namespace["rules"] = _rules

    if defaults is not None:
        default_values = copy.deepcopy(dict(defaults))

        def _defaults(self: DTO) -> Mapping[str, Any]:
            return copy.deepcopy(default_values)

        namespace["defaults"] = _defaults

    if transform is not None:

        def _transform(self: DTO, fields: Mapping[str, Any]) -> Mapping[str, Any]:
            return transform(fields)

        namespace["transform"] = _transform

    return type(name, (base,), namespace)
