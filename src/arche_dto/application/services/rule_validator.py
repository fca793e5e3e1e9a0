# src/arche_dto/application/services/rule_validator.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Rule-set validation engine (Pydantic v2).

Purpose:
    Compile declarative per-key rule-sets into Pydantic models and validate
    field mappings against them, reporting every failure per key.

Layer:
    application/services

Rule grammar:
    Each rule-set entry maps a field key to a Pydantic field definition:

    * a bare annotation declares a required field of that type::

        {"name": str, "age": Annotated[int, Field(ge=0)]}

    * an ``(annotation, default)`` or ``(annotation, Field(...))`` tuple
      declares an optional field, optionally constrained::

        {"age": (int, Field(default=0, ge=0)), "nickname": (str | None, None)}

    * a bare ``Field(...)`` declares an untyped field with constraints.

    * dotted keys declare nested-key rules. ``"address.city": str`` compiles
      into a nested model bound to ``address``. The parent key is required
      when any of its children is required.

Notes:
    * Keys are bound to generated field names through aliases, so any string
      (including ``"first-name"`` or ``"json"``) is a valid key.
    * Keys without rules are ignored by validation.
    * Compiled models are cached per (name, strict, rule fingerprint). Types
      in the fingerprint are compared by identity, not by name.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Annotated, Any, Final, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, PydanticUserError, create_model
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from arche_dto.domain.exceptions.dto import RuleDefinitionError, ValidationError

__all__ = [
    "compile_rules",
    "validate",
    "validated_values",
    "whitelist_keys",
]

logger = logging.getLogger(__name__)

_ROOT_KEY: Final[str] = "__root__"
_CACHE_MAX: Final[int] = 512

_model_cache: dict[tuple[Any, ...], type[BaseModel]] = {}
_lock = threading.RLock()


# --------------------------------------------------------------------------- #
# Compilation                                                                 #
# --------------------------------------------------------------------------- #


def whitelist_keys(rules: Mapping[str, Any]) -> set[str]:
    """Return the top-level keys a rule-set allows.

    Dotted keys allow their first segment, so ``"address.city"`` allows
    ``address``.
    """
    return {key.partition(".")[0] for key in rules}


def compile_rules(
    rules: Mapping[str, Any],
    *,
    strict: bool = False,
    name: str = "Rules",
) -> type[BaseModel]:
    """Compile a rule-set into a Pydantic model class.

    Args:
        rules: Mapping of field key to field definition (see module docs).
        strict: Validate in Pydantic strict mode (no type coercion).
        name: Model name, used in error reports and the cache key.

    Returns:
        A ``BaseModel`` subclass whose fields are aliased to the rule keys.

    Raises:
        RuleDefinitionError: If a key is malformed, a key is declared both
            plainly and with dotted children, or an annotation cannot be
            turned into a schema.
    """
    key = (name, strict, _fingerprint(rules))
    with _lock:
        cached = _model_cache.get(key)
        if cached is not None:
            return cached

    model = _build_model(name, rules, strict=strict)

    with _lock:
        if len(_model_cache) >= _CACHE_MAX:
            _model_cache.pop(next(iter(_model_cache)))
        return _model_cache.setdefault(key, model)


def _fingerprint(rules: Mapping[str, Any]) -> tuple[tuple[str, Any], ...]:
    return tuple((str(key), _rule_fingerprint(rule)) for key, rule in rules.items())


def _rule_fingerprint(rule: Any) -> Any:
    # Types are keyed by identity so same-named models never share a schema.
    # FieldInfo is rebuilt on every rules() call and compares by identity,
    # so it is keyed by its repr instead.
    if isinstance(rule, FieldInfo):
        return ("field", repr(rule))
    if isinstance(rule, tuple):
        return ("tuple", tuple(_rule_fingerprint(part) for part in rule))
    if get_origin(rule) is Annotated:
        return ("annotated", tuple(_rule_fingerprint(part) for part in get_args(rule)))
    try:
        hash(rule)
    except TypeError:
        return ("repr", repr(rule))
    return ("value", rule)


def _build_model(name: str, rules: Mapping[str, Any], *, strict: bool) -> type[BaseModel]:
    plain: dict[str, Any] = {}
    nested: dict[str, dict[str, Any]] = {}

    for key, rule in rules.items():
        if not isinstance(key, str):
            raise RuleDefinitionError(
                f"Rule keys must be strings, got {type(key).__name__}.",
                details={"model": name, "key": repr(key)},
            )
        head, sep, rest = key.partition(".")
        if not head or (sep and not rest):
            raise RuleDefinitionError(
                f"Invalid rule key {key!r}.",
                details={"model": name, "key": key},
            )
        if sep:
            nested.setdefault(head, {})[rest] = rule
        else:
            plain[head] = rule

    conflicts = sorted(plain.keys() & nested.keys())
    if conflicts:
        raise RuleDefinitionError(
            f"Keys declared both directly and with nested rules: {', '.join(conflicts)}.",
            details={"model": name, "keys": conflicts},
        )

    definitions: dict[str, Any] = {}
    for index, (key, rule) in enumerate(plain.items()):
        definitions[f"field_{index}"] = _field_definition(key, rule)

    offset = len(definitions)
    for index, (head, children) in enumerate(nested.items(), start=offset):
        child = _build_model(f"{name}_{head}", children, strict=strict)
        annotation = Annotated[child, Field(alias=head)]
        if any(info.is_required() for info in child.model_fields.values()):
            definitions[f"field_{index}"] = (annotation, ...)
        else:
            definitions[f"field_{index}"] = (Annotated[child | None, Field(alias=head)], None)

    try:
        return create_model(  # type: ignore[call-overload, no-any-return]
            name,
            __config__=ConfigDict(strict=strict, extra="ignore"),
            **definitions,
        )
    except (PydanticUserError, TypeError) as exc:
        raise RuleDefinitionError(
            f"Rule-set {name!r} could not be compiled: {exc}",
            details={"model": name, "keys": list(rules)},
        ) from exc


def _field_definition(key: str, rule: Any) -> tuple[Any, Any]:
    """Translate a single rule into a ``create_model`` field definition."""
    if isinstance(rule, tuple):
        if len(rule) != 2:
            raise RuleDefinitionError(
                f"Rule for {key!r} must be an (annotation, default) pair.",
                details={"key": key},
            )
        annotation, default = rule
        return (Annotated[annotation, Field(alias=key)], default)
    if isinstance(rule, FieldInfo):
        return (Annotated[Any, Field(alias=key)], rule)
    return (Annotated[rule, Field(alias=key)], ...)


# --------------------------------------------------------------------------- #
# Validation                                                                  #
# --------------------------------------------------------------------------- #


def validate(
    fields: Mapping[str, Any],
    rules: Mapping[str, Any],
    *,
    strict: bool = False,
    name: str = "Rules",
) -> dict[str, list[str]]:
    """Validate ``fields`` against ``rules`` and report every failure.

    Args:
        fields: Mapping under validation.
        rules: Rule-set (see module docs).
        strict: Validate in Pydantic strict mode.
        name: Model name for the compiled rule-set.

    Returns:
        Mapping of dotted key to failure messages. Empty when ``fields`` is valid.

    Raises:
        RuleDefinitionError: If ``rules`` cannot be compiled.
    """
    if not rules:
        return {}
    model = compile_rules(rules, strict=strict, name=name)
    try:
        model.model_validate(dict(fields))
    except PydanticValidationError as exc:
        return _collect_errors(exc)
    return {}


def validated_values(
    fields: Mapping[str, Any],
    rules: Mapping[str, Any],
    *,
    strict: bool = False,
    name: str = "Rules",
) -> dict[str, Any]:
    """Validate ``fields`` and return the parsed values of the supplied ruled keys.

    Keys absent from ``fields`` are not filled from rule defaults, and keys
    without rules are not returned.

    Raises:
        ValidationError: If any rule fails.
        RuleDefinitionError: If ``rules`` cannot be compiled.
    """
    if not rules:
        return {}
    model = compile_rules(rules, strict=strict, name=name)
    try:
        instance = model.model_validate(dict(fields))
    except PydanticValidationError as exc:
        raise ValidationError(_collect_errors(exc), dto=name) from exc
    return instance.model_dump(by_alias=True, exclude_unset=True)


def _collect_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors(include_url=False):
        key = ".".join(str(part) for part in err["loc"]) or _ROOT_KEY
        errors.setdefault(key, []).append(err["msg"])
    logger.debug(
        "dto.rules.failed",
        extra={"model": exc.title, "keys": sorted(errors)},
    )
    return errors
