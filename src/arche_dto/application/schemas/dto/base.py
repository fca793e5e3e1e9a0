# src/arche_dto/application/schemas/dto/base.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Base DTO (Application Layer).

Purpose:
    Canonical base for Data Transfer Objects: a validated wrapper around a
    plain field mapping.

Pipeline:
    Every construction runs the same steps, in this order:

    1. Null stripping (only when ``strip_nulls`` is set).
    2. ``defaults()`` deep-merged under the raw input (input wins).
    3. ``transform(fields)`` deep-merged over the result (transform wins).
    4. Whitelisting to the keys of ``rules()`` (only when ``whitelist`` is set).
    5. Validation against ``rules()``; any failure raises ``ValidationError``
       listing every failing key.

    Whitelisting runs before validation, so derived fields can populate
    whitelisted keys and rules never see undeclared fields.

    Revalidation re-runs step 5 only. It is logged but not reported to
    construction observers.

Layer: application/schemas/dto
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Iterator, Mapping
from typing import Any, ClassVar, Self

from pydantic_core import to_jsonable_python

from arche_dto.application.interfaces.construction_observer import ConstructionOutcome
from arche_dto.application.services import rule_validator
from arche_dto.application.services.observers import notify
from arche_dto.domain.exceptions.dto import ParseError, ValidationError
from arche_dto.domain.services.deep_merge import deep_merge, drop_nulls

__all__ = ["DTO"]

logger = logging.getLogger(__name__)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not a valid JSON value")


class DTO:
    """Base class for validated Data Transfer Objects.

    Subclasses configure the pipeline by overriding :meth:`defaults`,
    :meth:`rules` and :meth:`transform`, and by setting the class flags below.

    Attributes:
        whitelist:
            Keep only keys declared in :meth:`rules`. An empty rule-set with
            whitelisting enabled yields an empty DTO, which is almost always a
            misconfiguration and is logged as a warning.
        strip_nulls:
            Drop ``None`` values from the raw input before defaults are merged,
            so a default can take the place of an explicit null.
        strict:
            Validate in Pydantic strict mode (no type coercion).
        coerce:
            After validation, replace ruled values with their parsed form
            (e.g. ``"5"`` becomes ``5`` for an ``int`` rule).

    Example:
        >>> class PersonDTO(DTO):
        ...     def defaults(self):
        ...         return {"age": 0}
        ...
        ...     def rules(self):
        ...         return {"name": str, "age": (int, Field(default=0, ge=0))}
        >>> PersonDTO({"name": "Ana"}).all()
        {'age': 0, 'name': 'Ana'}
    """

    whitelist: ClassVar[bool] = False
    strip_nulls: ClassVar[bool] = False
    strict: ClassVar[bool] = False
    coerce: ClassVar[bool] = False

    def __init__(self, items: Mapping[str, Any] | None = None) -> None:
        """Build the DTO by running ``items`` through the pipeline.

        Args:
            items: Raw field mapping. ``None`` is treated as empty.

        Raises:
            ValidationError: If the final mapping fails any declared rule.
            RuleDefinitionError: If :meth:`rules` cannot be compiled.
            TypeError: If ``items`` is not a mapping.
        """
        self._fields: dict[str, Any] = {}
        raw = {} if items is None else items
        if not isinstance(raw, Mapping):
            raise TypeError(
                f"{type(self).__name__} expects a mapping of fields, got {type(raw).__name__}."
            )
        self._fields = self._observed("construct", lambda: self._run_pipeline(raw))

    # ------------------------------------------------------------------ #
    # Alternate constructors                                             #
    # ------------------------------------------------------------------ #

    @classmethod
    def create(cls, items: Mapping[str, Any] | None = None) -> Self:
        """Create a DTO instance (same as calling the class)."""
        return cls(items)

    @classmethod
    def from_dict(cls, items: Mapping[str, Any]) -> Self:
        """Create a DTO from a field mapping."""
        return cls(items)

    @classmethod
    def from_json(cls, payload: str | bytes | bytearray) -> Self:
        """Create a DTO from a JSON object document.

        Args:
            payload: JSON text whose top-level value is an object.

        Returns:
            The constructed DTO.

        Raises:
            ParseError: If ``payload`` is not valid JSON or is not a JSON object.
            ValidationError: If the decoded fields fail declared rules.
        """
        try:
            decoded = json.loads(payload, parse_constant=_reject_constant)
        except ValueError as exc:
            raise ParseError(
                f"{cls.__name__} payload is not valid JSON: {exc}",
                details={"dto": cls.__name__, "position": getattr(exc, "pos", None)},
            ) from exc
        if not isinstance(decoded, dict):
            raise ParseError(
                f"{cls.__name__} payload must be a JSON object, got {type(decoded).__name__}.",
                details={"dto": cls.__name__, "type": type(decoded).__name__},
            )
        return cls.from_dict(decoded)

    # ------------------------------------------------------------------ #
    # Configuration hooks                                                #
    # ------------------------------------------------------------------ #

    def defaults(self) -> Mapping[str, Any]:
        """Return values merged under the raw input."""
        return {}

    def rules(self) -> Mapping[str, Any]:
        """Return the rule-set, keyed by field (see ``rule_validator``)."""
        return {}

    def transform(self, fields: Mapping[str, Any]) -> Mapping[str, Any]:
        """Return derived fields to merge over the defaulted input.

        Args:
            fields: Working mapping after defaults were merged. Must not be
                mutated.
        """
        return {}

    # ------------------------------------------------------------------ #
    # Accessors                                                          #
    # ------------------------------------------------------------------ #

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key``, or ``default`` when absent."""
        return self._fields.get(key, default)

    def has(self, key: str) -> bool:
        """Return True if ``key`` is present."""
        return key in self._fields

    def count(self) -> int:
        """Return the number of fields."""
        return len(self._fields)

    def all(self) -> dict[str, Any]:
        """Return a deep snapshot of the fields."""
        return deep_merge({}, self._fields)

    def to_dict(self) -> dict[str, Any]:
        """Return a deep snapshot of the fields (alias of :meth:`all`)."""
        return self.all()

    def to_json(self, **dumps_kwargs: Any) -> str:
        """Serialize the fields as a JSON object.

        Values the ``json`` module cannot encode natively (datetimes, decimals,
        enums, Pydantic models) are converted through Pydantic's JSON mode.
        Non-finite floats raise ``ValueError`` unless ``allow_nan=True`` is passed.

        Args:
            **dumps_kwargs: Extra keyword arguments for :func:`json.dumps`.
        """
        dumps_kwargs.setdefault("ensure_ascii", False)
        dumps_kwargs.setdefault("allow_nan", False)
        dumps_kwargs.setdefault("default", to_jsonable_python)
        return json.dumps(self._fields, **dumps_kwargs)

    def set(self, key: str, value: Any) -> Self:
        """Set ``key`` to ``value`` without running the pipeline.

        Callers that need the rules enforced again should call
        :meth:`revalidate` afterwards.
        """
        self._fields[key] = value
        return self

    def remove(self, key: str) -> Self:
        """Remove ``key`` if present, without running the pipeline."""
        self._fields.pop(key, None)
        return self

    def revalidate(self) -> Self:
        """Validate the current fields against :meth:`rules` again.

        Raises:
            ValidationError: If the fields no longer satisfy the rules. The
                fields are left unchanged.
        """
        current = deep_merge({}, self._fields)
        self._fields = self._observed(
            "revalidate", lambda: self._validate(current, self.rules()), report=False
        )
        return self

    # ------------------------------------------------------------------ #
    # Dunder protocol                                                    #
    # ------------------------------------------------------------------ #

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails; private and dunder names keep
        # raising so copy/pickle probing behaves.
        if name.startswith("_"):
            raise AttributeError(name)
        return self._fields.get(name)

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._fields))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DTO):
            return NotImplemented
        return type(self) is type(other) and self._fields == other._fields

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._fields!r})"

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _run_pipeline(self, items: Mapping[str, Any]) -> dict[str, Any]:
        working = drop_nulls(items) if self.strip_nulls else dict(items)
        working = deep_merge(self.defaults(), working)
        working = deep_merge(working, self.transform(working))

        rules = self.rules()
        if self.whitelist:
            working = self._apply_whitelist(working, rules)
        return self._validate(working, rules)

    def _apply_whitelist(
        self,
        items: dict[str, Any],
        rules: Mapping[str, Any],
    ) -> dict[str, Any]:
        if not rules:
            logger.warning(
                "dto.whitelist.empty_rules",
                extra={"dto": type(self).__name__, "dropped": sorted(items)},
            )
        allowed = rule_validator.whitelist_keys(rules)
        return {key: value for key, value in items.items() if key in allowed}

    def _validate(self, items: dict[str, Any], rules: Mapping[str, Any]) -> dict[str, Any]:
        name = type(self).__name__
        if self.coerce:
            values = rule_validator.validated_values(items, rules, strict=self.strict, name=name)
            return deep_merge(items, values)

        errors = rule_validator.validate(items, rules, strict=self.strict, name=name)
        if errors:
            raise ValidationError(errors, dto=name)
        return items

    def _observed(
        self,
        action: str,
        step: Callable[[], dict[str, Any]],
        *,
        report: bool = True,
    ) -> dict[str, Any]:
        name = type(self).__name__
        started = time.perf_counter()
        try:
            fields = step()
        except ValidationError as exc:
            duration_s = time.perf_counter() - started
            logger.info(
                f"dto.{action}.rejected",
                extra={"dto": name, "keys": exc.keys},
            )
            if report:
                notify(name, ConstructionOutcome.REJECTED, duration_s, exc.keys)
            raise

        duration_s = time.perf_counter() - started
        logger.debug(
            f"dto.{action}.ok",
            extra={"dto": name, "count": len(fields), "duration_ms": round(duration_s * 1000, 3)},
        )
        if report:
            notify(name, ConstructionOutcome.OK, duration_s)
        return fields
