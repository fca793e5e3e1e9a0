# src/arche_dto/domain/exceptions/dto.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""DTO domain exceptions.

Purpose:
    Error types raised while building, validating or decoding Data Transfer
    Objects.

Layer:
    domain

Notes:
    - ``ValidationError`` means the input failed declared rules.
    - ``ParseError`` means the input could not be decoded into a mapping at all.
      Callers branch on the two to tell "bad input shape" from "input failed
      business rules".
    - ``RuleDefinitionError`` means the DTO itself is misconfigured.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from arche_dto.domain.exceptions.base import DomainError

__all__ = ["DTOError", "ParseError", "RuleDefinitionError", "ValidationError"]


class DTOError(DomainError):
    """Base class for DTO-related errors."""

    code = "DTO_ERROR"


class ValidationError(DTOError):
    """Raised when DTO fields fail one or more declared rules.

    Attributes:
        errors:
            Mapping of field key (dotted for nested keys) to every failure
            message reported for that key.
        dto:
            Name of the DTO class being constructed, if known.
    """

    code = "DTO_VALIDATION_ERROR"

    def __init__(
        self,
        errors: Mapping[str, Sequence[str]],
        *,
        dto: str | None = None,
    ) -> None:
        """Initialize a ValidationError.

        Args:
            errors: Per-key failure messages. Must not be empty.
            dto: Name of the DTO class that rejected the input.
        """
        self.errors: dict[str, list[str]] = {key: list(msgs) for key, msgs in errors.items()}
        self.dto = dto
        super().__init__(
            self._format_message(),
            details={"dto": dto, "errors": self.errors},
        )

    @property
    def keys(self) -> list[str]:
        """Return the failing keys in report order."""
        return list(self.errors)

    def _format_message(self) -> str:
        target = self.dto or "DTO"
        parts = [f"{key}: {'; '.join(msgs)}" for key, msgs in self.errors.items()]
        return f"{target} validation failed ({', '.join(parts)})"


class ParseError(DTOError):
    """Raised when a JSON payload cannot be decoded into a field mapping."""

    code = "DTO_PARSE_ERROR"


class RuleDefinitionError(DTOError):
    """Raised when a rule-set cannot be compiled into a validator."""

    code = "DTO_RULE_DEFINITION_ERROR"
