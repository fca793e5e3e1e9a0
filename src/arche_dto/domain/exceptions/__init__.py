"""Domain exceptions export."""

from __future__ import annotations

from .base import DomainError
from .dto import DTOError, ParseError, RuleDefinitionError, ValidationError

__all__ = [
    "DTOError",
    "DomainError",
    "ParseError",
    "RuleDefinitionError",
    "ValidationError",
]
