# src/arche_dto/__init__.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Validated Data Transfer Objects.

Typical usage:
    from arche_dto import DTO

    class SignupDTO(DTO):
        whitelist = True

        def rules(self):
            return {"email": str, "age": (int, Field(default=0, ge=0))}

    dto = SignupDTO.from_json('{"email": "a@b.com"}')
"""

from __future__ import annotations

from arche_dto.application.schemas.dto.base import DTO
from arche_dto.application.schemas.dto.factory import define_dto
from arche_dto.domain.exceptions.dto import (
    DTOError,
    ParseError,
    RuleDefinitionError,
    ValidationError,
)

__all__ = [
    "DTO",
    "DTOError",
    "ParseError",
    "RuleDefinitionError",
    "ValidationError",
    "define_dto",
]
