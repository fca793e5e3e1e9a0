# tests/unit/domain/exceptions/test_dto_exceptions.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Tests for DTO exception types."""

from __future__ import annotations

from arche_dto.domain.exceptions import (
    DomainError,
    DTOError,
    ParseError,
    RuleDefinitionError,
    ValidationError,
)


def test_validation_error_carries_every_failure() -> None:
    err = ValidationError(
        {"age": ["too small"], "name": ["Field required", "too short"]},
        dto="PersonDTO",
    )

    assert err.errors == {"age": ["too small"], "name": ["Field required", "too short"]}
    assert err.keys == ["age", "name"]
    assert err.dto == "PersonDTO"
    assert err.code == "DTO_VALIDATION_ERROR"
    assert err.details == {"dto": "PersonDTO", "errors": err.errors}
    assert str(err) == "PersonDTO validation failed (age: too small, name: Field required; too short)"


def test_validation_error_copies_input_lists() -> None:
    messages = ["bad"]
    err = ValidationError({"x": messages})
    messages.append("mutated")

    assert err.errors == {"x": ["bad"]}
    assert str(err).startswith("DTO validation failed")


def test_error_kinds_are_distinguishable() -> None:
    parse = ParseError("not json", details={"position": 3})
    rules = RuleDefinitionError("bad rules")

    assert isinstance(parse, DTOError)
    assert isinstance(parse, DomainError)
    assert not isinstance(parse, ValidationError)
    assert parse.code == "DTO_PARSE_ERROR"
    assert parse.details == {"position": 3}
    assert rules.code == "DTO_RULE_DEFINITION_ERROR"
    assert str(rules) == "bad rules"


def test_domain_error_defaults() -> None:
    err = DomainError()
    assert err.code == "DOMAIN_ERROR"
    assert err.details == {}
    assert str(err) == ""
