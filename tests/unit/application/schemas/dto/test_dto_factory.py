# tests/unit/application/schemas/dto/test_dto_factory.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Tests for building DTO classes from configuration values."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
from pydantic import Field, create_model

from arche_dto import DTO, ValidationError, define_dto


def test_define_dto_builds_working_subclass() -> None:
    person = define_dto(
        "PersonDTO",
        rules={"name": str, "age": (int, Field(default=0, ge=0))},
        defaults={"age": 0},
    )

    assert issubclass(person, DTO)
    assert person.__name__ == "PersonDTO"
    assert person({"name": "Ana"}).all() == {"name": "Ana", "age": 0}

    with pytest.raises(ValidationError) as excinfo:
        person({"age": -1, "name": "Ana"})
    assert excinfo.value.keys == ["age"]
    assert excinfo.value.dto == "PersonDTO"


def test_define_dto_whitelist_and_transform() -> None:
    signup = define_dto(
        "SignupDTO",
        rules={"email": str},
        transform=lambda fields: {"email": str(fields.get("email", "")).lower()},
        whitelist=True,
    )

    dto = signup({"email": "A@B.COM", "extra": "x"})
    assert dto.all() == {"email": "a@b.com"}


def test_define_dto_defaults_are_isolated_between_instances() -> None:
    defaults: dict[str, Any] = {"tags": []}
    tagged = define_dto("TaggedDTO", defaults=defaults)

    first = tagged({})
    first.get("tags").append("x")
    defaults["tags"].append("y")

    assert tagged({}).get("tags") == []


def test_define_dto_inherits_unspecified_configuration() -> None:
    class BaseSignup(DTO):
        whitelist = True

        def rules(self) -> Mapping[str, Any]:
            return {"email": str}

    derived = define_dto("DerivedSignup", defaults={"email": "x@y.z"}, base=BaseSignup)

    assert derived.whitelist is True
    assert derived({"other": 1}).all() == {"email": "x@y.z"}


def test_define_dto_flags() -> None:
    loose = define_dto("LooseDTO", rules={"n": int}, coerce=True, strip_nulls=True)
    assert loose({"n": "3", "gone": None}).all() == {"n": 3}

    strict = define_dto("StrictDTO", rules={"n": int}, strict=True)
    with pytest.raises(ValidationError):
        strict({"n": "3"})


def test_define_dto_rejects_bad_name_and_base() -> None:
    with pytest.raises(ValueError):
        define_dto("not a name")
    with pytest.raises(TypeError):
        define_dto("Thing", base=dict)  # type: ignore[arg-type]


def test_same_named_dtos_validate_against_their_own_rules() -> None:
    city = create_model("Address", city=(str, ...))
    zip_code = create_model("Address", zip=(int, ...))
    by_city = define_dto("UserDTO", rules={"address": city})
    by_zip = define_dto("UserDTO", rules={"address": zip_code})

    assert by_city({"address": {"city": "Lisbon"}}).get("address") == {"city": "Lisbon"}
    assert by_zip({"address": {"zip": 1000}}).get("address") == {"zip": 1000}

    with pytest.raises(ValidationError) as excinfo:
        by_zip({"address": {"city": "Lisbon"}})
    assert excinfo.value.keys == ["address.zip"]
