# tests/arch/test_layering.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Clean Architecture layering guardrail using grimp import graph.

This test builds an import graph for the `arche_dto` package and enforces
a strict layering policy:

    domain         → may depend only on domain
    application    → may depend on {domain, application}
    infrastructure → may depend on {domain, application, infrastructure}

`arche_dto.config` and `arche_dto.bootstrap` sit outside the matrix; they
wire layers together and may import any of them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

import grimp
from grimp import ImportGraph

ROOT_PACKAGE: Final[str] = "arche_dto"

LAYERS: Final[frozenset[str]] = frozenset({"domain", "application", "infrastructure"})

# Map from top-level "layer" to the set of layers it is allowed to import.
ALLOWED_DEPENDENCIES: Mapping[str, set[str]] = {
    "domain": {"domain"},
    "application": {"domain", "application"},
    "infrastructure": {"domain", "application", "infrastructure"},
}

# Third-party packages each layer must not import.
FORBIDDEN_EXTERNALS: Mapping[str, set[str]] = {
    "domain": {"pydantic", "pydantic_core", "pydantic_settings", "prometheus_client"},
    "application": {"pydantic_settings", "prometheus_client"},
}


def _build_graph() -> ImportGraph:
    """Build the import graph for the root package, including externals."""
    return grimp.build_graph(ROOT_PACKAGE, include_external_packages=True)


def _layer_for_module(module_name: str) -> str | None:
    """Infer the logical layer for a module from its first sub-package.

        arche_dto.domain.*          → "domain"
        arche_dto.application.*     → "application"
        arche_dto.infrastructure.*  → "infrastructure"

    Anything else (config, bootstrap) returns None.
    """
    if not module_name.startswith(f"{ROOT_PACKAGE}."):
        return None
    top = module_name[len(ROOT_PACKAGE) + 1 :].split(".", 1)[0]
    return top if top in LAYERS else None


def _find_layering_violations(graph: ImportGraph) -> list[str]:
    """Scan the graph and return human-readable layering violations."""
    violations: set[str] = set()

    for importer in sorted(graph.modules):
        importer_layer = _layer_for_module(importer)
        if importer_layer is None:
            continue

        allowed_targets = ALLOWED_DEPENDENCIES[importer_layer]
        forbidden_externals = FORBIDDEN_EXTERNALS.get(importer_layer, set())

        for imported in graph.find_modules_directly_imported_by(importer):
            if not imported.startswith(f"{ROOT_PACKAGE}."):
                if imported.split(".", 1)[0] in forbidden_externals:
                    violations.add(f"{importer} ({importer_layer}) -> {imported} (external)")
                continue

            imported_layer = _layer_for_module(imported)
            if imported_layer is None:
                violations.add(
                    f"{importer} ({importer_layer}) -> {imported} "
                    "imports wiring code from inside a layer"
                )
                continue

            if imported_layer not in allowed_targets:
                violations.add(
                    f"{importer} ({importer_layer}) -> {imported} ({imported_layer}) "
                    "is not allowed by ALLOWED_DEPENDENCIES"
                )

    return sorted(violations)


def test_layering_respects_clean_architecture() -> None:
    """Ensure that high-level layering rules are respected."""
    graph = _build_graph()
    violations = _find_layering_violations(graph)

    if violations:
        message = "Layering violations detected:\n" + "\n".join(violations)
        raise AssertionError(message)
