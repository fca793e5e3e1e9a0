# tests/conftest.py
from __future__ import annotations

import logging
from collections.abc import Generator

import prometheus_client as prom
import pytest
from prometheus_client import CollectorRegistry

from arche_dto.application.services.observers import clear_observers
from arche_dto.config.settings import get_settings


@pytest.fixture(autouse=True)
def _reset_observers() -> Generator[None, None, None]:
    """Start and finish every test with an empty observer registry."""
    clear_observers()
    yield
    clear_observers()


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    """Ensure get_settings() re-reads the environment in every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def prometheus_registry(monkeypatch: pytest.MonkeyPatch) -> CollectorRegistry:
    """Swap the default Prometheus registry for an isolated one."""
    registry = CollectorRegistry()
    monkeypatch.setattr(prom, "REGISTRY", registry)
    return registry


@pytest.fixture
def root_logger() -> Generator[logging.Logger, None, None]:
    """Yield the root logger and restore its handlers and level afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    try:
        yield root
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
