"""
Shared pytest fixtures for vigie tests.

This module provides:
- A fresh store / ledger / sink / bus per test
- A small cast of registered entities (persons, organizations, media)
- Log capture through structlog's testing helpers

Usage:
    Fixtures are auto-discovered by pytest; request them by name.

    def test_something(ledger, alice, le_monde):
        ledger.grant(alice, le_monde, 10)
"""

import sys
from pathlib import Path
from typing import Generator

import pytest
import structlog

# Ensure vigie package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vigie.core.settings import clear_settings_cache
from vigie.domain import Entity, EntityStore, OwnershipLedger
from vigie.framework import AlertSink, EventBus


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark scenario tests as integration, everything else as unit."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if markers.intersection({"unit", "integration"}):
            continue
        if "scenario" in item.nodeid or "runtime" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings so env overrides in one test never leak."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def captured_logs() -> Generator[list[dict], None, None]:
    """Structlog events emitted during the test."""
    with structlog.testing.capture_logs() as logs:
        yield logs


# =============================================================================
# Core components
# =============================================================================


@pytest.fixture
def store() -> EntityStore:
    return EntityStore()


@pytest.fixture
def ledger(store: EntityStore) -> OwnershipLedger:
    return OwnershipLedger(store)


@pytest.fixture
def sink() -> AlertSink:
    return AlertSink()


@pytest.fixture
def bus(ledger: OwnershipLedger) -> EventBus:
    return EventBus(ledger)


# =============================================================================
# Entities (registered in the store)
# =============================================================================


@pytest.fixture
def alice(store: EntityStore) -> Entity:
    return store.register(Entity.person("Alice Martin"))


@pytest.fixture
def bob(store: EntityStore) -> Entity:
    return store.register(Entity.person("Bob Durand"))


@pytest.fixture
def ada(store: EntityStore) -> Entity:
    return store.register(Entity.person("Ada Lovelace"))


@pytest.fixture
def holding(store: EntityStore) -> Entity:
    return store.register(Entity.organization("Groupe Holding"))


@pytest.fixture
def le_monde(store: EntityStore) -> Entity:
    return store.register(Entity.media("Le Monde", "press"))


@pytest.fixture
def cnews(store: EntityStore) -> Entity:
    return store.register(Entity.media("CNews", "TV"))
