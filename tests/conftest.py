"""
Shared fixtures for the Matchday test suite.
"""

import random
import sys
from itertools import count

import pytest
from PySide6.QtCore import QCoreApplication

from services.competition_manager import CompetitionManager
from services.event_bus import EventBus
from services.storage import MatchdayStore, MemoryBackend, SqlBackend


@pytest.fixture(scope="session")
def qapp():
    """Create a QCoreApplication instance for the test session."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv)
    yield app


@pytest.fixture
def memory_store():
    store = MatchdayStore(MemoryBackend())
    store.initialize()
    return store


@pytest.fixture
def sql_store(tmp_path):
    store = MatchdayStore(SqlBackend(f"sqlite:///{tmp_path / 'matchday.db'}"))
    store.initialize()
    return store


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Run a test once per storage backend."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def event_bus(qapp):
    return EventBus()


@pytest.fixture
def manager(store, event_bus):
    """Manager with a fixed draw and readable ids."""
    ids = count(1)
    return CompetitionManager(
        store,
        event_bus=event_bus,
        rng=random.Random(42),
        id_factory=lambda: f"id{next(ids)}",
    )
