"""Shared test fixtures for GrociSmart."""

import itertools

import pytest

from grocismart.data_store import JSONStateStore
from grocismart.list_manager import ListManager
from grocismart.models import AppState
from grocismart.pantry_manager import PantryManager
from grocismart.store import StateStore


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary data directory."""
    data_dir = tmp_path / "test_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def id_factory():
    """Deterministic id generator: g-1, p-2, g-3, ..."""
    counter = itertools.count(1)
    return lambda prefix="": f"{prefix}{next(counter)}"


@pytest.fixture
def empty_state():
    return AppState()


@pytest.fixture
def persistence(temp_data_dir):
    """JSON persistence in a temporary directory."""
    return JSONStateStore(data_dir=temp_data_dir)


@pytest.fixture
def store(persistence, id_factory, empty_state):
    """A StateStore starting from an empty state."""
    return StateStore(persistence, id_factory=id_factory, seed=empty_state)


@pytest.fixture
def list_manager(store):
    """Create a ListManager with temporary storage."""
    return ListManager(store=store)


@pytest.fixture
def pantry_manager(store):
    """Create a PantryManager with temporary storage."""
    return PantryManager(store=store)
