# tests/rhosocial/activerecord_fixtures_test/conftest.py
"""Pytest configuration for fixture loader tests

Every test gets a fresh in-memory SQLite database with the schema from
fixture_models, all test models bound to it, and a loader reading the YAML
files under ``data/``.
"""

import logging
import sys
from pathlib import Path

import pytest
from rhosocial.activerecord.backend.impl.sqlite import SQLiteBackend, SQLiteConnectionConfig

# Allow running from a source checkout without installing the package
sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from rhosocial.activerecord_fixtures import (  # noqa: E402
    FixtureConfig,
    FixtureLoader,
    ModelAdapterRegistry,
    SQLiteModelAdapter,
    connect_models,
    entity_name,
)
from fixture_models import ALL_MODELS, SQLITE_SCHEMA  # noqa: E402

# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DATA_PATH = Path(__file__).resolve().parent / "data"


class RecordingSQLiteAdapter(SQLiteModelAdapter):
    """SQLite adapter that records every save and link it performs."""

    def __init__(self):
        super().__init__()
        self.events = []

    def save(self, model, record):
        result = super().save(model, record)
        self.events.append(('save', entity_name(model), self.primary_key_value(record)))
        return result

    def add_associated_object(self, descriptor, owner, target):
        self.events.append(('link', descriptor.name, self.primary_key_value(owner), self.primary_key_value(target)))
        super().add_associated_object(descriptor, owner, target)

    def saves(self, entity_type=None):
        return [e for e in self.events if e[0] == 'save' and (entity_type is None or e[1] == entity_type)]

    def links(self):
        return [e for e in self.events if e[0] == 'link']


@pytest.fixture
def data_path():
    return DATA_PATH


@pytest.fixture
def backend_group():
    """All test models bound to one in-memory SQLite database holding the test schema."""
    group = connect_models(ALL_MODELS, SQLiteConnectionConfig(database=":memory:"), SQLiteBackend)
    group.get_backend().executescript(SQLITE_SCHEMA)
    yield group
    group.disconnect()


@pytest.fixture
def backend(backend_group):
    return backend_group.get_backend()


@pytest.fixture
def adapter():
    return RecordingSQLiteAdapter()


@pytest.fixture
def loader(backend, adapter, data_path):
    registry = ModelAdapterRegistry()
    registry.register(adapter)
    return FixtureLoader(FixtureConfig(fixture_path=data_path, verbose=3), models=ALL_MODELS, adapters=registry)
