# src/rhosocial/activerecord_fixtures/__init__.py
"""
Dependency-aware test fixture loading for rhosocial ActiveRecord models.

This package loads named YAML fixtures into a database, resolving the
associations between them:
- belongs-to dependencies are saved before the record that references them
- has-one, has-many and join-table links are written after the owning record
- self references and circular references are handled with deferred fixups
- every fixture is saved at most once; records already in the database are reused

Architecture:
- FixtureLoader: public entry point (``load("book__moby", "category")``)
- DependencyResolver: recursive resolution with cycle detection
- AttributeStore: raw fixture attributes, read lazily per entity type
- ModelAdapter: backend capability interface (SQLite and MySQL variants)
- impl.mysql: MySQL storage backend for ActiveRecord models
"""

__version__ = "0.1.0"

from .adapters import (
    ModelAdapter,
    ModelAdapterRegistry,
    MySQLModelAdapter,
    SQLiteModelAdapter,
)
from .associations import (
    AssociationKind,
    HasAndBelongsToMany,
    JoinTableLoader,
    association_kind,
    classify,
    fixture_names,
)
from .config import FixtureConfig, load_fixture_config
from .connection import connect_models
from .errors import (
    ConfigurationError,
    DatabaseError,
    FixtureError,
    FixtureSourceError,
    IntegrityError,
    RecordNotFound,
    UnknownFixture,
    UnsupportedBackend,
)
from .impl.mysql import MySQLBackend, MySQLConnectionConfig, MySQLDialect
from .loader import FixtureLoader
from .mixins import AssignedKeyMixin
from .reference import FixtureReference
from .registry import ModelRegistry, defined_models, entity_name
from .resolver import DependencyResolver, Fixup, FixupKind
from .source import DictFixtureSource, YamlFixtureSource
from .store import AttributeStore


__all__ = [
    # Loading
    'FixtureLoader',
    'DependencyResolver',
    'Fixup',
    'FixupKind',
    'AttributeStore',
    'FixtureReference',

    # Sources
    'YamlFixtureSource',
    'DictFixtureSource',

    # Models and associations
    'ModelRegistry',
    'defined_models',
    'entity_name',
    'AssignedKeyMixin',
    'AssociationKind',
    'HasAndBelongsToMany',
    'JoinTableLoader',
    'association_kind',
    'classify',
    'fixture_names',

    # Adapters and backends
    'ModelAdapter',
    'ModelAdapterRegistry',
    'SQLiteModelAdapter',
    'MySQLModelAdapter',
    'MySQLBackend',
    'MySQLConnectionConfig',
    'MySQLDialect',
    'connect_models',

    # Configuration
    'FixtureConfig',
    'load_fixture_config',

    # Errors
    'FixtureError',
    'ConfigurationError',
    'UnknownFixture',
    'FixtureSourceError',
    'UnsupportedBackend',
    'DatabaseError',
    'IntegrityError',
    'RecordNotFound',
]
