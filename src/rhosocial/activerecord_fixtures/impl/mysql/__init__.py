# src/rhosocial/activerecord_fixtures/impl/mysql/__init__.py
"""
MySQL backend for loading fixtures.

- MySQLBackend: synchronous ActiveRecord storage backend on mysql-connector-python
- MySQLConnectionConfig: connection configuration with MySQL-specific options
- MySQLDialect: backtick quoting and ``%s`` placeholders
- Type adapters for the values YAML fixtures produce
"""

from .adapters import MySQLBooleanAdapter, MySQLJSONAdapter, MySQLUUIDAdapter
from .backend import MySQLBackend
from .config import MySQLConnectionConfig
from .dialect import MySQLDialect


__all__ = [
    # Backend
    'MySQLBackend',

    # Configuration
    'MySQLConnectionConfig',

    # Dialect
    'MySQLDialect',

    # Adapters
    'MySQLBooleanAdapter',
    'MySQLJSONAdapter',
    'MySQLUUIDAdapter',
]
