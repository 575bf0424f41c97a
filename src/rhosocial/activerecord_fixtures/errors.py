# src/rhosocial/activerecord_fixtures/errors.py
"""Exception hierarchy for fixture loading.

Errors about fixtures themselves derive from FixtureError. Storage errors are
the ActiveRecord backend errors (DatabaseError and its subclasses such as
IntegrityError and RecordNotFound); backends translate driver errors into
them, so the resolver never needs to know which driver produced them.
"""

from rhosocial.activerecord.backend.errors import (
    DatabaseError,
    IntegrityError,
    RecordNotFound,
)


class FixtureError(Exception):
    """Base class for all fixture loading errors."""
    pass


class ConfigurationError(FixtureError):
    """Raised when the loader is used without a required setting (e.g. fixture_path)."""
    pass


class UnknownFixture(FixtureError, LookupError):
    """Raised when a fixture name or entity type cannot be found."""

    def __init__(self, message: str, reference=None):
        super().__init__(message)
        self.reference = reference


class FixtureSourceError(FixtureError):
    """Raised when fixture definitions for an entity type cannot be read or parsed."""
    pass


class UnsupportedBackend(FixtureError, TypeError):
    """Raised when no model adapter matches the backend a model is bound to."""
    pass


__all__ = [
    'FixtureError',
    'ConfigurationError',
    'UnknownFixture',
    'FixtureSourceError',
    'UnsupportedBackend',
    'DatabaseError',
    'IntegrityError',
    'RecordNotFound',
]
