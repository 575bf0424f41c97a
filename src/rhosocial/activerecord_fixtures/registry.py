# src/rhosocial/activerecord_fixtures/registry.py
"""Entity type names and the registry that maps them to ActiveRecord models.

A fixture token names an entity type (``book``) or a table (``books``). The
entity name of a model is its ``__fixture_name__`` when set, otherwise the
snake_case class name.
"""

import re
from typing import Dict, Iterator, List, Optional, Type

from rhosocial.activerecord.model import ActiveRecord

from .errors import UnknownFixture


def underscore(name: str) -> str:
    """Convert a CamelCase class name to snake_case (``BookReview`` -> ``book_review``)."""
    name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
    name = re.sub(r'([a-z\d])([A-Z])', r'\1_\2', name)
    return name.lower()


def entity_name(model: Type[ActiveRecord]) -> str:
    return getattr(model, '__fixture_name__', None) or underscore(model.__name__)


def defined_models() -> List[Type[ActiveRecord]]:
    """All ActiveRecord subclasses defined so far that map a table."""
    found = []
    pending = list(ActiveRecord.__subclasses__())
    while pending:
        model = pending.pop(0)
        pending.extend(model.__subclasses__())
        if getattr(model, '__table_name__', None):
            if model not in found:
                found.append(model)
    return found


class ModelRegistry:
    """Entity type name -> model class, for one loader.

    Models can be looked up by entity name (``book``) or table name
    (``books``). Models that were never registered are still found among all
    defined ActiveRecord subclasses and registered on first use.
    """

    def __init__(self, models=()):
        self._models: Dict[str, Type[ActiveRecord]] = {}
        self.register(*models)

    def register(self, *models: Type[ActiveRecord]) -> None:
        for model in models:
            self._models[entity_name(model)] = model

    def find(self, name: str) -> Optional[Type[ActiveRecord]]:
        model = self._models.get(name)
        if model is not None:
            return model
        for candidate in self._models.values():
            if candidate.table_name() == name:
                return candidate
        for candidate in defined_models():
            if entity_name(candidate) == name or candidate.table_name() == name:
                self.register(candidate)
                return candidate
        return None

    def get(self, name: str) -> Type[ActiveRecord]:
        model = self.find(name)
        if model is None:
            raise UnknownFixture(f"Unknown entity type {name!r}")
        return model

    def __contains__(self, name: str) -> bool:
        return name in self._models

    def __iter__(self) -> Iterator[Type[ActiveRecord]]:
        return iter(list(self._models.values()))
