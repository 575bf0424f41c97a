# src/rhosocial/activerecord_fixtures/loader.py
"""Public entry point: ``FixtureLoader.load``."""

import logging
from typing import Iterable, Optional, Type, Union

from rhosocial.activerecord.model import ActiveRecord

from .adapters import ModelAdapterRegistry
from .config import FixtureConfig
from .registry import ModelRegistry, entity_name
from .reference import FixtureReference, split_name
from .resolver import DependencyResolver
from .source import YamlFixtureSource
from .store import AttributeStore

logger = logging.getLogger(__name__)

Token = Union[str, FixtureReference, Type[ActiveRecord]]


class FixtureLoader:
    """Loads fixtures (and everything they depend on) into the database.

    Each loader is an independent context: it owns its attribute store, so
    two loaders never share which fixture files were read. Not thread safe;
    calls must be serialized by the caller.

    Example::

        loader = FixtureLoader(FixtureConfig(fixture_path="tests/fixtures"), models=[Author, Book])
        moby = loader.load("book__moby")
        jane, categories = loader.load("author__jane", "category")
    """

    def __init__(self, config: Optional[FixtureConfig] = None, models: Iterable[Type[ActiveRecord]] = (),
                 source=None, adapters: Optional[ModelAdapterRegistry] = None):
        self.config = config or FixtureConfig()
        self.models = ModelRegistry(models)
        self.adapters = adapters or ModelAdapterRegistry()
        if source is None and self.config.fixture_path is not None:
            source = YamlFixtureSource(self.config.fixture_path)
        self.store = AttributeStore(source, self.models.get)
        self.resolver = DependencyResolver(self.store, self.models, self.adapters, self.config)

    def register(self, *models: Type[ActiveRecord]) -> None:
        self.models.register(*models)

    def _ensure_source(self) -> None:
        if self.store.source is None:
            self.store.source = YamlFixtureSource(self.config.require_fixture_path())

    def _entity_type(self, name: Union[str, Type[ActiveRecord]]) -> str:
        if isinstance(name, type) and issubclass(name, ActiveRecord):
            self.models.register(name)
            return entity_name(name)
        model = self.models.find(name)
        if model is None:
            model = self.models.get(singularize(name))
        return entity_name(model)

    def _reference(self, token: Union[str, FixtureReference]) -> FixtureReference:
        entity_type, fixture_name = split_name(token)
        return FixtureReference(self._entity_type(entity_type), fixture_name)

    def use(self, token: Union[str, FixtureReference]):
        """Resolve one fixture with a fresh loading stack and fixup queue."""
        self._ensure_source()
        return self.resolver.resolve(self._reference(token), [], {})

    def load(self, *tokens: Token):
        """Load fixtures into the database.

        A ``"<type>__<name>"`` token (or FixtureReference) loads one fixture and
        yields its record; a ``"<type>"`` token (or model class) loads every
        fixture of that type and yields the list of records in file order.

        Returns the single result when one token is given, a list of results
        otherwise (an empty list for no tokens).
        """
        results = []
        for token in tokens:
            self._ensure_source()
            if isinstance(token, type):
                entity_type, fixture_name = self._entity_type(token), None
            else:
                entity_type, fixture_name = split_name(token)
            if fixture_name is not None:
                results.append(self.use(token))
                continue
            entity_type = self._entity_type(entity_type)
            if self.store.ensure_loaded(entity_type):
                if self.config.verbose > 0:
                    logger.info(f"loading {self.models.get(entity_type).table_name()}.yml")
            results.append([
                self.resolver.resolve(FixtureReference(entity_type, name), [], {})
                for name in self.store.fixture_names(entity_type)
            ])
        return results[0] if len(tokens) == 1 else results

    def get(self, token: Union[str, FixtureReference]) -> ActiveRecord:
        """The persisted record of a fixture that was loaded before."""
        self._ensure_source()
        return self.resolver.find_persisted(self._reference(token))

    def reset(self) -> None:
        """Forget all fixture attributes read so far."""
        self.store.clear()


def singularize(name: str) -> str:
    """Naive English singular of a plural entity name (``categories`` -> ``category``)."""
    if name.endswith('ies'):
        return name[:-3] + 'y'
    if name.endswith(('ses', 'xes', 'ches', 'shes')):
        return name[:-2]
    if name.endswith('s') and not name.endswith('ss'):
        return name[:-1]
    return name
