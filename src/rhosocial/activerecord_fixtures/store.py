# src/rhosocial/activerecord_fixtures/store.py
"""Raw, not yet persisted fixture attributes keyed by entity type and name."""

import logging
from typing import Any, Callable, Dict, List

from .errors import ConfigurationError, UnknownFixture
from .reference import FixtureReference


class AttributeStore:
    """Holds the AttributeSet of every fixture of every loaded entity type.

    Entity types are populated lazily, once, from the fixture source; the
    store never evicts or reloads them. ``model_lookup`` maps an entity type
    name to its model class so the source can locate the model's fixtures.
    """

    def __init__(self, source, model_lookup: Callable[[str], Any]):
        self.source = source
        self._model_lookup = model_lookup
        self._fixtures: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._loaded: Dict[str, bool] = {}
        self.logger = logging.getLogger(__name__)

    def is_loaded(self, entity_type: str) -> bool:
        return self._loaded.get(entity_type, False)

    def ensure_loaded(self, entity_type: str) -> bool:
        """Load the entity type's fixtures unless already loaded. Returns True when it loaded."""
        if self.is_loaded(entity_type):
            return False
        if self.source is None:
            raise ConfigurationError("No fixture source configured")
        model = self._model_lookup(entity_type)
        for name, attributes in self.source.load(model).items():
            self.add(FixtureReference(entity_type, name), attributes)
        self._loaded[entity_type] = True
        return True

    def add(self, ref: FixtureReference, attributes: Dict[str, Any]) -> None:
        """Register one fixture's attributes (does not touch the database)."""
        self._fixtures.setdefault(ref.entity_type, {})[ref.fixture_name] = dict(attributes)

    def get(self, ref: FixtureReference) -> Dict[str, Any]:
        try:
            return self._fixtures[ref.entity_type][ref.fixture_name]
        except KeyError:
            raise UnknownFixture(f"Couldn't use fixture {str(ref)!r}", reference=ref) from None

    def fixture_names(self, entity_type: str) -> List[str]:
        return list(self._fixtures.get(entity_type, {}).keys())

    def set_key_if_absent(self, ref: FixtureReference, key_attr: str, value: Any) -> None:
        """Back-fill the primary key learned after saving, keeping an explicit one."""
        attributes = self.get(ref)
        if attributes.get(key_attr) is None:
            attributes[key_attr] = value

    def clear(self) -> None:
        self._fixtures.clear()
        self._loaded.clear()
