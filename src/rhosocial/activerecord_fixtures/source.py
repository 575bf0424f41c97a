# src/rhosocial/activerecord_fixtures/source.py
"""Fixture sources: where raw fixture definitions come from.

A source is any object with ``load(model) -> Mapping[name, attributes]``.
YamlFixtureSource reads ``<fixture_path>/<table_name>.yml``::

    # authors.yml
    jane:
      id: 1
      name: Jane
    john:
      name: John
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .errors import FixtureSourceError
from .registry import entity_name

logger = logging.getLogger(__name__)

FIXTURE_EXTENSIONS = ('.yml', '.yaml')


class YamlFixtureSource:
    """Reads fixture definitions from YAML files named after model tables."""

    def __init__(self, fixture_path: Union[str, Path]):
        self.fixture_path = Path(fixture_path)

    def path_for(self, model) -> Optional[Path]:
        for ext in FIXTURE_EXTENSIONS:
            candidate = self.fixture_path / f"{model.table_name()}{ext}"
            if candidate.exists():
                return candidate
        return None

    def load(self, model) -> Dict[str, Dict[str, Any]]:
        """Return fixture name -> attribute mapping, in file order."""
        path = self.path_for(model)
        if path is None:
            raise FixtureSourceError(
                f"No fixture file for {model.__name__} "
                f"({model.table_name()}.yml) in {self.fixture_path}"
            )
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise FixtureSourceError(f"Failed to load fixture file {path}: {e}") from e

        if not isinstance(data, Mapping):
            raise FixtureSourceError(f"Fixture file {path} must contain a mapping of fixture names")

        logger.debug(f"Loaded {len(data)} fixtures from {path}")
        return normalize_fixtures(data, str(path))


class DictFixtureSource:
    """In-memory source: ``{entity_name: {fixture_name: attributes}}``."""

    def __init__(self, fixtures: Mapping[str, Mapping[str, Mapping[str, Any]]]):
        self._fixtures = fixtures

    def load(self, model) -> Dict[str, Dict[str, Any]]:
        for key in (entity_name(model), model.table_name()):
            if key in self._fixtures:
                return normalize_fixtures(self._fixtures[key], key)
        raise FixtureSourceError(f"No fixtures defined for {model.__name__}")


def normalize_fixtures(data: Mapping, origin: str) -> Dict[str, Dict[str, Any]]:
    """Stringify fixture names and attribute keys, keeping order."""
    fixtures = {}
    for name, attributes in data.items():
        if attributes is None:
            attributes = {}
        if not isinstance(attributes, Mapping):
            raise FixtureSourceError(f"Fixture {name!r} in {origin} must be a mapping of attributes")
        fixtures[str(name)] = {str(k): v for k, v in attributes.items()}
    return fixtures
