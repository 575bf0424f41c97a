# src/rhosocial/activerecord_fixtures/reference.py
"""Fixture references and load tokens."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

SEPARATOR = "__"


def split_name(token: Union[str, 'FixtureReference']) -> Tuple[str, Optional[str]]:
    """Split a load token into (entity_type, fixture_name).

    ``"book__moby"`` gives ``("book", "moby")``; a bare entity type such as
    ``"book"`` gives ``("book", None)``. Only the first separator splits, so
    fixture names may themselves contain ``__``.
    """
    if isinstance(token, FixtureReference):
        return token.entity_type, token.fixture_name
    parts = str(token).split(SEPARATOR, 1)
    if len(parts) == 1:
        return parts[0], None
    return parts[0], parts[1]


@dataclass(frozen=True)
class FixtureReference:
    """Identifies one fixture as (entity_type, fixture_name)."""

    entity_type: str
    fixture_name: str

    def __post_init__(self):
        if not self.entity_type:
            raise ValueError("entity_type must not be empty")
        if SEPARATOR in self.entity_type:
            raise ValueError(f"entity_type {self.entity_type!r} must not contain {SEPARATOR!r}")
        if self.fixture_name is None or self.fixture_name == "":
            raise ValueError(f"fixture_name missing for entity type {self.entity_type!r}")

    @classmethod
    def parse(cls, token: Union[str, 'FixtureReference']) -> 'FixtureReference':
        if isinstance(token, FixtureReference):
            return token
        entity_type, fixture_name = split_name(token)
        if fixture_name is None:
            raise ValueError(f"{token!r} names an entity type, not a single fixture")
        return cls(entity_type, fixture_name)

    def __str__(self) -> str:
        return f"{self.entity_type}{SEPARATOR}{self.fixture_name}"
