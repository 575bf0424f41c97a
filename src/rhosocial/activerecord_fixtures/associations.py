# src/rhosocial/activerecord_fixtures/associations.py
"""Association handling on top of ActiveRecord relation descriptors.

Fixture models declare their associations with the ActiveRecord relation
descriptors, plus HasAndBelongsToMany for join tables::

    class Book(ActiveRecord):
        __table_name__ = "books"
        author_id: Optional[int] = None

        author: ClassVar[BelongsTo['Author']] = BelongsTo(foreign_key='author_id', inverse_of='books')
        chapters: ClassVar[HasMany['Chapter']] = HasMany(foreign_key='book_id', inverse_of='book')
        tags: ClassVar[HasAndBelongsToMany['Tag']] = HasAndBelongsToMany(
            foreign_key='book_id', association_foreign_key='tag_id', join_table='books_tags')

For fixture resolution only the kind of a descriptor matters:

- SINGLE: the foreign key lives on the owning row and must be set before
  the owner is first saved (BelongsTo)
- SELF: a SINGLE association whose target is the owning fixture itself
- MULTI: links are written after the owner is saved (HasOne, HasMany,
  HasAndBelongsToMany)
"""

import logging
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from rhosocial.activerecord.relation import BelongsTo, CacheConfig, HasMany, HasOne, RelationDescriptor
from rhosocial.activerecord.relation.interfaces import IRelationLoader

from .errors import ConfigurationError

T = TypeVar('T')


class AssociationKind(Enum):
    SINGLE = "single"
    SELF = "self"
    MULTI = "multi"


class JoinTableLoader(IRelationLoader):
    """Loads the targets of a HasAndBelongsToMany association."""

    def __init__(self, descriptor: 'HasAndBelongsToMany'):
        self.descriptor = descriptor

    def load(self, instance) -> List[Any]:
        self.descriptor.log(logging.DEBUG, f"Loading join table relation `{self.descriptor.name}`")
        return self.descriptor.related_query(instance).all()

    def batch_load(self, instances, base_query) -> Dict[int, Any]:
        return {id(instance): self.load(instance) for instance in instances}


class HasAndBelongsToMany(RelationDescriptor[T], Generic[T]):
    """Many-to-many relationship through a join table holding both keys.

    ``foreign_key`` is the join table column referring to the owner,
    ``association_foreign_key`` the one referring to the target.

    Usage:
        class Book(ActiveRecord):
            tags: ClassVar[HasAndBelongsToMany['Tag']] = HasAndBelongsToMany(
                foreign_key='book_id', association_foreign_key='tag_id', join_table='books_tags')

        tags = book.tags()  # list of Tag records
    """

    def __init__(self, foreign_key: str, association_foreign_key: str, join_table: str,
                 inverse_of: Optional[str] = None, cache_config: Optional[CacheConfig] = None):
        self.association_foreign_key = association_foreign_key
        self.join_table = join_table
        super().__init__(foreign_key, inverse_of=inverse_of, loader=JoinTableLoader(self),
                         cache_config=cache_config)

    def related_query(self, instance):
        """Query for the records linked to ``instance`` through the join table."""
        related_model = self.get_related_model(type(instance))
        self._ensure_model_capability()
        quote = related_model.backend().dialect.format_identifier
        subquery = (f"SELECT {quote(self.association_foreign_key)} FROM {quote(self.join_table)} "
                    f"WHERE {quote(self.foreign_key)} = ?")
        return related_model.query().where(
            f"{quote(related_model.primary_key())} IN ({subquery})",
            (getattr(instance, instance.primary_key()),)
        )

    def _create_query_method(self):
        def query_method(instance):
            return self.related_query(instance)

        return query_method


def association_kind(descriptor: RelationDescriptor) -> AssociationKind:
    if isinstance(descriptor, BelongsTo):
        return AssociationKind.SINGLE
    return AssociationKind.MULTI


def classify(descriptor: RelationDescriptor, owner_ref, target_ref) -> AssociationKind:
    """Kind of an association for one concrete (owner, target) fixture pair."""
    kind = association_kind(descriptor)
    if kind is AssociationKind.SINGLE and owner_ref == target_ref:
        return AssociationKind.SELF
    return kind


def macro(descriptor: RelationDescriptor) -> str:
    if isinstance(descriptor, BelongsTo):
        return "belongs_to"
    if isinstance(descriptor, HasOne):
        return "has_one"
    if isinstance(descriptor, HasMany):
        return "has_many"
    if isinstance(descriptor, HasAndBelongsToMany):
        return "has_and_belongs_to_many"
    return type(descriptor).__name__


def describe(descriptor: RelationDescriptor) -> str:
    owner = getattr(descriptor, '_owner', None)
    return f"{type(descriptor).__name__}({owner.__name__ if owner else '?'}.{descriptor.name})"


def fixture_names(descriptor: RelationDescriptor, value) -> List[str]:
    """Target fixture names named by a raw attribute value."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        names = [str(v) for v in value]
    else:
        names = [str(value)]
    if len(names) > 1 and isinstance(descriptor, (BelongsTo, HasOne)):
        raise ConfigurationError(f"{describe(descriptor)} accepts a single fixture name, got {value!r}")
    return names
