# src/rhosocial/activerecord_fixtures/resolver.py
"""Dependency resolution and insertion of fixtures.

``DependencyResolver.resolve`` turns a FixtureReference into a persisted
record. Belongs-to dependencies are resolved and saved before the record
itself; has-one, has-many and join-table associations are linked after it.

Two pieces of state are threaded through one top-level resolution:

- the loading stack: references currently being resolved (the ancestors of
  the current call). A dependency found on the stack is a cycle back edge.
- pending fixups: repair actions queued per back-edge target, applied once
  that target has been saved.

Because a back edge is never followed, recursion always terminates. A record
whose belongs-to points back up the stack is first saved with that foreign
key unset and repaired once the target is saved. That first save fails with
IntegrityError when the foreign key column is NOT NULL, so a cycle with one
NOT NULL side loads only when it is entered from that side.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from rhosocial.activerecord.model import ActiveRecord
from rhosocial.activerecord.relation import RelationDescriptor

from .adapters import ModelAdapter, ModelAdapterRegistry
from .associations import AssociationKind, association_kind, classify, fixture_names, macro
from .config import FixtureConfig
from .registry import ModelRegistry, entity_name
from .reference import FixtureReference
from .store import AttributeStore

logger = logging.getLogger(__name__)


class FixupKind(Enum):
    SET_ASSOCIATION = "set_association"
    ADD_LINK = "add_link"


@dataclass(frozen=True)
class Fixup:
    """A deferred repair of ``owner`` to run once ``target`` is saved."""

    target: FixtureReference
    kind: FixupKind
    owner: FixtureReference
    descriptor: RelationDescriptor


LoadingStack = List[FixtureReference]
PendingFixups = Dict[FixtureReference, List[Fixup]]


class DependencyResolver:

    def __init__(self, store: AttributeStore, models: ModelRegistry,
                 adapters: ModelAdapterRegistry, config: Optional[FixtureConfig] = None):
        self.store = store
        self.models = models
        self.adapters = adapters
        self.config = config or FixtureConfig()

    def trace(self, verbosity: int, depth: int, msg: str) -> None:
        if self.config.verbose >= verbosity:
            logger.info(f"{' ' * depth}{msg}")

    def _target_reference(self, adapter: ModelAdapter, model, descriptor: RelationDescriptor,
                          fixture_name: str) -> FixtureReference:
        target_model = adapter.association_target_type(model, descriptor)
        self.models.register(target_model)
        return FixtureReference(entity_name(target_model), fixture_name)

    def resolve(self, ref: FixtureReference, loading: Optional[LoadingStack] = None,
                pending: Optional[PendingFixups] = None) -> ActiveRecord:
        """Persist the fixture ``ref`` and everything it depends on; return its record.

        A fixture whose stored primary key already exists in the backend is
        returned as is, without further side effects.
        """
        if loading is None:
            loading = []
        if pending is None:
            pending = {}
        depth = len(loading)
        self.trace(1, depth, f"using {ref}")
        self.trace(2, depth, f"load stack:{[str(r) for r in loading]}")
        loading.append(ref)

        model = self.models.get(ref.entity_type)
        if self.store.ensure_loaded(ref.entity_type):
            self.trace(1, depth, f"loading {model.table_name()}.yml")
        adapter = self.adapters.adapter_for(model)
        attributes = self.store.get(ref)
        primary_key = adapter.primary_key_name(model)

        existing = adapter.find_by_primary_key(model, attributes.get(primary_key))
        if existing is not None:
            self.trace(3, depth, f"using {ref}: already in database")
            loading.pop()
            return existing

        columns = {}
        single_associations = []
        many_associations = []
        for attr, value in attributes.items():
            descriptor = adapter.association_descriptor(model, attr)
            if descriptor is None:
                self.trace(3, depth, f"{ref}.{attr} = {value!r}")
                columns[attr] = value
            elif association_kind(descriptor) is AssociationKind.MULTI:
                many_associations.append((attr, descriptor, fixture_names(descriptor, value)))
            else:
                single_associations.append((attr, descriptor, fixture_names(descriptor, value)))

        record = adapter.new_record(model, columns)
        self_links = []
        for attr, descriptor, names in single_associations:
            if not names:
                adapter.set_association(descriptor, record, None)
                continue
            dep = self._target_reference(adapter, model, descriptor, names[0])
            if classify(descriptor, ref, dep) is AssociationKind.SELF:
                self.trace(2, depth, f"{ref}.{attr}: {macro(descriptor)} self-referential")
                key = attributes.get(primary_key)
                adapter.set_association_key(descriptor, record, key)
                if key is None:
                    self_links.append(descriptor)
            elif dep in loading:
                self.trace(2, depth, f"{ref}.{attr}: {macro(descriptor)} cycle detected:{dep}")
                pending.setdefault(dep, []).append(Fixup(dep, FixupKind.SET_ASSOCIATION, ref, descriptor))
                adapter.set_association(descriptor, record, None)
            else:
                self.trace(2, depth, f"{ref}.{attr}: {macro(descriptor)}:{dep}")
                adapter.set_association(descriptor, record, self.resolve(dep, loading, pending))

        self.trace(2, depth, f"saving {ref}")
        adapter.save(model, record)
        # The key may have been generated by the database
        self.store.set_key_if_absent(ref, primary_key, adapter.primary_key_value(record))
        for descriptor in self_links:
            adapter.add_associated_object(descriptor, record, record)

        loading.pop()
        for fixup in pending.pop(ref, []):
            self._apply_fixup(fixup, record, depth)

        for attr, descriptor, names in many_associations:
            for name in names:
                dep = self._target_reference(adapter, model, descriptor, name)
                if dep == ref:
                    self.trace(2, depth, f"{ref}.{attr}: {macro(descriptor)} self-referential")
                    adapter.add_associated_object(descriptor, record, record)
                elif dep in loading:
                    self.trace(2, depth, f"{ref}.{attr}: {macro(descriptor)} cycle detected:{dep}")
                    pending.setdefault(dep, []).append(Fixup(dep, FixupKind.ADD_LINK, ref, descriptor))
                else:
                    self.trace(2, depth, f"{ref}.{attr}: {macro(descriptor)}:{dep}")
                    adapter.add_associated_object(descriptor, record, self.resolve(dep, loading, pending))
        return record

    def find_persisted(self, ref: FixtureReference) -> ActiveRecord:
        """The already persisted record of a fixture, re-read from the backend."""
        model = self.models.get(ref.entity_type)
        adapter = self.adapters.adapter_for(model)
        self.store.ensure_loaded(ref.entity_type)
        key = self.store.get(ref).get(adapter.primary_key_name(model))
        return adapter.find_associated_record(model, key)

    def _apply_fixup(self, fixup: Fixup, target: ActiveRecord, depth: int) -> None:
        self.trace(2, depth, f"{fixup.owner}.{fixup.descriptor.name}: applying {fixup.kind.value} for {fixup.target}")
        owner_model = self.models.get(fixup.owner.entity_type)
        adapter = self.adapters.adapter_for(owner_model)
        owner = self.find_persisted(fixup.owner)
        if fixup.kind is FixupKind.SET_ASSOCIATION:
            # Only the foreign key is dirty, so only it is written
            adapter.set_association(fixup.descriptor, owner, target)
            adapter.save(owner_model, owner)
        else:
            adapter.add_associated_object(fixup.descriptor, owner, target)
