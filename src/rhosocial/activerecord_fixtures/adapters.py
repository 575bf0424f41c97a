# src/rhosocial/activerecord_fixtures/adapters.py
"""Model adapters: the capability set the resolver uses to talk to a backend.

The resolver never touches SQL or driver errors directly. Everything goes
through a ModelAdapter chosen per model by the backend the model is bound to:

- SQLiteModelAdapter for models bound to the ActiveRecord SQLiteBackend
- MySQLModelAdapter for models bound to this package's MySQLBackend

``ModelAdapterRegistry.adapter_for`` resolves and caches that choice.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

from rhosocial.activerecord.backend.base import StorageBackend
from rhosocial.activerecord.backend.impl.sqlite import SQLiteBackend
from rhosocial.activerecord.backend.options import ExecutionOptions
from rhosocial.activerecord.backend.schema import StatementType
from rhosocial.activerecord.model import ActiveRecord
from rhosocial.activerecord.relation import BelongsTo, HasMany, HasOne, RelationDescriptor

from .associations import HasAndBelongsToMany, describe
from .errors import ConfigurationError, DatabaseError, RecordNotFound, UnsupportedBackend
from .impl.mysql import MySQLBackend


class ModelAdapter(ABC):
    """Backend capability interface used by the dependency resolver."""

    backend_type: str = ""
    backend_class: Type[StorageBackend] = StorageBackend

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.backend_type or 'base'}")

    def log(self, level: int, msg: str) -> None:
        self.logger.log(level, msg)

    def supports(self, backend: StorageBackend) -> bool:
        return isinstance(backend, self.backend_class)

    @abstractmethod
    def find_by_primary_key(self, model: Type[ActiveRecord], key_value: Any) -> Optional[ActiveRecord]:
        """Look a record up without side effects; None when absent or key is None."""
        ...

    def find_associated_record(self, model: Type[ActiveRecord], key_value: Any) -> ActiveRecord:
        """Like find_by_primary_key but the record must exist."""
        record = self.find_by_primary_key(model, key_value)
        if record is None:
            raise RecordNotFound(f"{model.__name__} with {model.primary_key()}={key_value!r} not found")
        return record

    def new_record(self, model: Type[ActiveRecord], columns: Dict[str, Any]) -> ActiveRecord:
        """An unsaved record holding the plain column values of a fixture."""
        unknown = [name for name in columns if name not in model.model_fields]
        if unknown:
            raise ConfigurationError(f"{model.__name__} has no column or association named {', '.join(unknown)}")
        return model(**columns)

    @abstractmethod
    def save(self, model: Type[ActiveRecord], record: ActiveRecord) -> ActiveRecord:
        """Persist record (insert when new, update of the changed columns otherwise)."""
        ...

    def association_descriptor(self, model: Type[ActiveRecord], attribute: str) -> Optional[RelationDescriptor]:
        """The relation declared for attribute, None for a plain column."""
        return model.get_relation(attribute)

    def association_target_type(self, model: Type[ActiveRecord], descriptor: RelationDescriptor) -> Type[ActiveRecord]:
        return descriptor.get_related_model(model)

    def primary_key_name(self, model: Type[ActiveRecord]) -> str:
        return model.primary_key()

    def primary_key_value(self, record: ActiveRecord) -> Any:
        return getattr(record, record.primary_key())

    def set_association(self, descriptor: RelationDescriptor, owner: ActiveRecord,
                        target: Optional[ActiveRecord]) -> None:
        """Point a belongs-to association of an unsaved or re-fetched owner at target."""
        self.set_association_key(descriptor, owner, None if target is None else self.primary_key_value(target))

    def set_association_key(self, descriptor: RelationDescriptor, owner: ActiveRecord, key_value: Any) -> None:
        """Set the foreign key column behind a belongs-to association."""
        if not isinstance(descriptor, BelongsTo):
            raise TypeError(f"{describe(descriptor)} is not a belongs-to association")
        setattr(owner, descriptor.foreign_key, key_value)

    @abstractmethod
    def add_associated_object(self, descriptor: RelationDescriptor, owner: ActiveRecord,
                              target: ActiveRecord) -> None:
        """Write the link between two persisted records. Repeating a pair is harmless."""
        ...


class SQLModelAdapter(ModelAdapter):
    """Adapter for ActiveRecord models bound to a SQL StorageBackend."""

    def find_by_primary_key(self, model, key_value):
        if key_value is None:
            return None
        return model.find_one(key_value)

    def save(self, model, record):
        record.save()
        return record

    def add_associated_object(self, descriptor, owner, target):
        if isinstance(descriptor, BelongsTo):
            self._update_columns(owner, {descriptor.foreign_key: self.primary_key_value(target)})
        elif isinstance(descriptor, HasAndBelongsToMany):
            self._insert_link(descriptor, owner, target)
        elif isinstance(descriptor, (HasMany, HasOne)):
            self._update_columns(target, {descriptor.foreign_key: self.primary_key_value(owner)})
        else:
            raise TypeError(f"Unsupported association {describe(descriptor)}")
        owner.clear_relation_cache(descriptor.name)

    def _execute(self, backend: StorageBackend, sql: str, params: tuple):
        return backend.execute(sql, params, options=ExecutionOptions(stmt_type=StatementType.DML))

    def _update_columns(self, record: ActiveRecord, data: Dict[str, Any]) -> None:
        """Update only the given columns so concurrent fixups on the row are kept."""
        backend = record.backend()
        dialect = backend.dialect
        quote = dialect.format_identifier
        ph = dialect.get_parameter_placeholder()
        assignments = ", ".join(f"{quote(name)} = {ph}" for name in data)
        sql = (f"UPDATE {quote(record.table_name())} SET {assignments} "
               f"WHERE {quote(record.primary_key())} = {ph}")
        self._execute(backend, sql, tuple(data.values()) + (self.primary_key_value(record),))
        for name, value in data.items():
            setattr(record, name, value)
        # The row already holds these values
        record.reset_tracking()

    def _link_source_clause(self) -> str:
        """FROM clause for the constant row selected by the link insert."""
        return ""

    def _insert_link(self, descriptor: HasAndBelongsToMany, owner: ActiveRecord, target: ActiveRecord) -> None:
        backend = owner.backend()
        dialect = backend.dialect
        quote = dialect.format_identifier
        ph = dialect.get_parameter_placeholder()
        table = quote(descriptor.join_table)
        owner_key = quote(descriptor.foreign_key)
        target_key = quote(descriptor.association_foreign_key)
        sql = (
            f"INSERT INTO {table} ({owner_key}, {target_key}) "
            f"SELECT {ph}, {ph}{self._link_source_clause()} "
            f"WHERE NOT EXISTS (SELECT 1 FROM {table} WHERE {owner_key} = {ph} AND {target_key} = {ph})"
        )
        owner_pk, target_pk = self.primary_key_value(owner), self.primary_key_value(target)
        self._execute(backend, sql, (owner_pk, target_pk, owner_pk, target_pk))


class SQLiteModelAdapter(SQLModelAdapter):
    backend_type = "sqlite"
    backend_class = SQLiteBackend


class MySQLModelAdapter(SQLModelAdapter):
    backend_type = "mysql"
    backend_class = MySQLBackend

    def _link_source_clause(self) -> str:
        # MySQL only accepts WHERE on a table-less SELECT with FROM DUAL
        return " FROM DUAL"


DEFAULT_ADAPTERS = (SQLiteModelAdapter, MySQLModelAdapter)


class ModelAdapterRegistry:
    """Selects the adapter for a model from the backend it is bound to, once per model.

    Adapters registered later take precedence over earlier ones.
    """

    def __init__(self, adapter_classes=DEFAULT_ADAPTERS):
        self._adapters: List[ModelAdapter] = []
        self._by_model: Dict[Type[ActiveRecord], ModelAdapter] = {}
        for adapter_class in adapter_classes:
            self.register(adapter_class())

    def register(self, adapter: ModelAdapter) -> None:
        self._adapters.insert(0, adapter)
        self._by_model.clear()

    def adapter_for(self, model: Type[ActiveRecord]) -> ModelAdapter:
        adapter = self._by_model.get(model)
        if adapter is not None:
            return adapter
        try:
            backend = model.backend()
        except DatabaseError as e:
            raise UnsupportedBackend(f"No backend configured for {model.__name__}") from e
        for candidate in self._adapters:
            if candidate.supports(backend):
                self._by_model[model] = candidate
                return candidate
        raise UnsupportedBackend(f"No model adapter for {type(backend).__name__} used by {model.__name__}")
