# src/rhosocial/activerecord_fixtures/impl/mysql/dialect.py
"""MySQL dialect for the ActiveRecord expression system.

The generic dialect mixins render every statement the fixture loader and
the ActiveRecord models issue. MySQL differs from their defaults in the
parameter placeholder (``%s`` for mysql-connector-python), identifier quoting
(backticks) and the lack of RETURNING, which the mixin defaults already
report as unsupported.
"""

from typing import Optional, Tuple

from rhosocial.activerecord.backend.dialect.base import SQLDialectBase
from rhosocial.activerecord.backend.dialect.protocols import (
    CTESupport,
    FilterClauseSupport,
    WindowFunctionSupport,
    JSONSupport,
    ReturningSupport,
    AdvancedGroupingSupport,
    LockingSupport,
    UpsertSupport,
    JoinSupport,
    SetOperationSupport,
    ViewSupport,
    TableSupport,
    ConstraintSupport,
    IndexSupport,
    TransactionControlSupport,
)
from rhosocial.activerecord.backend.dialect.mixins import (
    CollationMixin,
    CTEMixin,
    FilterClauseMixin,
    WindowFunctionMixin,
    JSONMixin,
    ReturningMixin,
    AdvancedGroupingMixin,
    ArrayMixin,
    ExplainMixin,
    GraphMixin,
    LockingMixin,
    MergeMixin,
    OrderedSetAggregationMixin,
    QualifyClauseMixin,
    TemporalTableMixin,
    UpsertMixin,
    LateralJoinMixin,
    JoinMixin,
    TableMixin,
    ConstraintMixin,
    SchemaMixin,
    IndexMixin,
    SequenceMixin,
    GeneratedColumnMixin,
    PartitionMixin,
    PredicateMixin,
    ExpressionMixin,
    DQLMixin,
    IdentifierMixin,
    DateTimeMixin,
    DDLColumnMixin,
    DMLMixin,
    TransactionControlMixin,
    ViewMixin,
    TriggerMixin,
    SetOperationMixin,
)


class MySQLIdentifierMixin:
    """MySQL-specific placeholders and identifier quoting."""

    def get_parameter_placeholder(self, position: int = 0) -> str:
        """mysql-connector-python uses the 'format' paramstyle."""
        return "%s"

    def format_identifier(self, identifier: str) -> str:
        """Quote an identifier with backticks, doubling embedded backticks."""
        escaped = identifier.replace('`', '``')
        return f"`{escaped}`"


class MySQLDialect(
    # Overrides the placeholder and quoting defaults of SQLDialectBase
    MySQLIdentifierMixin,
    SQLDialectBase,
    CTEMixin,
    FilterClauseMixin,
    WindowFunctionMixin,
    JSONMixin,
    ReturningMixin,
    AdvancedGroupingMixin,
    ArrayMixin,
    ExplainMixin,
    GraphMixin,
    LockingMixin,
    MergeMixin,
    OrderedSetAggregationMixin,
    QualifyClauseMixin,
    TemporalTableMixin,
    UpsertMixin,
    LateralJoinMixin,
    JoinMixin,
    TableMixin,
    ConstraintMixin,
    SchemaMixin,
    IndexMixin,
    SequenceMixin,
    GeneratedColumnMixin,
    PartitionMixin,
    PredicateMixin,
    ExpressionMixin,
    DQLMixin,
    CollationMixin,
    IdentifierMixin,
    DateTimeMixin,
    DDLColumnMixin,
    DMLMixin,
    TransactionControlMixin,
    ViewMixin,
    TriggerMixin,
    SetOperationMixin,
    # Protocols for type checking
    CTESupport,
    FilterClauseSupport,
    WindowFunctionSupport,
    JSONSupport,
    ReturningSupport,
    AdvancedGroupingSupport,
    LockingSupport,
    UpsertSupport,
    JoinSupport,
    SetOperationSupport,
    ViewSupport,
    TableSupport,
    ConstraintSupport,
    IndexSupport,
    TransactionControlSupport,
):
    """MySQL dialect; features are enabled by server version once known."""

    def __init__(self, version: Optional[Tuple[int, int, int]] = None):
        super().__init__()
        if version is not None:
            self.version = version

    def supports_basic_cte(self) -> bool:
        """Common table expressions exist since MySQL 8.0."""
        return self.version >= (8, 0, 0)

    def supports_recursive_cte(self) -> bool:
        return self.version >= (8, 0, 0)

    def supports_window_functions(self) -> bool:
        return self.version >= (8, 0, 0)

    def supports_json_type(self) -> bool:
        return self.version >= (5, 7, 8)

    def supports_for_update_skip_locked(self) -> bool:
        return self.version >= (8, 0, 1)
