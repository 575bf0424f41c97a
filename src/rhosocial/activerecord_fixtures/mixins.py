# src/rhosocial/activerecord_fixtures/mixins.py
"""Model mixins used by fixture models."""

from typing import Any, Dict


class AssignedKeyMixin:
    """Keep a primary key assigned before the first save.

    ActiveRecord leaves auto-generated primary keys out of INSERT statements.
    Fixtures may pin the key (``id: 7``), and that value has to reach the
    database so that other fixtures can refer to it.

    Usage:
        class Book(AssignedKeyMixin, ActiveRecord):
            ...
    """

    def prepare_save_data(self, data: Dict[str, Any], is_new: bool) -> Dict[str, Any]:
        # Runs once per class in the MRO, so it must stay idempotent
        pk = self.primary_key()
        if is_new and pk not in data and getattr(self, pk, None) is not None:
            data[pk] = getattr(self, pk)
        return data
