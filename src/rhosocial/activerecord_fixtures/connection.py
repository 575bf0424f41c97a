# src/rhosocial/activerecord_fixtures/connection.py
"""Binding fixture models to one shared backend."""

import logging
from typing import Iterable, Type

from rhosocial.activerecord.backend.base import StorageBackend
from rhosocial.activerecord.backend.config import ConnectionConfig
from rhosocial.activerecord.connection import BackendGroup
from rhosocial.activerecord.model import ActiveRecord

logger = logging.getLogger(__name__)


def connect_models(models: Iterable[Type[ActiveRecord]], config: ConnectionConfig,
                   backend_class: Type[StorageBackend], name: str = "fixtures") -> BackendGroup:
    """Bind models to one backend built from config, connected and adapted to the server.

    Fixtures of different models reference each other, so they have to share
    one connection (one in-memory SQLite database, one MySQL session).
    ``group.disconnect()`` unbinds the models again.
    """
    group = BackendGroup(name=name, models=list(models), config=config, backend_class=backend_class)
    group.configure()
    backend = group.get_backend()
    backend.introspect_and_adapt()
    logger.debug(f"Bound {len(group.models)} models to {backend_class.__name__}")
    return group
