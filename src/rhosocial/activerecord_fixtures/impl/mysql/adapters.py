# src/rhosocial/activerecord_fixtures/impl/mysql/adapters.py
"""Type adapters for values read from YAML fixtures and written to MySQL.

YAML gives back plain Python values (nested mappings, sequences, booleans,
dates). mysql-connector-python cannot bind mappings or sequences, so those
are serialized to JSON text before they reach the driver.
"""

import json
import uuid
from typing import Any, Dict, List, Type, Union, Optional

from rhosocial.activerecord.backend.type_adapter import SQLTypeAdapter


class MySQLJSONAdapter(SQLTypeAdapter):
    """
    Adapts Python dict/list to MySQL JSON and vice-versa.
    Dates nested in fixture data are written in ISO format.
    """
    @property
    def supported_types(self) -> Dict[Type, List[Any]]:
        return {dict: [str], list: [str]}

    def to_database(self, value: Union[dict, list], target_type: Type, options: Optional[Dict[str, Any]] = None) -> Any:
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False, default=str)

    def from_database(self, value: Any, target_type: Type, options: Optional[Dict[str, Any]] = None) -> Union[dict, list]:
        if value is None:
            return None
        if isinstance(value, (dict, list)):
            return value
        if isinstance(value, (bytes, bytearray)):
            value = value.decode('utf-8')
        return json.loads(value)


class MySQLUUIDAdapter(SQLTypeAdapter):
    """
    Adapts Python UUID to MySQL CHAR(36) and vice-versa.
    """
    @property
    def supported_types(self) -> Dict[Type, List[Any]]:
        return {uuid.UUID: [str]}

    def to_database(self, value: uuid.UUID, target_type: Type, options: Optional[Dict[str, Any]] = None) -> Any:
        if value is None:
            return None
        return str(value)

    def from_database(self, value: Any, target_type: Type, options: Optional[Dict[str, Any]] = None) -> uuid.UUID:
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))


class MySQLBooleanAdapter(SQLTypeAdapter):
    """
    Adapts Python bool to MySQL TINYINT(1) and vice-versa.
    """
    @property
    def supported_types(self) -> Dict[Type, List[Any]]:
        return {bool: [int]}

    def to_database(self, value: bool, target_type: Type, options: Optional[Dict[str, Any]] = None) -> Any:
        if value is None:
            return None
        return 1 if value else 0

    def from_database(self, value: Any, target_type: Type, options: Optional[Dict[str, Any]] = None) -> bool:
        if value is None:
            return None
        return bool(value)
