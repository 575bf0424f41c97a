# src/rhosocial/activerecord_fixtures/impl/mysql/backend.py
import logging
import uuid
from typing import Dict, Tuple, Type

import mysql.connector
from mysql.connector.errors import (
    DatabaseError as MySQLDatabaseError,
    Error as MySQLError,
    IntegrityError as MySQLIntegrityError,
    InterfaceError as MySQLInterfaceError,
    OperationalError as MySQLOperationalError,
    ProgrammingError,
)

from rhosocial.activerecord.backend.base import StorageBackend
from rhosocial.activerecord.backend.config import ConnectionConfig
from rhosocial.activerecord.backend.errors import (
    ConnectionError,
    DatabaseError,
    DeadlockError,
    IntegrityError,
    OperationalError,
    QueryError,
)
from rhosocial.activerecord.backend.transaction import TransactionManager
from rhosocial.activerecord.backend.type_adapter import SQLTypeAdapter
from .adapters import MySQLBooleanAdapter, MySQLJSONAdapter, MySQLUUIDAdapter
from .config import MySQLConnectionConfig
from .dialect import MySQLDialect

# Server errors reported as integrity violations even when the driver raises
# them as a plain DatabaseError (strict mode NOT NULL and missing default).
INTEGRITY_ERRNOS = (1048, 1062, 1364, 1452)
MISSING_OBJECT_ERRNOS = (1054, 1146)
DEADLOCK_ERRNOS = (1205, 1213)

# Keys of the config dictionary that mysql.connector.connect() does not accept
NON_DRIVER_KEYS = (
    'pool_size', 'pool_timeout', 'pool_name', 'pool_reset_session', 'pool_pre_ping',
    'pool_min_size', 'pool_max_size', 'pool_recycle', 'ssl_verify', 'ssl_ciphers',
    'version', 'log_queries', 'log_level', 'options', 'use_timezone', 'collation',
    'timezone', 'client_encoding', 'server_timezone', 'driver_type',
)


class MySQLBackend(StorageBackend):
    """MySQL storage backend used to load fixtures through mysql-connector-python"""

    def __init__(self, **kwargs):
        """Initialize MySQL backend"""
        self._ensure_mysql_config(kwargs)
        super().__init__(**kwargs)

        self._cursor = None
        self._connection_args = self._prepare_mysql_connection_args()
        self._dialect = MySQLDialect()
        self._register_mysql_adapters()

        if getattr(self.config, 'version', None):
            self._server_version_cache = tuple(self.config.version)
            self._dialect.version = self._server_version_cache

    def _ensure_mysql_config(self, kwargs):
        """Ensure kwargs contains a proper MySQLConnectionConfig"""
        connection_config = kwargs.get('connection_config')

        if connection_config is None:
            fields = MySQLConnectionConfig.__dataclass_fields__
            config_params = {key: kwargs.pop(key) for key in list(kwargs) if key in fields}
            kwargs['connection_config'] = MySQLConnectionConfig(**config_params)
        elif isinstance(connection_config, MySQLConnectionConfig):
            pass
        elif isinstance(connection_config, ConnectionConfig):
            kwargs['connection_config'] = MySQLConnectionConfig(
                host=getattr(connection_config, 'host', None) or 'localhost',
                port=getattr(connection_config, 'port', None) or 3306,
                database=connection_config.database,
                username=getattr(connection_config, 'username', None),
                password=getattr(connection_config, 'password', None),
                options=getattr(connection_config, 'options', {}),
            )
        else:
            raise ValueError(f"Unsupported connection_config type: {type(connection_config)}")

    def _prepare_mysql_connection_args(self) -> Dict:
        """Prepare MySQL connection arguments from MySQLConnectionConfig"""
        connection_args = self.config.to_dict()

        if 'username' in connection_args:
            connection_args['user'] = connection_args.pop('username')

        ssl_keys = ['ssl_ca', 'ssl_cert', 'ssl_key', 'ssl_verify_cert', 'ssl_verify_identity', 'ssl_mode']
        if any(getattr(self.config, key, None) for key in ['ssl_ca', 'ssl_cert', 'ssl_key']):
            ssl_config = {}
            if self.config.ssl_ca:
                ssl_config['ca'] = self.config.ssl_ca
            if self.config.ssl_cert:
                ssl_config['cert'] = self.config.ssl_cert
            if self.config.ssl_key:
                ssl_config['key'] = self.config.ssl_key
            if self.config.ssl_verify_cert:
                ssl_config['verify_cert'] = self.config.ssl_verify_cert
            if self.config.ssl_verify_identity:
                ssl_config['verify_identity'] = self.config.ssl_verify_identity
            connection_args['ssl'] = ssl_config
        for key in ssl_keys:
            connection_args.pop(key, None)

        if self.config.ssl_disabled is not None:
            connection_args['ssl_disabled'] = self.config.ssl_disabled

        for key in NON_DRIVER_KEYS:
            connection_args.pop(key, None)
        return connection_args

    def _register_mysql_adapters(self):
        """Register MySQL-specific type adapters to the adapter_registry."""
        mysql_adapters = [
            MySQLJSONAdapter(),
            MySQLUUIDAdapter(),
            MySQLBooleanAdapter(),
        ]
        for adapter in mysql_adapters:
            for py_type, db_types in adapter.supported_types.items():
                for db_type in db_types:
                    self.adapter_registry.register(adapter, py_type, db_type, allow_override=True)
        self.logger.debug("Registered MySQL-specific type adapters.")

    def get_default_adapter_suggestions(self) -> Dict[Type, Tuple[SQLTypeAdapter, Type]]:
        """Suggest adapters for the Python types YAML fixtures produce.

        Dates, times and decimals are bound natively by mysql-connector-python,
        so only booleans, UUIDs and nested mappings or sequences are adapted.
        """
        suggestions: Dict[Type, Tuple[SQLTypeAdapter, Type]] = {}

        type_mappings = [
            (bool, int),        # Python bool -> TINYINT(1)
            (uuid.UUID, str),   # Python UUID -> CHAR(36)
            (dict, str),        # Python dict -> JSON
            (list, str),        # Python list -> JSON
        ]

        for py_type, db_driver_type in type_mappings:
            adapter = self.adapter_registry.get_adapter(py_type, db_driver_type)
            if adapter:
                suggestions[py_type] = (adapter, db_driver_type)
            else:
                self.logger.debug(f"No adapter found for ({py_type.__name__}, {db_driver_type.__name__}).")

        return suggestions

    @property
    def dialect(self) -> MySQLDialect:
        """Get the MySQL dialect instance"""
        return self._dialect

    @property
    def transaction_manager(self) -> TransactionManager:
        """Get transaction manager"""
        if not self._transaction_manager:
            if not self._connection:
                self.log(logging.DEBUG, "Initializing connection for transaction manager")
                self.connect()
            self.log(logging.DEBUG, "Creating new transaction manager")
            self._transaction_manager = TransactionManager(self, self.logger)
        return self._transaction_manager

    def connect(self) -> None:
        """Establish connection to MySQL database"""
        try:
            self._connection = mysql.connector.connect(**self._connection_args)

            if self.config.timezone:
                cursor = self._connection.cursor()
                try:
                    cursor.execute("SET time_zone = %s", (self.config.timezone,))
                except MySQLError as e:
                    self.logger.warning(f"Could not set MySQL timezone to {self.config.timezone}: {e}")
                finally:
                    cursor.close()

            version = self.get_server_version()
            self._dialect.version = version
            self.log(logging.INFO, f"Connected to MySQL server version {'.'.join(map(str, version))}")
        except MySQLError as e:
            self._connection = None
            raise ConnectionError(f"Failed to connect to MySQL: {e}") from e

    def disconnect(self) -> None:
        """Close connection to MySQL database"""
        if self._cursor:
            self._cursor.close()
            self._cursor = None

        if self._connection:
            self._connection.close()
            self._connection = None

        self._transaction_manager = None
        self.log(logging.INFO, "Disconnected from MySQL")

    def is_connected(self) -> bool:
        return self._connection is not None

    def ping(self, reconnect: bool = True) -> bool:
        """Check if connection is valid"""
        try:
            if not self._connection:
                if reconnect:
                    self.connect()
                    return True
                return False

            self._connection.ping(reconnect=False)
            return True

        except MySQLError:
            if not reconnect:
                return False
            self._connection = None
            try:
                self.connect()
                return True
            except ConnectionError as e:
                self.log(logging.WARNING, f"Reconnection failed after ping: {e}")
                return False

    def _handle_error(self, error: Exception) -> None:
        """Translate driver errors into ActiveRecord errors"""
        errno = getattr(error, 'errno', None)
        if isinstance(error, MySQLIntegrityError) or (
                isinstance(error, MySQLDatabaseError) and errno in INTEGRITY_ERRNOS):
            self.log(logging.ERROR, f"Integrity violation: {error}")
            raise IntegrityError(f"MySQL integrity error: {error}") from error
        elif isinstance(error, ProgrammingError) and errno in MISSING_OBJECT_ERRNOS:
            raise OperationalError(f"MySQL operational error: {error}") from error
        elif isinstance(error, MySQLDatabaseError) and errno in DEADLOCK_ERRNOS:
            raise DeadlockError(f"MySQL deadlock detected: {error}") from error
        elif isinstance(error, (MySQLOperationalError, MySQLInterfaceError)):
            raise OperationalError(f"MySQL operational error: {error}") from error
        elif isinstance(error, MySQLDatabaseError):
            raise DatabaseError(f"MySQL database error: {error}") from error
        elif isinstance(error, MySQLError):
            raise QueryError(f"MySQL query error: {error}") from error
        else:
            raise error

    def get_server_version(self) -> tuple:
        """Get MySQL server version"""
        if self._server_version_cache:
            return self._server_version_cache

        if not self._connection:
            self.connect()
            return self._server_version_cache

        self.log(logging.DEBUG, "Querying MySQL server version")
        cursor = self._connection.cursor()
        try:
            cursor.execute("SELECT VERSION()")
            version_str = cursor.fetchone()[0]
        finally:
            cursor.close()

        version_parts = version_str.split('-')[0].split('.')
        version = tuple(int(part) for part in version_parts[:3])
        if len(version) < 3:
            version = version + (0,) * (3 - len(version))

        self._server_version_cache = version
        self.log(logging.DEBUG, f"Detected MySQL server version: {'.'.join(map(str, version))}")
        return version

    def introspect_and_adapt(self) -> None:
        """Connect if needed and adapt the dialect to the server version."""
        if not self._connection:
            self.connect()
        self._dialect.version = self.get_server_version()

    def _get_cursor(self):
        """Get or create cursor for MySQL"""
        if self._cursor:
            return self._cursor
        # Buffered so DML statements never leave unread results on the connection
        return self._connection.cursor(buffered=True)

    def _handle_auto_commit(self) -> None:
        """Handle auto commit based on MySQL connection and transaction state"""
        if not self._connection:
            return
        if not self._connection.autocommit:
            if not self._transaction_manager or not self._transaction_manager.is_active:
                self._connection.commit()
                self.log(logging.DEBUG, "Auto-committed operation (not in active transaction)")
