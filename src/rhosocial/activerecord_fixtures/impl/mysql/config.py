# src/rhosocial/activerecord_fixtures/impl/mysql/config.py
"""MySQL-specific connection configuration

Extends the ActiveRecord ConnectionConfig with the options the fixture
loader passes on to mysql-connector-python.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any

from rhosocial.activerecord.backend.config import (
    ConnectionConfig,
    ConnectionPoolMixin,
    SSLMixin,
    CharsetMixin,
    TimezoneMixin,
    VersionMixin,
    LoggingMixin
)


@dataclass
class MySQLConnectionConfig(
    ConnectionConfig,
    ConnectionPoolMixin,
    SSLMixin,
    CharsetMixin,
    TimezoneMixin,
    VersionMixin,
    LoggingMixin
):
    """MySQL connection configuration with MySQL-specific parameters."""

    port: Optional[int] = 3306

    # MySQL-specific authentication
    auth_plugin: Optional[str] = None

    # MySQL-specific connection options
    autocommit: bool = True
    init_command: Optional[str] = "SET sql_mode='STRICT_TRANS_TABLES'"
    connect_timeout: Optional[int] = 10

    # MySQL-specific flags
    use_pure: bool = True
    get_warnings: bool = True
    ssl_disabled: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary, including MySQL-specific parameters."""
        config_dict = super().to_dict()

        mysql_params = {
            'auth_plugin': self.auth_plugin,
            'autocommit': self.autocommit,
            'init_command': self.init_command,
            'connect_timeout': self.connect_timeout,
            'use_pure': self.use_pure,
            'get_warnings': self.get_warnings,
            'ssl_disabled': self.ssl_disabled,
        }

        # Only include non-None values
        for key, value in mysql_params.items():
            if value is not None:
                config_dict[key] = value

        return config_dict
