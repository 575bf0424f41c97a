# src/rhosocial/activerecord_fixtures/config.py
"""Configuration for fixture loading

This module provides the loader configuration: where fixture files live, how
verbose resolution tracing is and the log level. Connection settings are the
ActiveRecord connection configuration classes of each backend.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, Any, Union

import yaml

try:
    import tomllib
except ImportError:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

from .errors import ConfigurationError

ENV_FIXTURE_PATH = "ACTIVERECORD_FIXTURES_PATH"
ENV_VERBOSE = "ACTIVERECORD_FIXTURES_VERBOSE"
ENV_CONFIG_PATH = "ACTIVERECORD_FIXTURES_CONFIG_PATH"


@dataclass
class FixtureConfig:
    """Loader configuration.

    fixture_path must be set before anything is loaded. verbose only controls
    diagnostic tracing:

    - 0: silent
    - 1: fixtures being used and fixture files being read
    - 2: association decisions, cycle detection and saves
    - 3: individual attribute assignments and reuse of existing records
    """

    fixture_path: Optional[Union[str, Path]] = None
    verbose: int = 0
    log_level: int = logging.INFO

    def __post_init__(self):
        if self.fixture_path is not None:
            self.fixture_path = Path(self.fixture_path)
        self.verbose = int(self.verbose or 0)

    def require_fixture_path(self) -> Path:
        """Return fixture_path or fail with ConfigurationError."""
        if self.fixture_path is None:
            raise ConfigurationError(
                "No fixture_path set. Use FixtureConfig(fixture_path=...) "
                f"or the {ENV_FIXTURE_PATH} environment variable"
            )
        return self.fixture_path

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fixture_path': str(self.fixture_path) if self.fixture_path is not None else None,
            'verbose': self.verbose,
            'log_level': self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FixtureConfig':
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        params = {k: v for k, v in data.items() if k in known}
        if isinstance(params.get('log_level'), str):
            params['log_level'] = logging.getLevelName(params['log_level'].upper())
        return cls(**params)

    @classmethod
    def from_env(cls) -> 'FixtureConfig':
        """Build a config from ACTIVERECORD_FIXTURES_* environment variables."""
        return cls(
            fixture_path=os.getenv(ENV_FIXTURE_PATH) or None,
            verbose=int(os.getenv(ENV_VERBOSE, "0")),
        )


def load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a configuration file based on its extension

    Args:
        config_path: YAML (.yaml/.yml) or TOML (.toml) file path

    Returns:
        Configuration dictionary
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower().strip()
    if suffix in ['.yaml', '.yml']:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    elif suffix == '.toml':
        if tomllib is None:
            raise ConfigurationError("tomllib or tomli is required to load TOML configuration files")
        with open(config_path, 'rb') as f:
            return tomllib.load(f) or {}
    raise ConfigurationError(f"Unsupported configuration file format: {config_path.suffix}")


def load_fixture_config(config_path: Optional[Union[str, Path]] = None) -> FixtureConfig:
    """
    Load the loader configuration using a multi-level priority mechanism:
    1. Explicit config_path argument
    2. File named by the ACTIVERECORD_FIXTURES_CONFIG_PATH environment variable
    3. ACTIVERECORD_FIXTURES_PATH / ACTIVERECORD_FIXTURES_VERBOSE environment variables

    Config files carry their settings under a top-level ``fixtures`` key.
    """
    if config_path is None:
        config_path = os.getenv(ENV_CONFIG_PATH) or None

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file {config_path} does not exist")
        data = load_config_file(config_path)
        return FixtureConfig.from_dict(data.get('fixtures', {}) or {})

    return FixtureConfig.from_env()
