# src/rhosocial/activerecord_fixtures/__main__.py
import argparse
import datetime
import decimal
import importlib
import json
import logging
import os
import sys

from rhosocial.activerecord.backend.impl.sqlite import SQLiteBackend, SQLiteConnectionConfig

from .config import FixtureConfig, load_fixture_config
from .connection import connect_models
from .errors import ConfigurationError, DatabaseError, FixtureError
from .impl.mysql import MySQLBackend, MySQLConnectionConfig
from .loader import FixtureLoader
from .registry import defined_models, entity_name

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Load fixtures (and their dependencies) into a database.",
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        'tokens',
        nargs='+',
        help='Fixtures to load: "<type>__<name>" for one fixture, "<type>" for all fixtures of a type.'
    )
    parser.add_argument(
        '--models',
        required=True,
        action='append',
        help='Module defining the ActiveRecord model classes (may be repeated)'
    )
    parser.add_argument(
        '--fixture-path',
        default=None,
        help='Directory with the <table>.yml fixture files '
             '(default: ACTIVERECORD_FIXTURES_PATH environment variable or config file)'
    )
    parser.add_argument('--config', default=None, help='YAML or TOML config file with a "fixtures" section')
    parser.add_argument('--backend', choices=['sqlite', 'mysql'], default='sqlite', help='Storage backend')

    # Connection parameters with defaults from environment variables
    parser.add_argument(
        '--database',
        default=None,
        help='MySQL database (default: MYSQL_DATABASE environment variable), '
             'or SQLite file (default: in-memory database)'
    )
    parser.add_argument('--host', default=os.getenv('MYSQL_HOST', 'localhost'), help='MySQL host')
    parser.add_argument('--port', type=int, default=int(os.getenv('MYSQL_PORT', 3306)), help='MySQL port')
    parser.add_argument('--user', default=os.getenv('MYSQL_USER', 'root'), help='MySQL user')
    parser.add_argument('--password', default=os.getenv('MYSQL_PASSWORD', ''), help='MySQL password')

    parser.add_argument('-v', '--verbose', action='count', default=0, help='Trace resolution (repeat for more)')
    parser.add_argument(
        '--log-level',
        default=None,
        help='Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL; default: config file, then INFO)'
    )

    return parser.parse_args(argv)


def json_serializer(obj):
    """Handles serialization of types not supported by default JSON encoder."""
    if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
        return obj.isoformat()
    if isinstance(obj, decimal.Decimal):
        return str(obj)
    if isinstance(obj, bytes):
        return obj.hex()
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


def collect_models(module_names):
    models = []
    for module_name in module_names:
        module = importlib.import_module(module_name)
        known = defined_models()
        for value in vars(module).values():
            if isinstance(value, type) and value in known and value not in models:
                models.append(value)
    return models


def connection_settings(args):
    """Backend class and connection config selected by the command line."""
    if args.backend == 'mysql':
        config = MySQLConnectionConfig(
            host=args.host,
            port=args.port,
            database=args.database or os.getenv('MYSQL_DATABASE'),
            username=args.user,
            password=args.password,
        )
        return MySQLBackend, config
    return SQLiteBackend, SQLiteConnectionConfig(database=args.database or ':memory:')


def resolve_log_level(value) -> int:
    if isinstance(value, int):
        return value
    level = getattr(logging, str(value).upper(), None)
    if not isinstance(level, int):
        raise ConfigurationError(f'Invalid log level: {value}')
    return level


def handle_result(result):
    records = result if isinstance(result, list) else [result]
    for record in records:
        if isinstance(record, list):
            handle_result(record)
        else:
            print(json.dumps({entity_name(type(record)): record.model_dump()},
                             ensure_ascii=False, default=json_serializer))


def main(argv=None):
    args = parse_args(argv)

    group = None
    try:
        config = load_fixture_config(args.config)
        # An explicit --log-level wins over the config file
        level = resolve_log_level(args.log_level if args.log_level else config.log_level)
        logging.getLogger().setLevel(level)
        config = FixtureConfig(fixture_path=args.fixture_path or config.fixture_path,
                               verbose=args.verbose or config.verbose, log_level=level)

        models = collect_models(args.models)
        backend_class, connection_config = connection_settings(args)
        group = connect_models(models, connection_config, backend_class)

        loader = FixtureLoader(config, models=models)
        tokens = args.tokens
        result = loader.load(*tokens)
        handle_result(result if len(tokens) > 1 else [result])
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except DatabaseError as e:
        logger.error(f"Database error: {e}")
        return 1
    except FixtureError as e:
        logger.error(f"Fixture error: {e}")
        return 1
    finally:
        if group is not None:
            group.disconnect()
            logger.info("Disconnected from database.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
