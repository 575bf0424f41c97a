# tests/rhosocial/activerecord_fixtures_test/test_cli.py
"""The ``load-fixtures`` command line entry point."""

import json
import logging

import pytest
from rhosocial.activerecord.backend.impl.sqlite import SQLiteBackend, SQLiteConnectionConfig

from rhosocial.activerecord_fixtures import MySQLBackend, MySQLConnectionConfig, connect_models
from rhosocial.activerecord_fixtures.__main__ import collect_models, connection_settings, main, parse_args
from fixture_models import ALL_MODELS, SQLITE_SCHEMA, Author


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("ACTIVERECORD_FIXTURES_PATH", "ACTIVERECORD_FIXTURES_CONFIG_PATH", "MYSQL_DATABASE"):
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


@pytest.fixture
def database(tmp_path):
    """A SQLite file with the test schema."""
    path = tmp_path / "fixtures.sqlite3"
    backend = SQLiteBackend(connection_config=SQLiteConnectionConfig(database=str(path)))
    backend.connect()
    backend.executescript(SQLITE_SCHEMA)
    backend.disconnect()
    return str(path)


def records(output):
    return [json.loads(line) for line in output.splitlines() if line.strip()]


def test_parse_args_defaults():
    args = parse_args(["book__moby", "--models", "fixture_models"])

    assert args.tokens == ["book__moby"]
    assert args.models == ["fixture_models"]
    assert args.backend == "sqlite"
    assert args.database is None
    assert args.log_level is None
    assert args.verbose == 0


def test_collect_models():
    models = collect_models(["fixture_models"])

    assert set(ALL_MODELS) <= set(models)


def test_sqlite_database_ignores_mysql_environment(monkeypatch):
    monkeypatch.setenv("MYSQL_DATABASE", "fixtures_db")

    backend_class, config = connection_settings(parse_args(["author", "--models", "fixture_models"]))

    assert backend_class is SQLiteBackend
    assert config.database == ":memory:"


def test_mysql_database_defaults_to_environment(monkeypatch):
    monkeypatch.setenv("MYSQL_DATABASE", "fixtures_db")

    backend_class, config = connection_settings(
        parse_args(["author", "--models", "fixture_models", "--backend", "mysql", "--user", "tester"]))

    assert backend_class is MySQLBackend
    assert isinstance(config, MySQLConnectionConfig)
    assert config.database == "fixtures_db"
    assert config.username == "tester"


def test_explicit_database_wins(monkeypatch):
    monkeypatch.setenv("MYSQL_DATABASE", "fixtures_db")

    _, config = connection_settings(
        parse_args(["author", "--models", "fixture_models", "--backend", "mysql", "--database", "other"]))

    assert config.database == "other"


def test_load_single_fixture(database, data_path, capsys):
    code = main(["author__jane", "--models", "fixture_models",
                 "--fixture-path", str(data_path), "--database", database])

    assert code == 0
    [printed] = records(capsys.readouterr().out)
    assert printed["author"]["name"] == "Jane Austen"


def test_load_type_and_fixture(database, data_path, capsys):
    code = main(["category", "book__emma", "--models", "fixture_models",
                 "--fixture-path", str(data_path), "--database", database, "-vv"])

    assert code == 0
    printed = records(capsys.readouterr().out)
    assert [list(r)[0] for r in printed] == ["category", "category", "category", "book"]

    # rows were written to the file database
    group = connect_models([Author], SQLiteConnectionConfig(database=database), SQLiteBackend)
    try:
        assert Author.query().count() == 1
    finally:
        group.disconnect()


def test_log_level_from_config_file(database, data_path, tmp_path):
    config_file = tmp_path / "fixtures.yaml"
    config_file.write_text(f"fixtures:\n  fixture_path: {data_path}\n  log_level: WARNING\n", encoding="utf-8")

    code = main(["author__jane", "--models", "fixture_models", "--config", str(config_file),
                 "--database", database])

    assert code == 0
    assert logging.getLogger().level == logging.WARNING


def test_log_level_option_wins_over_config_file(database, data_path, tmp_path):
    config_file = tmp_path / "fixtures.yaml"
    config_file.write_text(f"fixtures:\n  fixture_path: {data_path}\n  log_level: WARNING\n", encoding="utf-8")

    code = main(["author__jane", "--models", "fixture_models", "--config", str(config_file),
                 "--database", database, "--log-level", "debug"])

    assert code == 0
    assert logging.getLogger().level == logging.DEBUG


def test_invalid_log_level_exit_code(database, data_path):
    code = main(["author__jane", "--models", "fixture_models", "--fixture-path", str(data_path),
                 "--database", database, "--log-level", "chatty"])

    assert code == 2


def test_missing_fixture_path_exit_code(database):
    assert main(["author__jane", "--models", "fixture_models", "--database", database]) == 2


def test_unknown_fixture_exit_code(database, data_path):
    code = main(["author__nobody", "--models", "fixture_models",
                 "--fixture-path", str(data_path), "--database", database])

    assert code == 1
