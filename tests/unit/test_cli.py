"""Unit tests for the command line entry point."""

from __future__ import annotations

from typing import List, Optional

import pytest
from sqlalchemy import create_engine

from conftest import FakeCollection, FakeMongoClient, corrupt_bson, make_bot
from docmigrate import cli
from docmigrate.exceptions import StoreConnectionError
from docmigrate.loaders.sql_tables import metadata

ENV_KEYS = [
    "MONGODB_URI",
    "BOTS_MONGODB_URI",
    "MYSQL_URI",
    "MIGRATION_WORKERS",
    "MIGRATION_TIMEOUT",
    "MIGRATION_STRICT",
    "MIGRATION_DRY_RUN",
    "MIGRATION_CONNECT_TIMEOUT_MS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def stores(monkeypatch: pytest.MonkeyPatch, mongo_client: FakeMongoClient, tmp_path):
    """Route every connection to in-memory or SQLite stores and record the URIs used."""
    engine = create_engine(f"sqlite:///{tmp_path / 'socialflux.db'}")
    metadata.create_all(engine)
    mongo_uris: List[Optional[str]] = []

    def fake_connect_mongo(uri, timeout_ms=10000):
        mongo_uris.append(uri)
        return mongo_client

    monkeypatch.setattr(cli, "connect_mongo", fake_connect_mongo)
    monkeypatch.setattr(cli, "connect_sql", lambda uri: engine)
    yield mongo_client, mongo_uris
    engine.dispose()


def _seed_bots(client: FakeMongoClient, docs) -> None:
    client["myFirstDatabase"]["bots"] = FakeCollection("bots", docs)


def test_prints_summary_line(stores, capsys: pytest.CaptureFixture) -> None:
    client, _ = stores
    _seed_bots(client, [make_bot(i) for i in range(3)])

    assert cli.main(["bots"]) == cli.EXIT_OK

    out = capsys.readouterr().out
    assert out.startswith("Conversion done. Processed 3 documents in ")
    assert "written=3" in out
    assert client.closed


def test_record_failures_exit_zero_by_default(stores) -> None:
    client, _ = stores
    _seed_bots(client, [make_bot(1), corrupt_bson()])

    assert cli.main(["bots"]) == cli.EXIT_OK


def test_strict_mode_exits_with_failure_code(stores) -> None:
    client, _ = stores
    _seed_bots(client, [make_bot(1), corrupt_bson()])

    assert cli.main(["bots", "--strict"]) == cli.EXIT_RECORD_FAILURES


def test_strict_mode_from_environment(stores, monkeypatch: pytest.MonkeyPatch) -> None:
    client, _ = stores
    _seed_bots(client, [corrupt_bson()])
    monkeypatch.setenv("MIGRATION_STRICT", "true")

    assert cli.main(["bots"]) == cli.EXIT_RECORD_FAILURES


def test_strict_mode_passes_clean_run(stores) -> None:
    client, _ = stores
    _seed_bots(client, [make_bot(1)])

    assert cli.main(["bots", "--strict"]) == cli.EXIT_OK


def test_connection_failure_exits_before_migrating(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    def refuse(uri, timeout_ms=10000):
        raise StoreConnectionError("MongoDB", OSError("connection refused"))

    monkeypatch.setattr(cli, "connect_mongo", refuse)

    assert cli.main(["bots"]) == cli.EXIT_CONNECTION_ERROR
    assert "Conversion done" not in capsys.readouterr().out


def test_missing_uri_is_a_connection_error() -> None:
    assert cli.main(["bots"]) == cli.EXIT_CONNECTION_ERROR


def test_bots_uri_falls_back_to_main_uri(stores, monkeypatch: pytest.MonkeyPatch) -> None:
    _, uris = stores
    monkeypatch.setenv("MONGODB_URI", "mongodb://main:27017")

    cli.main(["conv"])

    assert uris == ["mongodb://main:27017"]


def test_all_runs_every_service(stores, capsys: pytest.CaptureFixture) -> None:
    client, uris = stores
    _seed_bots(client, [make_bot(1)])

    assert cli.main(["--workers", "2"]) == cli.EXIT_OK

    out = capsys.readouterr().out
    # One summary for bots plus one per socialflux entity
    assert out.count("Conversion done.") == 5
    assert len(uris) == 2


def test_dry_run_flag_writes_nothing(stores) -> None:
    client, _ = stores
    _seed_bots(client, [make_bot(1)])

    cli.main(["bots", "--dry-run"])

    assert client["myFirstDatabase"]["transformedbots"].docs == []


@pytest.mark.parametrize(("selector", "expected"), [("conv", ["bots"]), ("socialflux", ["socialflux"])])
def test_resolve_services(selector: str, expected: List[str]) -> None:
    assert cli.resolve_services(selector) == expected


def test_resolve_all_services() -> None:
    assert cli.resolve_services("all") == ["bots", "socialflux"]


def test_command_line_overrides_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MIGRATION_WORKERS", "8")
    args = cli.build_parser().parse_args(["bots", "--workers", "4", "--timeout", "30"])

    config = cli.build_config(args)

    assert config.parallel_workers == 4
    assert config.timeout_seconds == 30.0


@pytest.mark.parametrize("workers", ["0", "-2", "many"])
def test_bad_worker_flag_is_rejected_before_connecting(monkeypatch: pytest.MonkeyPatch, workers: str) -> None:
    calls = []
    monkeypatch.setattr(cli, "connect_mongo", lambda *args: calls.append(args))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["bots", "--workers", workers])

    assert excinfo.value.code == 2
    assert calls == []


def test_bad_worker_setting_in_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(cli, "connect_mongo", lambda *args: calls.append(args))
    monkeypatch.setenv("MIGRATION_WORKERS", "lots")

    assert cli.main(["bots"]) == cli.EXIT_CONFIG_ERROR
    assert calls == []


def test_negative_timeout_flag_is_rejected() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["bots", "--timeout", "-1"])
