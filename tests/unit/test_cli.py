from __future__ import annotations

import json
from contextlib import asynccontextmanager

import pytest
from typer.testing import CliRunner

from pgdba import main as main_module
from pgdba.errors import QueryError
from pgdba.service import DataAccess

runner = CliRunner()

CUSTOMER_FK = {
    "column_name": "customer_id",
    "foreign_table_schema": "demo",
    "foreign_table_name": "customers",
    "foreign_column_name": "id",
}


@pytest.fixture
def cli(monkeypatch, executor):
    """Route every CLI command to the scripted executor."""

    class _FakeDataAccess(DataAccess):
        @classmethod
        @asynccontextmanager
        async def connect(cls, settings=None, dsn_override=None):
            yield cls(executor)

    monkeypatch.setattr(main_module, "DataAccess", _FakeDataAccess)
    monkeypatch.setattr(main_module, "configure_logging", lambda **kwargs: None)
    return executor


def test_schemas_lists_names(cli) -> None:
    cli.queue([{"schema_name": "public"}, {"schema_name": "demo"}])

    result = runner.invoke(main_module.app, ["schemas"])

    assert result.exit_code == 0, result.output
    assert "public" in result.output
    assert "demo" in result.output


def test_records_json_includes_hydrated_rows(cli) -> None:
    cli.queue([{"id": 1, "customer_id": 5, "product": "keyboard"}])
    cli.queue([CUSTOMER_FK])
    cli.queue([{"id": 5, "name": "Ada"}])

    result = runner.invoke(main_module.app, ["records", "demo", "orders", "--hydrate", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload == [{"id": 1, "customer_id": {"id": 5, "name": "Ada"}, "product": "keyboard"}]


def test_record_not_found_exits_with_error(cli) -> None:
    cli.queue([])

    result = runner.invoke(main_module.app, ["record", "demo", "orders", "404"])

    assert result.exit_code == 1


def test_insert_binds_assignments(cli) -> None:
    cli.queue([{"id": 9}])

    result = runner.invoke(
        main_module.app,
        ["insert", "demo", "orders", "--set", "product=mouse", "--null", "customer_id"],
    )

    assert result.exit_code == 0, result.output
    assert "id=9" in result.output
    text, params = cli.calls[0]
    assert text == 'INSERT INTO "demo"."orders" ("product", "customer_id") VALUES (%s, %s) RETURNING id'
    assert params == ("mouse", None)


def test_insert_rejects_malformed_assignment(cli) -> None:
    result = runner.invoke(main_module.app, ["insert", "demo", "orders", "--set", "product"])

    assert result.exit_code != 0
    assert cli.calls == []


def test_update_changes_only_given_columns(cli) -> None:
    cli.queue([{"id": 3, "customer_id": 5, "product": "keyboard"}])
    cli.queue([], rowcount=1)

    result = runner.invoke(
        main_module.app, ["update", "demo", "orders", "3", "--set", "product=monitor"]
    )

    assert result.exit_code == 0, result.output
    assert "Updated 1 row(s)" in result.output
    assert cli.calls[1][1] == (3, 5, "monitor", 3)


def test_delete_with_yes_skips_confirmation(cli) -> None:
    cli.queue([], rowcount=1)

    result = runner.invoke(main_module.app, ["delete", "demo", "orders", "3", "--yes"])

    assert result.exit_code == 0, result.output
    assert "Deleted 1 row(s)" in result.output
    assert cli.calls[0][1] == (3,)


def test_query_errors_are_reported(cli) -> None:
    cli.fail_next(QueryError('relation "demo.nope" does not exist', sqlstate="42P01"))

    result = runner.invoke(main_module.app, ["records", "demo", "nope"])

    assert result.exit_code == 1
    assert "does not exist" in result.output
