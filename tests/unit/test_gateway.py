from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, List, Optional

import psycopg
import pytest
from psycopg import errors as pg_errors

from pgdba.access.query_builder import TableRef, build_select
from pgdba.errors import ConnectionUnavailable, QueryError
from pgdba.infrastructure import gateway as gateway_module
from pgdba.infrastructure.gateway import ConnectionGateway


class _FakeCursor:
    """Replays one (description, rows, rowcount) tuple per statement."""

    script: List[tuple] = []
    error: Optional[Exception] = None
    executed: List[tuple] = []

    def __init__(self, conn: Any, row_factory: Any = None) -> None:
        self._sets = list(self.script)
        self._index = 0

    async def __aenter__(self) -> "_FakeCursor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        del exc_type, exc, tb
        return False

    async def execute(self, query: Any, params: Any = None) -> None:
        type(self).executed.append((query, params))
        if self.error is not None:
            raise self.error

    @property
    def description(self) -> Any:
        return self._sets[self._index][0]

    @property
    def rowcount(self) -> int:
        return self._sets[self._index][2]

    @property
    def statusmessage(self) -> str:
        return "SELECT" if self.description else "UPDATE"

    async def fetchall(self) -> list:
        return self._sets[self._index][1]

    def nextset(self) -> Optional[bool]:
        if self._index + 1 < len(self._sets):
            self._index += 1
            return True
        return None


class _ConnectionContext(AbstractAsyncContextManager[object]):
    def __init__(self, pool: "_FakePool") -> None:
        self._pool = pool

    async def __aenter__(self) -> object:
        if self._pool.acquire_error is not None:
            raise self._pool.acquire_error
        self._pool.borrowed += 1
        return object()

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        del exc_type, tb
        self._pool.borrowed -= 1
        self._pool.exits.append(exc)
        return False


class _FakePool:
    def __init__(self, acquire_error: Optional[Exception] = None) -> None:
        self.acquire_error = acquire_error
        self.borrowed = 0
        self.exits: List[Optional[BaseException]] = []
        self.closed = False

    def connection(self) -> _ConnectionContext:
        return _ConnectionContext(self)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_cursor(monkeypatch) -> type:
    _FakeCursor.script = []
    _FakeCursor.error = None
    _FakeCursor.executed = []
    monkeypatch.setattr(gateway_module, "AsyncClientCursor", _FakeCursor)
    return _FakeCursor


@pytest.mark.asyncio
async def test_result_sets_come_back_in_statement_order(fake_cursor) -> None:
    fake_cursor.script = [
        (["a"], [{"a": 1}], 1),
        (["b"], [{"b": 2}, {"b": 3}], 2),
    ]
    pool = _FakePool()

    results = await ConnectionGateway(pool).execute("SELECT 1 AS a; SELECT 2 AS b")

    assert [r.rows for r in results] == [[{"a": 1}], [{"b": 2}, {"b": 3}]]
    assert [r.rowcount for r in results] == [1, 2]
    assert pool.borrowed == 0


@pytest.mark.asyncio
async def test_statement_without_rows_yields_empty_result(fake_cursor) -> None:
    fake_cursor.script = [(None, [], 3)]

    (result,) = await ConnectionGateway(_FakePool()).execute("DELETE FROM t WHERE id = %s", [1])

    assert result.rows == []
    assert result.rowcount == 3
    assert fake_cursor.executed == [("DELETE FROM t WHERE id = %s", (1,))]


@pytest.mark.asyncio
async def test_statements_without_params_still_bind_a_tuple(fake_cursor) -> None:
    fake_cursor.script = [(["x"], [], 0)]
    query = build_select(TableRef("public", "discount%")).query

    await ConnectionGateway(_FakePool()).execute(query)
    await ConnectionGateway(_FakePool()).execute(query, [])

    assert [params for _, params in fake_cursor.executed] == [(), ()]


@pytest.mark.asyncio
async def test_server_error_becomes_query_error_and_releases_connection(fake_cursor) -> None:
    fake_cursor.error = pg_errors.UndefinedTable('relation "nope" does not exist')
    pool = _FakePool()

    with pytest.raises(QueryError) as info:
        await ConnectionGateway(pool).execute("SELECT * FROM nope")

    assert info.value.sqlstate == "42P01"
    assert isinstance(info.value.__cause__, pg_errors.UndefinedTable)
    assert pool.borrowed == 0
    assert isinstance(pool.exits[0], pg_errors.UndefinedTable)


@pytest.mark.asyncio
async def test_unreachable_database_becomes_connection_unavailable(fake_cursor) -> None:
    pool = _FakePool(acquire_error=psycopg.OperationalError("connection refused"))

    with pytest.raises(ConnectionUnavailable):
        await ConnectionGateway(pool).execute("SELECT 1")

    assert fake_cursor.executed == []


@pytest.mark.asyncio
async def test_close_closes_pool() -> None:
    pool = _FakePool()
    await ConnectionGateway(pool).close()
    assert pool.closed is True
