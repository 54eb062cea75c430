"""
Connection gateway: the only part of pgdba that talks to the database.

Every statement runs on a connection borrowed from the pool for the duration
of one `execute` call. Statements are sent through a client-side-binding
cursor so that several semicolon-separated statements, parameters included,
travel in a single round trip and come back as one result set each.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union, runtime_checkable

import psycopg
from psycopg import AsyncClientCursor, sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from pgdba.errors import ConnectionUnavailable, QueryError
from pgdba.utils.logging import get_logger

log = get_logger(__name__)

Query = Union[str, sql.Composable]


@dataclass
class ResultSet:
    """Rows and completion status of one statement."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: int = -1
    status: Optional[str] = None


@runtime_checkable
class QueryExecutor(Protocol):
    """
    What the access layer needs from a database connection.

    `execute` returns one ResultSet per statement in `query`, in statement
    order.
    """

    async def execute(
        self, query: Query, params: Optional[Sequence[Any]] = None
    ) -> List[ResultSet]:
        ...


def _translate_error(exc: psycopg.Error) -> Exception:
    # Client-side operational failures (no server SQLSTATE) mean the server
    # could not be reached or the pool had no connection to hand out.
    if isinstance(exc, psycopg.OperationalError) and exc.sqlstate is None:
        return ConnectionUnavailable(str(exc))
    return QueryError(str(exc), sqlstate=exc.sqlstate)


async def _collect_results(cur: AsyncClientCursor) -> List[ResultSet]:
    results: List[ResultSet] = []
    while True:
        rows = await cur.fetchall() if cur.description is not None else []
        results.append(ResultSet(rows=list(rows), rowcount=cur.rowcount, status=cur.statusmessage))
        if not cur.nextset():
            break
    return results


class ConnectionGateway:
    """
    Execute statements on connections borrowed from an async pool.

    The pool commits when a call succeeds and rolls back when it fails; the
    connection is returned to the pool either way.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    @property
    def pool(self) -> AsyncConnectionPool:
        return self._pool

    async def execute(
        self, query: Query, params: Optional[Sequence[Any]] = None
    ) -> List[ResultSet]:
        """
        Run `query` and return one ResultSet per statement.

        Raises
        ------
        ConnectionUnavailable
            If no connection could be acquired or the connection was lost.
        QueryError
            If the server rejected a statement.
        """
        # Always bind a tuple so `%%` in quoted identifiers collapses to `%`.
        bound = tuple(params or ())
        try:
            async with self._pool.connection() as conn:
                if log.isEnabledFor(logging.DEBUG):
                    log.debug(
                        "executing statement",
                        extra={"sql": _render(query, conn), "params": len(bound)},
                    )
                async with AsyncClientCursor(conn, row_factory=dict_row) as cur:
                    await cur.execute(query, bound)
                    return await _collect_results(cur)
        except psycopg.Error as exc:
            raise _translate_error(exc) from exc

    async def close(self) -> None:
        await self._pool.close()


def _render(query: Query, conn: psycopg.AsyncConnection) -> str:
    return query if isinstance(query, str) else query.as_string(conn)


__all__ = [
    "ConnectionGateway",
    "Query",
    "QueryExecutor",
    "ResultSet",
]
