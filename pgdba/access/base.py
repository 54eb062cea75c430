"""
Shared plumbing for the access-layer components.

Each component holds a `QueryExecutor` and runs `Statement` objects through
it; none of them manages connections itself.
"""

from __future__ import annotations

from typing import List

from pgdba.access.query_builder import Statement
from pgdba.infrastructure.gateway import QueryExecutor, ResultSet


class BaseAccessor:
    """Runs statements on an executor (normally a `ConnectionGateway`)."""

    def __init__(self, executor: QueryExecutor) -> None:
        self._executor = executor

    async def _run(self, statement: Statement) -> List[ResultSet]:
        return await self._executor.execute(statement.query, statement.params)

    async def _run_one(self, statement: Statement) -> ResultSet:
        results = await self._run(statement)
        return results[0]


__all__ = ["BaseAccessor"]
