"""
Row-level reads and writes against arbitrary tables.
"""

from __future__ import annotations

from typing import List, Optional

from pgdba.access.base import BaseAccessor
from pgdba.access.query_builder import (
    TableRef,
    build_delete,
    build_insert,
    build_select,
    build_select_by_id,
    build_update,
)
from pgdba.domain.models import Record, SqlValue
from pgdba.utils.logging import get_logger

log = get_logger(__name__)


class RecordRepository(BaseAccessor):
    """Fetch rows as `Record` objects and write Records back."""

    async def get_records(self, schema: str, table: str) -> List[Record]:
        ref = TableRef(schema, table)
        result = await self._run_one(build_select(ref))
        return [Record.from_row(row, schema, table) for row in result.rows]

    async def get_record(self, schema: str, table: str, record_id: SqlValue) -> Optional[Record]:
        """The row whose id is `record_id`, or None when there is none."""
        ref = TableRef(schema, table)
        result = await self._run_one(build_select_by_id(ref, record_id))
        if not result.rows:
            return None
        return Record.from_row(result.rows[0], schema, table)

    async def insert_record(self, schema: str, table: str, record: Record) -> SqlValue:
        """Insert `record` (its `id` column excluded) and return the generated id."""
        ref = TableRef(schema, table)
        result = await self._run_one(build_insert(ref, record))
        new_id = result.rows[0]["id"]
        log.info("inserted record", extra={"table": str(ref), "id": new_id})
        return new_id

    async def update_record(self, schema: str, table: str, record: Record) -> int:
        """Write every value of `record` to the row with `record.id`; returns rows affected."""
        ref = TableRef(schema, table)
        result = await self._run_one(build_update(ref, record))
        log.info("updated record", extra={"table": str(ref), "id": record.id, "rows": result.rowcount})
        return result.rowcount

    async def delete_record(self, schema: str, table: str, record_id: SqlValue) -> int:
        ref = TableRef(schema, table)
        result = await self._run_one(build_delete(ref, record_id))
        log.info("deleted record", extra={"table": str(ref), "id": record_id, "rows": result.rowcount})
        return result.rowcount


__all__ = ["RecordRepository"]
