"""
Read-only introspection of schemas, tables and columns through information_schema.
"""

from __future__ import annotations

from typing import List, Tuple

from pgdba.access.base import BaseAccessor
from pgdba.access.query_builder import (
    TableRef,
    batch,
    build_list_columns,
    build_list_schemas,
    build_list_tables,
    build_select,
    build_select_by_id,
)
from pgdba.domain.models import ColumnMetadata, Record, SqlValue, TableInfo
from pgdba.infrastructure.gateway import ResultSet


def _records(result: ResultSet, ref: TableRef) -> List[Record]:
    return [Record.from_row(row, ref.schema, ref.table) for row in result.rows]


def _columns(result: ResultSet) -> List[ColumnMetadata]:
    return [ColumnMetadata.model_validate(row) for row in result.rows]


class SchemaCatalog(BaseAccessor):
    """
    Describe the database's shape.

    Missing schemas and tables are not errors: the catalog simply returns no
    rows for them.
    """

    async def list_schemas(self) -> List[str]:
        result = await self._run_one(build_list_schemas())
        return [row["schema_name"] for row in result.rows]

    async def list_tables(self, schema: str) -> List[TableInfo]:
        result = await self._run_one(build_list_tables(schema))
        return [TableInfo.model_validate(row) for row in result.rows]

    async def list_columns(self, schema: str, table: str) -> List[ColumnMetadata]:
        result = await self._run_one(build_list_columns(TableRef(schema, table)))
        return _columns(result)

    async def get_columns_and_records(
        self, schema: str, table: str
    ) -> Tuple[List[ColumnMetadata], List[Record]]:
        """Columns and every row of the table, fetched in one round trip."""
        ref = TableRef(schema, table)
        columns_result, data_result = await self._run(
            batch(build_list_columns(ref), build_select(ref))
        )
        return _columns(columns_result), _records(data_result, ref)

    async def get_columns_and_record(
        self, schema: str, table: str, record_id: SqlValue
    ) -> Tuple[List[ColumnMetadata], List[Record]]:
        """Columns and the row with `record_id` (zero or one Record), fetched in one round trip."""
        ref = TableRef(schema, table)
        columns_result, data_result = await self._run(
            batch(build_list_columns(ref), build_select_by_id(ref, record_id))
        )
        return _columns(columns_result), _records(data_result, ref)


__all__ = ["SchemaCatalog"]
