"""
Single entry point to the data-access layer.

Usage:
    from pgdba.service import DataAccess

    async with DataAccess.connect() as dba:
        columns, records = await dba.get_columns_and_records("public", "orders")
        await dba.populate_foreign_values("public", "orders", records)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from pgdba.access.catalog import SchemaCatalog
from pgdba.access.foreign_keys import ForeignKeyResolver
from pgdba.access.records import RecordRepository
from pgdba.config import Settings
from pgdba.domain.models import ColumnMetadata, ForeignKeyConstraint, Record, SqlValue, TableInfo
from pgdba.infrastructure.db_factory import create_async_pool
from pgdba.infrastructure.gateway import ConnectionGateway, QueryExecutor


class DataAccess:
    """
    Catalog, record and foreign-key operations over one executor.

    Every method borrows a connection only for the statements it runs, so a
    DataAccess can be shared by concurrent tasks; the Records it returns
    belong to the caller.
    """

    def __init__(self, executor: QueryExecutor) -> None:
        self.executor = executor
        self.catalog = SchemaCatalog(executor)
        self.records = RecordRepository(executor)
        self.foreign_keys = ForeignKeyResolver(executor)

    @classmethod
    @asynccontextmanager
    async def connect(
        cls,
        settings: Optional[Settings] = None,
        dsn_override: Optional[str] = None,
    ) -> AsyncIterator["DataAccess"]:
        """Open a pool for the lifetime of the block and close it afterwards, even on error."""
        pool = await create_async_pool(settings, dsn_override=dsn_override)
        try:
            yield cls(ConnectionGateway(pool))
        finally:
            await pool.close()

    # Catalog

    async def list_schemas(self) -> List[str]:
        return await self.catalog.list_schemas()

    async def list_tables(self, schema: str) -> List[TableInfo]:
        return await self.catalog.list_tables(schema)

    async def list_columns(self, schema: str, table: str) -> List[ColumnMetadata]:
        return await self.catalog.list_columns(schema, table)

    async def get_columns_and_record(
        self, schema: str, table: str, record_id: SqlValue
    ) -> Tuple[List[ColumnMetadata], List[Record]]:
        return await self.catalog.get_columns_and_record(schema, table, record_id)

    async def get_columns_and_records(
        self, schema: str, table: str
    ) -> Tuple[List[ColumnMetadata], List[Record]]:
        return await self.catalog.get_columns_and_records(schema, table)

    # Records

    async def get_records(self, schema: str, table: str, hydrate: bool = False) -> List[Record]:
        records = await self.records.get_records(schema, table)
        if hydrate:
            await self.foreign_keys.populate_foreign_values(schema, table, records)
        return records

    async def get_record(
        self, schema: str, table: str, record_id: SqlValue, hydrate: bool = False
    ) -> Optional[Record]:
        record = await self.records.get_record(schema, table, record_id)
        if record is not None and hydrate:
            await self.foreign_keys.populate_foreign_values(schema, table, [record])
        return record

    async def insert_record(self, schema: str, table: str, record: Record) -> SqlValue:
        return await self.records.insert_record(schema, table, record)

    async def update_record(self, schema: str, table: str, record: Record) -> int:
        return await self.records.update_record(schema, table, record)

    async def delete_record(self, schema: str, table: str, record_id: SqlValue) -> int:
        return await self.records.delete_record(schema, table, record_id)

    # Foreign keys

    async def get_foreign_keys(self, schema: str, table: str) -> List[ForeignKeyConstraint]:
        return await self.foreign_keys.get_foreign_keys(schema, table)

    async def populate_foreign_values(self, schema: str, table: str, records: List[Record]) -> None:
        await self.foreign_keys.populate_foreign_values(schema, table, records)

    async def get_foreign_records(self, schema: str, table: str) -> Dict[str, List[Dict[str, Any]]]:
        return await self.foreign_keys.get_foreign_records(schema, table)


__all__ = ["DataAccess"]
