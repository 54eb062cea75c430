"""
Foreign-key discovery and hydration.

Hydration replaces the scalar held in a Record's foreign-key column with a
nested Record of the referenced row. Lookups are batched: one `IN` query per
constraint no matter how many Records reference it, and all of a call's
queries travel together in a single round trip. Records are only touched once
every lookup has returned, so a failing call leaves them exactly as they were.

Nested Records are not hydrated themselves.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple

from pgdba.access.base import BaseAccessor
from pgdba.access.query_builder import (
    Statement,
    TableRef,
    batch,
    build_foreign_keys,
    build_foreign_lookup,
    build_select,
)
from pgdba.domain.models import ForeignKeyConstraint, Record, SqlValue
from pgdba.infrastructure.gateway import ResultSet
from pgdba.utils.logging import get_logger

log = get_logger(__name__)


def _distinct(values: Iterable[SqlValue]) -> List[SqlValue]:
    seen = set()
    unique: List[SqlValue] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


def _index_rows(result: ResultSet, column: str) -> Dict[SqlValue, Dict[str, Any]]:
    # First row wins when the referenced column is not unique; which row that
    # is depends on the server's scan order.
    indexed: Dict[SqlValue, Dict[str, Any]] = {}
    for row in result.rows:
        indexed.setdefault(row[column], row)
    return indexed


class ForeignKeyResolver(BaseAccessor):
    """Discover a table's foreign keys and resolve them into nested Records."""

    async def get_foreign_keys(self, schema: str, table: str) -> List[ForeignKeyConstraint]:
        result = await self._run_one(build_foreign_keys(TableRef(schema, table)))
        return [ForeignKeyConstraint.model_validate(row) for row in result.rows]

    async def populate_foreign_values(self, schema: str, table: str, records: List[Record]) -> None:
        """
        Hydrate the foreign-key columns of `records` in place.

        Null foreign-key values are left alone. A value with no matching
        referenced row keeps its scalar and is logged as a dangling reference.
        If any lookup fails the error propagates and no Record is modified.
        """
        if not records:
            return

        lookups: List[Tuple[ForeignKeyConstraint, Statement]] = []
        for fk in await self.get_foreign_keys(schema, table):
            ids = _distinct(
                record.original[fk.column_name]
                for record in records
                if record.original.get(fk.column_name) is not None
            )
            if ids:
                lookups.append((fk, build_foreign_lookup(fk, ids)))
        if not lookups:
            return

        log.debug(
            "resolving foreign keys",
            extra={
                "table": f"{schema}.{table}",
                "constraints": len(lookups),
                "records": len(records),
            },
        )
        results = await self._run(batch(*(statement for _, statement in lookups)))

        for (fk, _), result in zip(lookups, results):
            self._hydrate(fk, _index_rows(result, fk.foreign_column_name), records)

    def _hydrate(
        self,
        fk: ForeignKeyConstraint,
        referenced: Dict[SqlValue, Dict[str, Any]],
        records: List[Record],
    ) -> None:
        for record in records:
            value = record.original.get(fk.column_name)
            if value is None:
                continue
            row = referenced.get(value)
            if row is None:
                log.warning(
                    "dangling foreign key",
                    extra={
                        "table": f"{record.table_schema}.{record.table_name}",
                        "column": fk.column_name,
                        "value": value,
                        "references": f"{fk.foreign_table_schema}.{fk.foreign_table_name}",
                    },
                )
                continue
            record.set(
                fk.column_name,
                Record.from_row(row, fk.foreign_table_schema, fk.foreign_table_name),
            )

    async def get_foreign_records(self, schema: str, table: str) -> Dict[str, List[Dict[str, Any]]]:
        """
        Every row of every table referenced by `schema.table`, keyed by local column.

        All referenced tables are read in one round trip.
        """
        foreign_keys = await self.get_foreign_keys(schema, table)
        if not foreign_keys:
            return {}
        results = await self._run(
            batch(
                *(
                    build_select(TableRef(fk.foreign_table_schema, fk.foreign_table_name))
                    for fk in foreign_keys
                )
            )
        )
        foreign_records: Dict[str, List[Dict[str, Any]]] = {}
        for fk, result in zip(foreign_keys, results):
            foreign_records[fk.column_name] = result.rows
        return foreign_records


__all__ = ["ForeignKeyResolver"]
