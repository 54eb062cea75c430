"""
Statement builders for tables whose shape is only known at runtime.

Names and values reach SQL text through two separate paths: schema, table and
column names only ever enter as `psycopg.sql.Identifier` (double-quoted,
case preserved), values only ever as `psycopg.sql.Placeholder` bound at
execution time. No builder accepts raw SQL text for either.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import chain
from typing import Any, Optional, Sequence, Tuple

from psycopg import sql

from pgdba.domain.models import ForeignKeyConstraint, Record, SqlValue


@dataclass(frozen=True)
class TableRef:
    """A schema-qualified table name, rendered as `"schema"."table"`."""

    schema: str
    table: str

    @classmethod
    def of(cls, record: Record) -> "TableRef":
        return cls(record.table_schema, record.table_name)

    @property
    def identifier(self) -> sql.Identifier:
        return _identifier(self.schema, self.table)

    def __str__(self) -> str:
        return f"{self.schema}.{self.table}"


@dataclass(frozen=True)
class Statement:
    """A composed query and the values bound to its placeholders, in order."""

    query: sql.Composable
    params: Tuple[Any, ...] = ()

    def as_string(self, context: Optional[Any] = None) -> str:
        return self.query.as_string(context)


def _identifier(*names: str) -> sql.Identifier:
    # Statements always run with a params tuple, so the driver reads `%` in the
    # query text as a placeholder marker; a literal `%` in a name must be `%%`.
    return sql.Identifier(*(name.replace("%", "%%") for name in names))


def _placeholders(count: int) -> sql.Composed:
    return sql.SQL(", ").join([sql.Placeholder()] * count)


def _is_id_column(column: str) -> bool:
    return column.lower() == "id"


def batch(*statements: Statement) -> Statement:
    """
    Join statements into one multi-statement Statement.

    Params are concatenated in statement order, so each statement's values
    still line up with its own placeholders.
    """
    if not statements:
        raise ValueError("batch() needs at least one statement")
    return Statement(
        query=sql.SQL("; ").join([s.query for s in statements]),
        params=tuple(chain.from_iterable(s.params for s in statements)),
    )


# Catalog


def build_list_schemas() -> Statement:
    return Statement(sql.SQL("SELECT schema_name FROM information_schema.schemata"))


def build_list_tables(schema: str) -> Statement:
    return Statement(
        sql.SQL(
            "SELECT table_schema, table_name, table_type "
            "FROM information_schema.tables "
            "WHERE table_schema = {}"
        ).format(sql.Placeholder()),
        (schema,),
    )


def build_list_columns(ref: TableRef) -> Statement:
    return Statement(
        sql.SQL(
            "SELECT table_schema, table_name, column_name, data_type, "
            "ordinal_position, is_nullable, column_default "
            "FROM information_schema.columns "
            "WHERE table_schema = {} AND table_name = {} "
            "ORDER BY ordinal_position"
        ).format(sql.Placeholder(), sql.Placeholder()),
        (ref.schema, ref.table),
    )


def build_foreign_keys(ref: TableRef) -> Statement:
    return Statement(
        sql.SQL(
            "SELECT kcu.column_name, "
            "ccu.table_schema AS foreign_table_schema, "
            "ccu.table_name AS foreign_table_name, "
            "ccu.column_name AS foreign_column_name "
            "FROM information_schema.table_constraints AS tc "
            "JOIN information_schema.key_column_usage AS kcu "
            "ON tc.constraint_name = kcu.constraint_name "
            "AND tc.constraint_schema = kcu.constraint_schema "
            "JOIN information_schema.constraint_column_usage AS ccu "
            "ON ccu.constraint_name = tc.constraint_name "
            "AND ccu.constraint_schema = tc.constraint_schema "
            "WHERE tc.constraint_type = 'FOREIGN KEY' "
            "AND tc.table_schema = {} AND tc.table_name = {}"
        ).format(sql.Placeholder(), sql.Placeholder()),
        (ref.schema, ref.table),
    )


# Data


def build_select(ref: TableRef) -> Statement:
    return Statement(sql.SQL("SELECT * FROM {}").format(ref.identifier))


def build_select_by_id(ref: TableRef, record_id: SqlValue) -> Statement:
    return Statement(
        sql.SQL("SELECT * FROM {} WHERE id = {}").format(ref.identifier, sql.Placeholder()),
        (record_id,),
    )


def build_foreign_lookup(fk: ForeignKeyConstraint, ids: Sequence[SqlValue]) -> Statement:
    """Select the rows of the referenced table whose key is one of `ids`."""
    if not ids:
        raise ValueError(f"no values to look up for foreign key column {fk.column_name!r}")
    ref = TableRef(fk.foreign_table_schema, fk.foreign_table_name)
    return Statement(
        sql.SQL("SELECT * FROM {} WHERE {} IN ({})").format(
            ref.identifier,
            _identifier(fk.foreign_column_name),
            _placeholders(len(ids)),
        ),
        tuple(ids),
    )


def build_insert(ref: TableRef, record: Record) -> Statement:
    """
    INSERT every column of `record` except `id` (any case), returning the new id.

    The record itself is left untouched.
    """
    pairs = [
        (column, value)
        for column, value in zip(record.columns, record.bound_values())
        if not _is_id_column(column)
    ]
    if not pairs:
        return Statement(
            sql.SQL("INSERT INTO {} DEFAULT VALUES RETURNING id").format(ref.identifier)
        )
    return Statement(
        sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING id").format(
            ref.identifier,
            sql.SQL(", ").join([_identifier(column) for column, _ in pairs]),
            _placeholders(len(pairs)),
        ),
        tuple(value for _, value in pairs),
    )


def build_update(ref: TableRef, record: Record) -> Statement:
    """UPDATE every column of `record` on the row whose id is `record.id`."""
    if not record.columns:
        raise ValueError(f"record for {ref} has no columns to update")
    # ROW() keeps the multi-column form valid when the table has one column.
    return Statement(
        sql.SQL("UPDATE {} SET ({}) = ROW({}) WHERE id = {}").format(
            ref.identifier,
            sql.SQL(", ").join([_identifier(column) for column in record.columns]),
            _placeholders(len(record.columns)),
            sql.Placeholder(),
        ),
        (*record.bound_values(), record.id),
    )


def build_delete(ref: TableRef, record_id: SqlValue) -> Statement:
    return Statement(
        sql.SQL("DELETE FROM {} WHERE id = {}").format(ref.identifier, sql.Placeholder()),
        (record_id,),
    )


__all__ = [
    "Statement",
    "TableRef",
    "batch",
    "build_delete",
    "build_foreign_keys",
    "build_foreign_lookup",
    "build_insert",
    "build_list_columns",
    "build_list_schemas",
    "build_list_tables",
    "build_select",
    "build_select_by_id",
    "build_update",
]
