"""
Domain models for pgdba.

Tables are only known at runtime, so rows are held as untyped, ordered
column/value pairs (`Record`) instead of per-table models. Catalog rows
(columns, tables, foreign keys) have a fixed shape and are validated into
frozen models straight from the information_schema result rows.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

# Any scalar the driver can return (str, int, Decimal, bool, datetime, None...)
# or, after hydration, a nested Record.
SqlValue = Any


class ColumnMetadata(BaseModel):
    """
    Catalog description of one column, as found in information_schema.columns.
    """

    table_schema: str
    table_name: str
    column_name: str
    data_type: str
    ordinal_position: int = 0
    is_nullable: bool = True
    column_default: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("is_nullable", mode="before")
    @classmethod
    def _yes_no(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper() == "YES"
        return value


class TableInfo(BaseModel):
    """A table or view listed in information_schema.tables."""

    table_schema: str
    table_name: str
    table_type: str = "BASE TABLE"

    model_config = {"frozen": True, "extra": "ignore"}


class ForeignKeyConstraint(BaseModel):
    """Local column `column_name` references `foreign_table_schema.foreign_table_name.foreign_column_name`."""

    column_name: str
    foreign_table_schema: str
    foreign_table_name: str
    foreign_column_name: str

    model_config = {"frozen": True, "extra": "ignore"}


class Record(BaseModel):
    """
    One row of an arbitrary table.

    `original` keeps the row exactly as the data query returned it. `values`
    is index-aligned with the keys of `original` and is what statements are
    built from; the foreign-key resolver overwrites slots in it with nested
    Records, and callers assign new scalars before an update.
    """

    original: Dict[str, SqlValue] = Field(default_factory=dict)
    values: List[SqlValue] = Field(default_factory=list)
    table_schema: str
    table_name: str

    model_config = {"arbitrary_types_allowed": True}

    @model_validator(mode="after")
    def _values_align_with_columns(self) -> "Record":
        if len(self.values) != len(self.original):
            raise ValueError(
                f"values has {len(self.values)} entries but the row has "
                f"{len(self.original)} columns"
            )
        return self

    @classmethod
    def from_row(cls, row: Mapping[str, SqlValue], table_schema: str, table_name: str) -> "Record":
        original = dict(row)
        return cls(
            original=original,
            values=list(original.values()),
            table_schema=table_schema,
            table_name=table_name,
        )

    @property
    def columns(self) -> List[str]:
        return list(self.original.keys())

    @property
    def id(self) -> SqlValue:
        """Primary key, read from the column named `id` (any case); None if absent."""
        if "id" in self.original:
            return self.original["id"]
        for column, value in self.original.items():
            if column.lower() == "id":
                return value
        return None

    def index_of(self, column: str) -> int:
        """Position of `column` in `values`; raises KeyError for unknown columns."""
        try:
            return self.columns.index(column)
        except ValueError:
            raise KeyError(column) from None

    def get(self, column: str) -> SqlValue:
        return self.values[self.index_of(column)]

    def set(self, column: str, value: SqlValue) -> None:
        self.values[self.index_of(column)] = value

    def update_value(self, index: int, value: SqlValue) -> None:
        if not 0 <= index < len(self.values):
            raise IndexError(f"column index {index} out of range for {len(self.values)} columns")
        self.values[index] = value

    def is_hydrated(self, column: str) -> bool:
        return isinstance(self.get(column), Record)

    def bound_values(self) -> List[SqlValue]:
        """
        Values ready to be bound as statement parameters.

        A hydrated slot is bound as the scalar the row originally held in that
        column, so an update never tries to write a nested Record.
        """
        return [
            self.original[column] if isinstance(value, Record) else value
            for column, value in zip(self.original, self.values)
        ]

    def as_dict(self) -> Dict[str, Any]:
        """Current values keyed by column, nested Records rendered recursively."""
        return {
            column: value.as_dict() if isinstance(value, Record) else value
            for column, value in zip(self.original, self.values)
        }


__all__ = [
    "ColumnMetadata",
    "ForeignKeyConstraint",
    "Record",
    "SqlValue",
    "TableInfo",
]
