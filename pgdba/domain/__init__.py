"""
Domain package for pgdba.

Exports the row and catalog models shared by the access layer and the CLI.
Keep this package focused on data definitions and validation concerns.
"""

from pgdba.domain.models import (
    ColumnMetadata,
    ForeignKeyConstraint,
    Record,
    SqlValue,
    TableInfo,
)

__all__ = [
    "ColumnMetadata",
    "ForeignKeyConstraint",
    "Record",
    "SqlValue",
    "TableInfo",
]
