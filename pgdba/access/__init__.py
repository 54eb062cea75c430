"""
Access package for pgdba.

Re-exports the statement builders and the catalog, record and foreign-key
components so downstream code can import from `pgdba.access` directly.
"""

from pgdba.access.catalog import SchemaCatalog
from pgdba.access.foreign_keys import ForeignKeyResolver
from pgdba.access.query_builder import Statement, TableRef, batch
from pgdba.access.records import RecordRepository

__all__ = [
    # Statement building
    "Statement",
    "TableRef",
    "batch",
    # Components
    "ForeignKeyResolver",
    "RecordRepository",
    "SchemaCatalog",
]
