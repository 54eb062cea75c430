"""
pgdba - schema-agnostic data access for PostgreSQL.

Works on any table named at runtime:

- Introspects schemas, tables, columns and foreign keys from information_schema
- Builds parameterized SELECT/INSERT/UPDATE/DELETE statements for unknown table shapes
- Resolves foreign-key columns into nested records with batched lookups
- Batches catalog and data queries into single multi-statement round trips

Identifiers are rendered as quoted SQL identifiers and trusted; values are
always bound parameters.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from pgdba.config import ConnectionProfile, Settings, get_settings, load_connection_profile
from pgdba.domain.models import ColumnMetadata, ForeignKeyConstraint, Record, TableInfo
from pgdba.errors import ConfigurationError, ConnectionUnavailable, DataAccessError, QueryError
from pgdba.infrastructure.gateway import ConnectionGateway, QueryExecutor, ResultSet
from pgdba.service import DataAccess
from pgdba.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "ConnectionProfile",
    "Settings",
    "get_settings",
    "load_connection_profile",
    # Models
    "ColumnMetadata",
    "ForeignKeyConstraint",
    "Record",
    "TableInfo",
    # Errors
    "ConfigurationError",
    "ConnectionUnavailable",
    "DataAccessError",
    "QueryError",
    # Access
    "ConnectionGateway",
    "DataAccess",
    "QueryExecutor",
    "ResultSet",
    # Logging
    "configure_logging",
    "get_logger",
]
