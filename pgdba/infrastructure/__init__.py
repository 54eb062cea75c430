"""
Infrastructure package for pgdba.

Centralizes database connectivity concerns (pool creation, statement
execution). Keep this layer focused on I/O and resource management, decoupled
from statement building and record handling.
"""

from pgdba.infrastructure.db_factory import build_dsn, create_async_pool
from pgdba.infrastructure.gateway import ConnectionGateway, Query, QueryExecutor, ResultSet

__all__ = [
    "build_dsn",
    "create_async_pool",
    "ConnectionGateway",
    "Query",
    "QueryExecutor",
    "ResultSet",
]
