"""
Error hierarchy for pgdba.

Absence (an empty table, a missing row, a dangling foreign key) is never
modelled as an exception; these types cover configuration, connectivity and
statements the database rejected.
"""

from __future__ import annotations

from typing import Optional


class DataAccessError(Exception):
    """Base class for every error raised by pgdba."""


class ConfigurationError(DataAccessError):
    """The connection configuration is missing or invalid."""


class ConnectionUnavailable(DataAccessError):
    """The database could not be reached or no connection could be acquired."""


class QueryError(DataAccessError):
    """
    A statement failed inside the database.

    The driver exception is chained as ``__cause__``; ``sqlstate`` is copied
    from it when the server reported one.
    """

    def __init__(self, message: str, sqlstate: Optional[str] = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


__all__ = [
    "DataAccessError",
    "ConfigurationError",
    "ConnectionUnavailable",
    "QueryError",
]
