"""
Database connection factory utilities for pgdba.

Builds the async psycopg connection pool the gateway runs on. The pool is the
explicit connection capability of the library: it is created here, handed to
`ConnectionGateway`, and closed by whoever created it.

Includes retry logic for transient connection failures using tenacity. Only
pool start-up is retried; statements are never retried.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import AsyncConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from pgdba.config import Settings, get_settings
from pgdba.errors import ConnectionUnavailable
from pgdba.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a libpq connection string from settings."""
    settings = settings or get_settings()
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        user=settings.db_user,
        password=settings.db_password,
        dbname=settings.db_name,
        sslmode=settings.db_sslmode,
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(psycopg.OperationalError),
    reraise=True,
)
async def _wait_until_ready(pool: AsyncConnectionPool, timeout: float) -> None:
    """Block until the pool holds `min_size` connections; raises PoolTimeout otherwise."""
    await pool.wait(timeout=timeout)


async def create_async_pool(
    settings: Optional[Settings] = None,
    dsn_override: Optional[str] = None,
) -> AsyncConnectionPool:
    """
    Create, open and warm up an asynchronous connection pool.

    Retries up to 3 times with exponential backoff while the server is
    unreachable.

    Parameters
    ----------
    settings : Settings, optional
        Connection and pool settings; defaults to `get_settings()`.
    dsn_override : str, optional
        Connection string used instead of the one built from settings.

    Returns
    -------
    AsyncConnectionPool
        An open pool. The caller owns it and must close it.

    Raises
    ------
    ConnectionUnavailable
        If no connection could be established after all retry attempts.
    """
    settings = settings or get_settings()
    pool = AsyncConnectionPool(
        conninfo=dsn_override or build_dsn(settings),
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.pool_timeout,
        open=False,
    )
    await pool.open()
    try:
        await _wait_until_ready(pool, settings.pool_timeout)
    except psycopg.OperationalError as exc:
        await pool.close()
        raise ConnectionUnavailable(
            f"Could not connect to {settings.db_host}:{settings.db_port}/{settings.db_name}: {exc}"
        ) from exc

    log.info(
        "connection pool ready",
        extra={
            "db_host": settings.db_host,
            "db_name": settings.db_name,
            "pool_min_size": settings.pool_min_size,
            "pool_max_size": settings.pool_max_size,
        },
    )
    return pool


__all__ = [
    "build_dsn",
    "create_async_pool",
]
