"""
Pytest configuration for pgdba.

Provides fixtures for:
- A scripted in-memory executor for unit tests (no database needed)
- Database connection management for integration tests
- Seeding the demo schema
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import psycopg
import pytest

from pgdba.config import Settings
from pgdba.infrastructure.gateway import Query, ResultSet


class ScriptedExecutor:
    """
    Stand-in for `ConnectionGateway` that replays queued results.

    Each `execute` call pops the next queued response (a list of row lists,
    one per statement) and records the rendered query text and params.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self._responses: List[Any] = []

    def queue(self, *result_sets: Iterable[Dict[str, Any]], rowcount: Optional[int] = None) -> None:
        response: List[ResultSet] = []
        for rows in result_sets:
            rows = list(rows)
            response.append(
                ResultSet(
                    rows=rows,
                    rowcount=len(rows) if rowcount is None else rowcount,
                    status="SELECT",
                )
            )
        self._responses.append(response)

    def fail_next(self, exc: Exception) -> None:
        self._responses.append(exc)

    async def execute(self, query: Query, params: Optional[Sequence[Any]] = None) -> List[ResultSet]:
        text = query if isinstance(query, str) else query.as_string()
        self.calls.append((text, tuple(params or ())))
        if not self._responses:
            raise AssertionError(f"unexpected query: {text}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def queries(self) -> List[str]:
        return [text for text, _ in self.calls]


@pytest.fixture
def executor() -> ScriptedExecutor:
    return ScriptedExecutor()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "postgres"),
        db_sslmode=os.getenv("DB_SSLMODE", "prefer"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    from pgdba.infrastructure.db_factory import build_dsn

    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="function")
def seeded_demo(test_dsn: str, db_connection_available: bool) -> str:
    """
    Recreate the demo schema before each integration test.

    Returns the demo schema name. Skips when the database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    from scripts.seed_demo import DEMO_SCHEMA, seed

    seed(test_dsn)
    return DEMO_SCHEMA
