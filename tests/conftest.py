"""
Pytest configuration and fixtures for EQL envelope tests.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import asyncpg
from dotenv import load_dotenv

from eql_envelope import PostgresEqlStore

TABLE = "test_table"
COLUMN = "test_column"


@pytest.fixture
def proxy_envelope() -> Callable[..., bytes]:
    """Build the bytes a proxy would return for a plaintext string."""

    def _make(plaintext: Any, **extra: Any) -> bytes:
        data: Dict[str, Any] = {
            "k": "pt",
            "p": plaintext,
            "i": {"t": TABLE, "c": COLUMN},
            "v": 1,
        }
        data.update(extra)
        return json.dumps(data).encode("utf-8")

    return _make


@pytest.fixture
def mock_pool() -> MagicMock:
    """asyncpg pool stand-in with awaitable query methods."""
    pool = MagicMock(spec=asyncpg.Pool)
    pool.execute = AsyncMock(return_value="INSERT 0 1")
    pool.fetchrow = AsyncMock(return_value=None)
    pool.fetch = AsyncMock(return_value=[])
    return pool


@pytest.fixture
def mock_store(mock_pool: MagicMock) -> PostgresEqlStore:
    """Store backed by the mock pool."""
    return PostgresEqlStore(mock_pool)


@pytest.fixture
async def pg_pool() -> AsyncGenerator[asyncpg.Pool, None]:
    """Create a connection pool to the proxy for integration tests."""
    # Load environment from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(env_path)

    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set, skipping PostgreSQL tests")

    pool = await asyncpg.create_pool(database_url)
    if pool is None:
        pytest.skip("Failed to create PostgreSQL connection pool")

    yield pool

    await pool.close()


@pytest.fixture
async def postgres_store(pg_pool: asyncpg.Pool) -> PostgresEqlStore:
    """Create a store against the proxy for integration tests."""
    return PostgresEqlStore(pg_pool)
