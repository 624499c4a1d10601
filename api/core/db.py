"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

Every helper borrows a pooled connection for the duration of one call and
returns it on every exit path, exceptions included. Nothing else is kept
between calls.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings

_pool: asyncpg.Pool | None = None

logger = logging.getLogger(__name__)


class NoRowsAffected(RuntimeError):
    """
    Raised inside `run_in_transaction` when a statement that must touch a row
    touched none. The transaction is rolled back.
    """

    def __init__(self, index: int) -> None:
        super().__init__(f"Statement #{index} affected no rows.")
        self.index = index


@dataclass(frozen=True)
class Statement:
    sql: str
    args: Sequence[Any] = ()
    require_rows: bool = False


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = settings.env_str("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def init_pool(dsn: str | None = None) -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=dsn or database_url(),
        min_size=settings.pool_min_size(),
        max_size=settings.pool_max_size(),
        command_timeout=settings.command_timeout_s(),
    )
    logger.info(
        "db_pool_ready min_size=%s max_size=%s",
        settings.pool_min_size(),
        settings.pool_max_size(),
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def affected_rows(status: str | None) -> int:
    """
    Parse the row count out of a command tag such as "UPDATE 3" or "INSERT 0 1".
    """
    tail = (status or "").rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else 0


@asynccontextmanager
async def connection() -> AsyncIterator[asyncpg.Connection]:
    """
    Borrow one connection from the pool for several statements.
    """
    async with pool().acquire() as conn:
        yield conn


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool().fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool().fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(sql: str, *args: Any) -> int:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the affected row count.
    """
    status = await pool().execute(sql, *args)
    return affected_rows(status)


async def run_in_transaction(statements: Sequence[Statement]) -> list[int]:
    """
    Run the statements in order as one transaction.

    Any failure, including `NoRowsAffected`, rolls back every statement.
    Returns per-statement affected row counts.
    """
    counts: list[int] = []
    if not statements:
        return counts

    async with connection() as conn:
        async with conn.transaction():
            for index, statement in enumerate(statements):
                status = await conn.execute(statement.sql, *statement.args)
                count = affected_rows(status)
                if statement.require_rows and count == 0:
                    raise NoRowsAffected(index)
                counts.append(count)
    return counts
