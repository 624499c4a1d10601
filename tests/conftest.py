"""
Shared fixtures.

Unit tests run against `FakePool`, a scripted stand-in for an asyncpg pool:
each call to fetchrow/fetch/execute consumes the next scripted response (or
raises it, if it is an exception) and is recorded for assertions.

Postgres-backed tests use `pg_pool` and are skipped unless
TEST_DATABASE_URL points at a scratch database.
"""

from __future__ import annotations

import os
import re
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from core import db

_ROOT = Path(__file__).resolve().parent.parent
_MIGRATIONS = _ROOT / "db" / "migrations"


def _normalize_sql(sql: str) -> str:
    return re.sub(r"\s+", " ", sql).strip()


class FakeTransaction:
    def __init__(self, conn: "FakeConnection") -> None:
        self.conn = conn

    async def __aenter__(self) -> "FakeTransaction":
        self.conn.events.append("begin")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.conn.events.append("rollback" if exc_type is not None else "commit")
        return False


class FakeConnection:
    def __init__(self) -> None:
        self.responses: list[Any] = []
        self.calls: list[tuple[str, str, tuple]] = []
        self.events: list[str] = []

    def script(self, *responses: Any) -> "FakeConnection":
        self.responses.extend(responses)
        return self

    def _next(self, method: str, sql: str, args: tuple) -> Any:
        self.calls.append((method, _normalize_sql(sql), args))
        if not self.responses:
            raise AssertionError(f"Unscripted {method}: {_normalize_sql(sql)}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def fetchrow(self, sql: str, *args: Any) -> Any:
        return self._next("fetchrow", sql, args)

    async def fetch(self, sql: str, *args: Any) -> Any:
        return self._next("fetch", sql, args)

    async def execute(self, sql: str, *args: Any) -> Any:
        return self._next("execute", sql, args)

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)


class FakePool:
    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn
        self.acquired = 0
        self.released = 0

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        try:
            yield self.conn
        finally:
            self.released += 1

    async def fetchrow(self, sql: str, *args: Any) -> Any:
        async with self.acquire() as conn:
            return await conn.fetchrow(sql, *args)

    async def fetch(self, sql: str, *args: Any) -> Any:
        async with self.acquire() as conn:
            return await conn.fetch(sql, *args)

    async def execute(self, sql: str, *args: Any) -> Any:
        async with self.acquire() as conn:
            return await conn.execute(sql, *args)


@pytest.fixture()
def fake_pool(monkeypatch) -> FakePool:
    pool = FakePool(FakeConnection())
    monkeypatch.setattr(db, "_pool", pool)
    return pool


@pytest.fixture()
def fake_conn(fake_pool) -> FakeConnection:
    return fake_pool.conn


def _migration_up_sql() -> str:
    parts: list[str] = []
    for path in sorted(_MIGRATIONS.glob("*.sql")):
        text = path.read_text(encoding="utf-8")
        up = text.split("-- migrate:down", 1)[0]
        parts.append(up.replace("-- migrate:up", ""))
    return "\n".join(parts)


@pytest_asyncio.fixture()
async def pg_pool():
    url = os.environ.get("TEST_DATABASE_URL", "").strip()
    if not url:
        pytest.skip("TEST_DATABASE_URL is not set.")

    await db.init_pool(url)
    try:
        async with db.connection() as conn:
            await conn.execute("DROP TABLE IF EXISTS dashboard_items; DROP TABLE IF EXISTS dashboard;")
            await conn.execute(_migration_up_sql())
        yield db.pool()
    finally:
        await db.close_pool()
