"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. FastAPI builds it on startup, keeps it on
`app.state` and closes it on shutdown (see `api/main.py`). Handlers receive it
through `Depends(get_database)`.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request

from . import settings


class ConflictError(RuntimeError):
    """
    A unique constraint rejected the write.
    """

    def __init__(self, message: str, *, constraint: str | None = None) -> None:
        super().__init__(message)
        self.constraint = constraint


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    return _sanitize_database_url(settings.database_url())


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def _conflict(exc: asyncpg.UniqueViolationError) -> ConflictError:
    constraint = getattr(exc, "constraint_name", None)
    return ConflictError(f"Unique constraint violated: {constraint or 'unknown'}", constraint=constraint)


class Database:
    """
    Thin wrapper over an asyncpg pool or a transaction-bound connection.
    """

    def __init__(self, executor: asyncpg.Pool | asyncpg.Connection) -> None:
        self._executor = executor

    @classmethod
    async def connect(cls, dsn: str | None = None) -> "Database":
        pool = await asyncpg.create_pool(
            dsn=dsn or database_url(),
            min_size=settings.db_pool_min_size(),
            max_size=settings.db_pool_max_size(),
            command_timeout=30,
        )
        return cls(pool)

    async def close(self) -> None:
        if isinstance(self._executor, asyncpg.Pool):
            await self._executor.close()

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        try:
            row = await self._executor.fetchrow(sql, *args)
        except asyncpg.UniqueViolationError as exc:
            raise _conflict(exc) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        rows = await self._executor.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
        """
        try:
            await self._executor.execute(sql, *args)
        except asyncpg.UniqueViolationError as exc:
            raise _conflict(exc) from exc

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["Database"]:
        """
        Yield a Database bound to one connection inside a transaction.
        """
        if not isinstance(self._executor, asyncpg.Pool):
            # Already bound to a connection: nest as a savepoint.
            async with self._executor.transaction():
                yield self
            return

        async with self._executor.acquire() as conn:  # type: asyncpg.Connection
            async with conn.transaction():
                yield Database(conn)


def get_database(request: Request) -> Database:
    database = getattr(request.app.state, "db", None)
    if database is None:
        raise RuntimeError("Database is not initialized. It is created in the app lifespan.")
    return database
