"""
Auth persistence helpers.

`users.user_id` is the login handle; `users.id` is the numeric key.
"""

from __future__ import annotations

from core.db import Database


def normalize_handle(handle: str) -> str:
    return (handle or "").strip()


async def handle_exists(database: Database, handle: str) -> bool:
    row = await database.fetch_one(
        """
        SELECT 1 AS ok
        FROM users
        WHERE user_id = $1
        LIMIT 1
        """,
        normalize_handle(handle),
    )
    return row is not None


async def nickname_exists(database: Database, nickname: str) -> bool:
    row = await database.fetch_one(
        """
        SELECT 1 AS ok
        FROM users
        WHERE nickname = $1
        LIMIT 1
        """,
        (nickname or "").strip(),
    )
    return row is not None


async def create_user(database: Database, *, handle: str, password_hash: str, nickname: str) -> dict:
    row = await database.fetch_one(
        """
        INSERT INTO users (user_id, password, nickname)
        VALUES ($1, $2, $3)
        RETURNING id, user_id, nickname
        """,
        normalize_handle(handle),
        password_hash,
        (nickname or "").strip(),
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_handle(database: Database, handle: str) -> dict | None:
    """
    Includes the password hash; use only for credential checks.
    """
    return await database.fetch_one(
        """
        SELECT id, user_id, nickname, password, created_at
        FROM users
        WHERE user_id = $1
        """,
        normalize_handle(handle),
    )


async def get_public_user(database: Database, handle: str) -> dict | None:
    return await database.fetch_one(
        """
        SELECT id, user_id, nickname, created_at
        FROM users
        WHERE user_id = $1
        """,
        normalize_handle(handle),
    )
