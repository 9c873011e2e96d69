"""
Comment persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core.db import Database


async def create_comment(database: Database, *, handle: str, project_id: int, content: str) -> dict[str, Any]:
    row = await database.fetch_one(
        """
        INSERT INTO comments (user_id, project_id, content)
        VALUES ($1, $2, $3)
        RETURNING id, user_id, project_id, content, created_at
        """,
        handle,
        project_id,
        content,
    )
    if row is None:
        raise RuntimeError("Failed to create comment.")
    return row


async def list_comments(database: Database, project_id: int) -> list[dict[str, Any]]:
    """
    Comments on a project with the commenter's nickname, newest first.
    """
    return await database.fetch_all(
        """
        SELECT c.id, c.content, c.created_at, u.user_id, u.nickname
        FROM comments c
        JOIN users u ON u.user_id = c.user_id
        WHERE c.project_id = $1
        ORDER BY c.created_at DESC, c.id DESC
        """,
        project_id,
    )


async def delete_comment(database: Database, comment_id: int) -> dict[str, Any] | None:
    return await database.fetch_one(
        """
        DELETE FROM comments
        WHERE id = $1
        RETURNING id
        """,
        comment_id,
    )
