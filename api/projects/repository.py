"""
Project and like persistence.

Listing rows carry the owner's nickname, like/comment counts and whether the
viewing user liked the project. Counts come from per-project subqueries so the
joins never multiply rows.
"""

from __future__ import annotations

from typing import Any

from core.db import Database

_PROJECT_COLUMNS = "id, title, user_id, url, thumbnail, description, created_at"

_PROJECT_VIEW_SQL = """
    SELECT
      p.id,
      p.title,
      p.user_id,
      p.url,
      p.thumbnail,
      p.description,
      p.created_at,
      u.nickname,
      COALESCE(likes_stats.like_count, 0) AS like_count,
      COALESCE(comment_stats.comment_count, 0) AS comment_count,
      EXISTS (
        SELECT 1
        FROM likes mine
        WHERE mine.project_id = p.id
          AND mine.user_id = $1::text
      ) AS liked
    FROM projects p
    JOIN users u ON u.user_id = p.user_id
    LEFT JOIN LATERAL (
      SELECT count(*) AS like_count
      FROM likes l
      WHERE l.project_id = p.id
    ) likes_stats ON true
    LEFT JOIN LATERAL (
      SELECT count(*) AS comment_count
      FROM comments c
      WHERE c.project_id = p.id
    ) comment_stats ON true
"""


async def project_exists_for_owner(database: Database, *, title: str, owner: str) -> bool:
    row = await database.fetch_one(
        """
        SELECT 1 AS ok
        FROM projects
        WHERE title = $1
          AND user_id = $2
        LIMIT 1
        """,
        title,
        owner,
    )
    return row is not None


async def create_project(
    database: Database,
    *,
    title: str,
    owner: str,
    url: str | None,
    thumbnail: str | None,
    description: str | None,
) -> dict[str, Any]:
    row = await database.fetch_one(
        f"""
        INSERT INTO projects (title, user_id, url, thumbnail, description)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING {_PROJECT_COLUMNS}
        """,
        title,
        owner,
        url,
        thumbnail,
        description,
    )
    if row is None:
        raise RuntimeError("Failed to create project.")
    return row


async def list_projects(database: Database, *, viewer: str | None = None) -> list[dict[str, Any]]:
    """
    All projects, newest first. `liked` is false everywhere for anonymous viewers.
    """
    return await database.fetch_all(
        _PROJECT_VIEW_SQL
        + """
        ORDER BY p.created_at DESC, p.id DESC
        """,
        viewer,
    )


async def get_project(database: Database, project_id: int, *, viewer: str | None = None) -> dict[str, Any] | None:
    return await database.fetch_one(
        _PROJECT_VIEW_SQL
        + """
        WHERE p.id = $2
        """,
        viewer,
        project_id,
    )


async def get_project_row(database: Database, project_id: int) -> dict[str, Any] | None:
    return await database.fetch_one(
        f"""
        SELECT {_PROJECT_COLUMNS}
        FROM projects
        WHERE id = $1
        """,
        project_id,
    )


async def update_project(
    database: Database,
    project_id: int,
    *,
    title: str,
    owner: str,
    url: str | None,
    thumbnail: str | None,
    description: str | None,
) -> dict[str, Any] | None:
    """
    Overwrite every editable column. Returns None when the project does not exist.
    """
    return await database.fetch_one(
        f"""
        UPDATE projects
        SET title = $1,
            user_id = $2,
            url = $3,
            thumbnail = $4,
            description = $5
        WHERE id = $6
        RETURNING {_PROJECT_COLUMNS}
        """,
        title,
        owner,
        url,
        thumbnail,
        description,
        project_id,
    )


async def delete_project(database: Database, project_id: int) -> dict[str, Any] | None:
    return await database.fetch_one(
        """
        DELETE FROM projects
        WHERE id = $1
        RETURNING id
        """,
        project_id,
    )


async def toggle_like(database: Database, *, handle: str, project_id: int) -> bool | None:
    """
    Flip the like for (handle, project) based on what is stored.

    Returns the new liked state, or None when the project does not exist.
    """
    async with database.transaction() as tx:
        project = await tx.fetch_one(
            """
            SELECT id
            FROM projects
            WHERE id = $1
            FOR SHARE
            """,
            project_id,
        )
        if project is None:
            return None

        row = await tx.fetch_one(
            """
            WITH removed AS (
              DELETE FROM likes
              WHERE user_id = $1::text
                AND project_id = $2::integer
              RETURNING id
            ),
            added AS (
              INSERT INTO likes (user_id, project_id)
              SELECT $1::text, $2::integer
              WHERE NOT EXISTS (SELECT 1 FROM removed)
              ON CONFLICT (user_id, project_id) DO NOTHING
              RETURNING id
            )
            SELECT EXISTS (SELECT 1 FROM added) AS liked
            """,
            handle,
            project_id,
        )
        return bool(row["liked"]) if row is not None else False
