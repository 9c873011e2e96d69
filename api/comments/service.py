"""
Comment business logic.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from core.db import Database

from . import repository, schemas

logger = logging.getLogger(__name__)


async def add_comment(database: Database, payload: schemas.CommentCreateRequest) -> dict[str, Any]:
    handle = (payload.user_id or "").strip()
    content = (payload.content or "").strip()
    if not payload.project_id or not handle or not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="projectId, userId and content are required.",
        )

    row = await repository.create_comment(
        database,
        handle=handle,
        project_id=payload.project_id,
        content=content,
    )
    logger.info("comment_created id=%s project_id=%s", row["id"], payload.project_id)
    return row


async def list_comments(database: Database, project_id: int) -> list[dict[str, Any]]:
    return await repository.list_comments(database, project_id)


async def delete_comment(database: Database, comment_id: int) -> None:
    row = await repository.delete_comment(database, comment_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found.")
