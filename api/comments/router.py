"""
Comment API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from core.db import Database, get_database

from . import schemas, service

router = APIRouter(prefix="/api")


@router.post("/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    request: schemas.CommentCreateRequest,
    database: Database = Depends(get_database),
) -> dict:
    comment = await service.add_comment(database, request)
    return {"message": "Comment added.", "comment": comment}


@router.get("/comments/{project_id}")
async def list_comments(
    project_id: int,
    database: Database = Depends(get_database),
) -> dict:
    comments = await service.list_comments(database, project_id)
    return {"comments": comments}


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: int,
    database: Database = Depends(get_database),
) -> dict:
    await service.delete_comment(database, comment_id)
    return {"message": "Comment deleted."}
