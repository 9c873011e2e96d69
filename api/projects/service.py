"""
Project business logic.

Creating and deleting a project touches both object storage and the database:
- create: duplicate check, upload, insert. A failed insert removes the upload,
  unless a unique conflict shows the key already belongs to another row.
- delete: remove the thumbnail first; the row stays if that fails.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, UploadFile, status

from core.db import ConflictError, Database
from core.storage import StorageError, ThumbnailStorage, thumbnail_key

from . import repository, schemas

logger = logging.getLogger(__name__)

DUPLICATE_PROJECT_MESSAGE = "A project with the same title already exists."
PROJECT_NOT_FOUND_MESSAGE = "Project not found."


def _has_upload(thumbnail: UploadFile | None) -> bool:
    return thumbnail is not None and bool(thumbnail.filename)


async def _discard_upload(storage: ThumbnailStorage, key: str | None) -> None:
    if key is None:
        return
    try:
        await storage.delete(key)
    except StorageError:
        # The project row was never written; only an orphaned object remains.
        logger.exception("thumbnail_rollback_failed key=%s", key)


def _owned_thumbnail_key(storage: ThumbnailStorage, row: dict[str, Any]) -> str:
    """
    Key of the project's thumbnail object.

    Titles can change after upload, so the key recorded in the URL wins, but
    only when it lies under the owner's prefix.
    """
    owner = str(row["user_id"])
    key = storage.key_from_url(row.get("thumbnail"))
    if key is not None and key.startswith(f"{owner}/"):
        return key
    return thumbnail_key(owner, str(row["title"]))


async def create_project(
    database: Database,
    storage: ThumbnailStorage,
    *,
    title: str,
    owner: str,
    url: str | None,
    description: str | None,
    thumbnail: UploadFile | None = None,
) -> dict[str, Any]:
    if await repository.project_exists_for_owner(database, title=title, owner=owner):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_PROJECT_MESSAGE)

    uploaded_key: str | None = None
    thumbnail_url: str | None = None
    if _has_upload(thumbnail):
        key = thumbnail_key(owner, title)
        data = await thumbnail.read()
        try:
            thumbnail_url = await storage.put(key, data, thumbnail.content_type)
        except StorageError as exc:
            logger.exception("thumbnail_upload_failed key=%s", key)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to upload thumbnail.",
            ) from exc
        uploaded_key = key

    try:
        row = await repository.create_project(
            database,
            title=title,
            owner=owner,
            url=url,
            thumbnail=thumbnail_url,
            description=description,
        )
    except ConflictError as exc:
        # The key belongs to the row that won the insert; its object must stay.
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_PROJECT_MESSAGE) from exc
    except Exception:
        await _discard_upload(storage, uploaded_key)
        raise

    logger.info("project_created id=%s owner=%s", row["id"], owner)
    return row


async def list_projects(database: Database, *, identity: dict | None) -> list[dict[str, Any]]:
    viewer = identity["user_id"] if identity else None
    return await repository.list_projects(database, viewer=viewer)


async def get_project(database: Database, project_id: int, *, identity: dict | None) -> dict[str, Any]:
    viewer = identity["user_id"] if identity else None
    row = await repository.get_project(database, project_id, viewer=viewer)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND_MESSAGE)
    return row


async def update_project(
    database: Database,
    project_id: int,
    payload: schemas.ProjectUpdateRequest,
) -> dict[str, Any]:
    try:
        row = await repository.update_project(
            database,
            project_id,
            title=payload.title,
            owner=payload.user_id,
            url=payload.url,
            thumbnail=payload.thumbnail,
            description=payload.description,
        )
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_PROJECT_MESSAGE) from exc

    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND_MESSAGE)
    return row


async def delete_project(database: Database, storage: ThumbnailStorage, project_id: int) -> None:
    row = await repository.get_project_row(database, project_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND_MESSAGE)

    if row.get("thumbnail"):
        key = _owned_thumbnail_key(storage, row)
        try:
            await storage.delete(key)
        except StorageError as exc:
            logger.exception("thumbnail_delete_failed project_id=%s key=%s", project_id, key)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete thumbnail.",
            ) from exc

    deleted = await repository.delete_project(database, project_id)
    if deleted is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND_MESSAGE)
    logger.info("project_deleted id=%s", project_id)


async def toggle_like(database: Database, *, identity: dict, project_id: int) -> dict[str, Any]:
    handle = identity["user_id"]
    liked = await repository.toggle_like(database, handle=handle, project_id=project_id)
    if liked is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND_MESSAGE)

    project = await repository.get_project(database, project_id, viewer=handle)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND_MESSAGE)

    return {
        "message": "Like added." if liked else "Like removed.",
        "project": project,
    }
