"""
Project and like API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from auth import dependencies as auth_dependencies
from core.db import Database, get_database
from core.storage import ThumbnailStorage, get_storage

from . import schemas, service

router = APIRouter(prefix="/api")


@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def create_project(
    title: str = Form(..., min_length=1, max_length=200),
    user_id: str = Form(..., min_length=1, max_length=50),
    url: str | None = Form(default=None),
    description: str | None = Form(default=None),
    thumbnail: UploadFile | None = File(default=None),
    database: Database = Depends(get_database),
    storage: ThumbnailStorage = Depends(get_storage),
) -> dict:
    project = await service.create_project(
        database,
        storage,
        title=title,
        owner=user_id,
        url=url,
        description=description,
        thumbnail=thumbnail,
    )
    return {"message": "Project created.", "project": project}


@router.get("/projects")
async def list_projects(
    identity: dict | None = Depends(auth_dependencies.optional_identity),
    database: Database = Depends(get_database),
) -> dict:
    projects = await service.list_projects(database, identity=identity)
    return {"projects": projects}


@router.get("/projects/{project_id}")
async def get_project(
    project_id: int,
    identity: dict | None = Depends(auth_dependencies.optional_identity),
    database: Database = Depends(get_database),
) -> dict:
    project = await service.get_project(database, project_id, identity=identity)
    return {"project": project}


@router.put("/projects/{project_id}")
async def update_project(
    project_id: int,
    request: schemas.ProjectUpdateRequest,
    database: Database = Depends(get_database),
) -> dict:
    project = await service.update_project(database, project_id, request)
    return {"message": "Project updated.", "project": project}


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: int,
    database: Database = Depends(get_database),
    storage: ThumbnailStorage = Depends(get_storage),
) -> dict:
    await service.delete_project(database, storage, project_id)
    return {"message": "Project deleted."}


@router.post("/like")
async def toggle_like(
    request: schemas.LikeRequest,
    identity: dict = Depends(auth_dependencies.require_identity),
    database: Database = Depends(get_database),
) -> dict:
    return await service.toggle_like(database, identity=identity, project_id=request.project_id)
