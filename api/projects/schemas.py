"""
Pydantic schemas for project and like endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProjectUpdateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    user_id: str = Field(..., min_length=1, max_length=50)
    url: str | None = Field(default=None, max_length=2048)
    thumbnail: str | None = Field(default=None, max_length=2048)
    description: str | None = None


class LikeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: int = Field(..., alias="projectId", ge=1)
    # Accepted from older clients; the stored state decides the toggle.
    liked: bool | None = None
