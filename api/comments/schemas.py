"""
Pydantic schemas for comment endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CommentCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: int | None = Field(default=None, alias="projectId")
    user_id: str | None = Field(default=None, alias="userId", max_length=50)
    content: str | None = Field(default=None, max_length=5000)
