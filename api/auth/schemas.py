"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

# Handles and nicknames are compared after trimming; blank values are rejected.
Handle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Nickname = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class CheckNicknameRequest(BaseModel):
    nickname: Nickname


class CheckUsernameRequest(BaseModel):
    username: Handle


class RegisterRequest(BaseModel):
    username: Handle
    password: str = Field(..., min_length=1, max_length=128)
    nickname: Nickname


class LoginRequest(BaseModel):
    username: Handle
    password: str = Field(..., min_length=1, max_length=128)


class AvailabilityResponse(BaseModel):
    available: bool
    message: str


class UserResponse(BaseModel):
    id: int
    user_id: str
    nickname: str
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
