"""
Auth business logic.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool

from core.db import ConflictError, Database

from . import repository, schemas, security

logger = logging.getLogger(__name__)

NICKNAME_CONSTRAINT = "users_nickname_key"


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        user_id=str(user_row["user_id"]),
        nickname=str(user_row["nickname"]),
        created_at=user_row.get("created_at"),
    )


async def check_nickname(database: Database, nickname: str) -> schemas.AvailabilityResponse:
    if await repository.nickname_exists(database, nickname):
        return schemas.AvailabilityResponse(available=False, message="Nickname is already in use.")
    return schemas.AvailabilityResponse(available=True, message="Nickname is available.")


async def check_username(database: Database, username: str) -> schemas.AvailabilityResponse:
    if await repository.handle_exists(database, username):
        return schemas.AvailabilityResponse(available=False, message="Username is already in use.")
    return schemas.AvailabilityResponse(available=True, message="Username is available.")


async def register(database: Database, payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    password_hash = await run_in_threadpool(security.hash_password, payload.password)
    try:
        user_row = await repository.create_user(
            database,
            handle=payload.username,
            password_hash=password_hash,
            nickname=payload.nickname,
        )
    except ConflictError as exc:
        detail = (
            "Nickname is already in use."
            if exc.constraint == NICKNAME_CONSTRAINT
            else "Username is already in use."
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail) from exc

    logger.info("user_registered id=%s user_id=%s", user_row["id"], user_row["user_id"])
    return schemas.AuthResponse(message="Registration successful.", user=_to_user_response(user_row))


async def login(database: Database, payload: schemas.LoginRequest) -> tuple[schemas.AuthResponse, str]:
    """
    Return the login response and a fresh session token for the cookie.
    """
    user_row = await repository.get_user_by_handle(database, payload.username)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
        )

    is_valid = await run_in_threadpool(
        security.verify_password,
        payload.password,
        str(user_row.get("password") or ""),
    )
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
        )

    token = security.build_session_token(handle=str(user_row["user_id"]), user_id=int(user_row["id"]))
    response = schemas.AuthResponse(message="Login successful.", user=_to_user_response(user_row))
    return response, token


async def current_user(database: Database, identity: dict | None) -> schemas.UserResponse | None:
    if identity is None:
        return None

    user_row = await repository.get_public_user(database, identity["user_id"])
    if user_row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return _to_user_response(user_row)
