"""
Auth API endpoints: availability checks, registration, login/logout, current user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from core.db import Database, get_database

from . import schemas, security, service
from .dependencies import optional_identity

router = APIRouter(prefix="/api")


def _availability_response(result: schemas.AvailabilityResponse) -> JSONResponse:
    status_code = status.HTTP_200_OK if result.available else status.HTTP_409_CONFLICT
    return JSONResponse(status_code=status_code, content=result.model_dump())


@router.post("/check-nickname")
async def check_nickname(
    request: schemas.CheckNicknameRequest,
    database: Database = Depends(get_database),
) -> JSONResponse:
    result = await service.check_nickname(database, request.nickname)
    return _availability_response(result)


@router.post("/check-username")
async def check_username(
    request: schemas.CheckUsernameRequest,
    database: Database = Depends(get_database),
) -> JSONResponse:
    result = await service.check_username(database, request.username)
    return _availability_response(result)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: schemas.RegisterRequest,
    database: Database = Depends(get_database),
) -> schemas.AuthResponse:
    return await service.register(database, request)


@router.post("/login")
async def login(
    request: schemas.LoginRequest,
    response: Response,
    database: Database = Depends(get_database),
) -> schemas.AuthResponse:
    result, token = await service.login(database, request)
    security.set_session_cookie(response, token)
    return result


@router.post("/logout")
async def logout(response: Response) -> dict:
    security.clear_session_cookie(response)
    return {"message": "Logout successful."}


@router.get("/user", response_model=None)
async def current_user(
    identity: dict | None = Depends(optional_identity),
    database: Database = Depends(get_database),
) -> Response | dict:
    user = await service.current_user(database, identity)
    if user is None:
        return Response(status_code=status.HTTP_200_OK)
    return {"user": user}
