"""
Auth security helpers: password hashing and session tokens.
"""

from __future__ import annotations

import os
import time
from typing import Any

import bcrypt
import jwt
from fastapi import Response

SESSION_COOKIE_NAME = "token"


class AuthSecurityError(RuntimeError):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def jwt_secret() -> str:
    # Local default keeps development simple.
    # In production, set JWT_SECRET in environment.
    return os.environ.get("JWT_SECRET", "dev-change-this-secret").strip() or "dev-change-this-secret"


def jwt_algorithm() -> str:
    return os.environ.get("JWT_ALG", "HS256").strip() or "HS256"


def session_token_expire_minutes() -> int:
    return _env_int("SESSION_TOKEN_EXPIRE_MIN", 60)


def session_max_age_s() -> int:
    return session_token_expire_minutes() * 60


def bcrypt_rounds() -> int:
    return _env_int("BCRYPT_ROUNDS", 10)


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=bcrypt_rounds())).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_session_token(*, handle: str, user_id: int, issued_at: int | None = None) -> str:
    issued_at = now_epoch_s() if issued_at is None else issued_at
    expires_at = issued_at + session_max_age_s()

    payload = {
        "user_id": handle,
        "id": user_id,
        "type": "session",
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())


def decode_session_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Session token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.ExpiredSignatureError as exc:
        raise AuthSecurityError("Session token is expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid session token.") from exc

    if str(payload.get("type") or "").strip().lower() != "session":
        raise AuthSecurityError("Token is not a session token.")

    handle = str(payload.get("user_id") or "").strip()
    if not handle or not isinstance(payload.get("id"), int):
        raise AuthSecurityError("Session token is missing identity claims.")

    return {"user_id": handle, "id": int(payload["id"])}


def set_session_cookie(response: Response, token: str) -> None:
    # SameSite=None lets the cross-origin frontend send the cookie back.
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=session_max_age_s(),
        path="/",
        httponly=True,
        secure=True,
        samesite="none",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=True,
        samesite="none",
    )
