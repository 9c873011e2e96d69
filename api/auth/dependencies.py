"""
Auth dependencies for FastAPI routes.

Identity comes from the `token` session cookie:
- `optional_identity` never fails; an absent or invalid cookie means anonymous.
- `require_identity` rejects anonymous callers with 401.
"""

from __future__ import annotations

import logging

from fastapi import Cookie, HTTPException, status

from . import security

logger = logging.getLogger(__name__)


async def optional_identity(token: str | None = Cookie(default=None)) -> dict | None:
    if not (token or "").strip():
        return None
    try:
        return security.decode_session_token(token)
    except security.AuthSecurityError as exc:
        logger.info("session_token_ignored reason=%s", exc)
        return None


async def require_identity(token: str | None = Cookie(default=None)) -> dict:
    if not (token or "").strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login is required.",
        )
    try:
        return security.decode_session_token(token)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

