"""Test configuration and fixtures."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from auth import security
from core.db import get_database
from core.storage import ThumbnailStorage, get_storage
from main import app

BUCKET = "thumbs"
REGION = "ap-northeast-2"
CREATED_AT = datetime(2024, 11, 2, 9, 30, tzinfo=timezone.utc)


class FakeDatabase:
    """Stands in for the pool; every query must be patched at the repository layer."""

    async def fetch_one(self, sql: str, *args: Any) -> dict | None:
        raise AssertionError(f"Unexpected fetch_one: {sql.strip()[:60]}")

    async def fetch_all(self, sql: str, *args: Any) -> list[dict]:
        raise AssertionError(f"Unexpected fetch_all: {sql.strip()[:60]}")

    async def execute(self, sql: str, *args: Any) -> None:
        raise AssertionError(f"Unexpected execute: {sql.strip()[:60]}")

    @asynccontextmanager
    async def transaction(self):
        yield self


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def s3_client() -> MagicMock:
    return MagicMock(name="s3_client")


@pytest.fixture
def storage(s3_client: MagicMock) -> ThumbnailStorage:
    return ThumbnailStorage(s3_client, bucket=BUCKET, region=REGION)


@pytest.fixture
def client(fake_db: FakeDatabase, storage: ThumbnailStorage):
    """HTTPS test client so secure cookies behave as in production."""
    app.dependency_overrides[get_database] = lambda: fake_db
    app.dependency_overrides[get_storage] = lambda: storage
    # No context manager: the lifespan (real pool, real S3 client) never runs.
    test_client = TestClient(app, base_url="https://testserver", raise_server_exceptions=False)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_cookie() -> dict[str, str]:
    token = security.build_session_token(handle="alice", user_id=1)
    return {"Cookie": f"{security.SESSION_COOKIE_NAME}={token}"}


def project_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": 10,
        "title": "My App",
        "user_id": "alice",
        "url": "https://example.com",
        "thumbnail": None,
        "description": "A demo project",
        "created_at": CREATED_AT,
    }
    row.update(overrides)
    return row


def project_view(**overrides: Any) -> dict[str, Any]:
    row = project_row(nickname="Alice", like_count=0, comment_count=0, liked=False)
    row.update(overrides)
    return row
