"""
Environment-driven configuration.

Values are read on each call so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def database_url() -> str:
    url = _env_str("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return url


def db_pool_min_size() -> int:
    return _env_int("DB_POOL_MIN_SIZE", 1)


def db_pool_max_size() -> int:
    return _env_int("DB_POOL_MAX_SIZE", 5)


def allowed_origins() -> list[str]:
    raw = os.environ.get("ALLOWED_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def aws_region() -> str:
    return _env_str("AWS_REGION")


def s3_bucket_name() -> str:
    bucket = _env_str("AWS_S3_BUCKET_NAME")
    if not bucket:
        raise RuntimeError("AWS_S3_BUCKET_NAME is not set.")
    return bucket


def s3_endpoint_url() -> str | None:
    return _env_str("AWS_S3_ENDPOINT_URL") or None


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
