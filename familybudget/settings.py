from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DB_URL = "sqlite+pysqlite:///./data/familybudget.db"
DEFAULT_QUERY_TIMEOUT_SECONDS = 10.0


def _env(key: str, default: str | None = None, *, legacy: tuple[str, ...] = ()) -> str | None:
    """
    Read an env var with optional legacy fallbacks.

    Empty strings are treated as "unset" so an exported-but-blank variable
    does not override the default.
    """
    for k in (key, *legacy):
        v = os.environ.get(k)
        if v is not None and str(v).strip() != "":
            return v
    return default


def _parse_bool(v: str | None, default: bool) -> bool:
    if v is None:
        return default
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_int(v: str | None, default: int) -> int:
    if v is None:
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default


def _parse_float(v: str | None, default: float) -> float:
    if v is None:
        return default
    try:
        return float(str(v).strip())
    except ValueError:
        return default


def _postgres_url_from_parts() -> str | None:
    user = _env("POSTGRES_USER")
    password = _env("POSTGRES_PASSWORD")
    db_name = _env("POSTGRES_DB")
    host = _env("DB_CONTAINER_NAME")
    if not (user and password and db_name and host):
        return None
    return f"postgresql+psycopg://{user}:{password}@{host}:5432/{db_name}"


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    log_level: str
    log_json: bool
    log_path: str | None
    log_rotation_mb: int
    log_retention_days: int
    db_url: str
    db_pool_size: int
    db_pool_recycle_seconds: int
    query_timeout_seconds: float
    db_connect_retries: int
    db_connect_retry_delay_seconds: float
    auto_create_schema: bool


def load_settings() -> Settings:
    host = _env("FAMILYBUDGET_HOST", "127.0.0.1") or "127.0.0.1"
    port = _parse_int(_env("FAMILYBUDGET_PORT", "8000", legacy=("APP_PORT",)), 8000)

    log_level = (_env("FAMILYBUDGET_LOG_LEVEL", "INFO") or "INFO").upper()
    log_json = _parse_bool(_env("FAMILYBUDGET_LOG_JSON", None), False)
    log_path = _env("FAMILYBUDGET_LOG_PATH", None)
    log_rotation_mb = max(_parse_int(_env("FAMILYBUDGET_LOG_ROTATION_MB", "20"), 20), 1)
    log_retention_days = max(_parse_int(_env("FAMILYBUDGET_LOG_RETENTION_DAYS", "14"), 14), 1)

    db_url = _env("FAMILYBUDGET_DB_URL", None) or _postgres_url_from_parts() or DEFAULT_DB_URL

    db_pool_size = _parse_int(_env("FAMILYBUDGET_DB_POOL_SIZE", "5"), 5)
    if db_pool_size <= 0:
        db_pool_size = 5
    db_pool_recycle_seconds = _parse_int(_env("FAMILYBUDGET_DB_POOL_RECYCLE_SECONDS", "600"), 600)

    query_timeout_seconds = _parse_float(
        _env("FAMILYBUDGET_QUERY_TIMEOUT_SECONDS", None), DEFAULT_QUERY_TIMEOUT_SECONDS
    )
    if query_timeout_seconds <= 0:
        # a zero deadline would fail every query
        query_timeout_seconds = DEFAULT_QUERY_TIMEOUT_SECONDS

    db_connect_retries = max(_parse_int(_env("FAMILYBUDGET_DB_CONNECT_RETRIES", "5"), 5), 1)
    db_connect_retry_delay_seconds = max(
        _parse_float(_env("FAMILYBUDGET_DB_CONNECT_RETRY_DELAY_SECONDS", "10"), 10.0), 0.0
    )
    auto_create_schema = _parse_bool(_env("FAMILYBUDGET_AUTO_CREATE_SCHEMA", None), True)

    return Settings(
        host=host,
        port=port,
        log_level=log_level,
        log_json=log_json,
        log_path=log_path,
        log_rotation_mb=log_rotation_mb,
        log_retention_days=log_retention_days,
        db_url=db_url,
        db_pool_size=db_pool_size,
        db_pool_recycle_seconds=db_pool_recycle_seconds,
        query_timeout_seconds=query_timeout_seconds,
        db_connect_retries=db_connect_retries,
        db_connect_retry_delay_seconds=db_connect_retry_delay_seconds,
        auto_create_schema=auto_create_schema,
    )
