from __future__ import annotations

from .engine import build_db_url, get_engine, wait_for_database
from .repositories import SqlOperationRepository, ensure_schema
from .session import connection_scope

__all__ = [
    "SqlOperationRepository",
    "build_db_url",
    "connection_scope",
    "ensure_schema",
    "get_engine",
    "wait_for_database",
]
