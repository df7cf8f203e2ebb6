from __future__ import annotations

import atexit
import time
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError

from familybudget.logger import get_logger
from familybudget.settings import Settings

from .sqlite_functions import register_sqlite_functions

_ENGINE_CACHE: dict[str, Engine] = {}


def build_db_url(db_path: Path) -> str:
    return f"sqlite+pysqlite:///{db_path}"


def _engine_kwargs(db_url: str, settings: Settings) -> dict[str, Any]:
    url = make_url(db_url)
    backend = url.get_backend_name()
    kwargs: dict[str, Any] = {"pool_pre_ping": True}

    if backend == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            return kwargs
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    elif backend == "postgresql":
        timeout_ms = int(settings.query_timeout_seconds * 1000)
        kwargs["connect_args"] = {
            "options": f"-c statement_timeout={timeout_ms} -c timezone=UTC",
        }

    kwargs["pool_size"] = settings.db_pool_size
    kwargs["max_overflow"] = 0
    kwargs["pool_recycle"] = settings.db_pool_recycle_seconds
    return kwargs


def get_engine(settings: Settings) -> Engine:
    engine = _ENGINE_CACHE.get(settings.db_url)
    if engine is not None:
        return engine

    engine = create_engine(settings.db_url, **_engine_kwargs(settings.db_url, settings))
    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _on_sqlite_connect(dbapi_connection, _connection_record) -> None:
            register_sqlite_functions(dbapi_connection)
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            cursor.close()

    _ENGINE_CACHE[settings.db_url] = engine
    return engine


def wait_for_database(engine: Engine, *, retries: int, delay_seconds: float) -> None:
    logger = get_logger()
    attempts = max(retries, 1)
    for attempt in range(1, attempts + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return
        except OperationalError:
            if attempt >= attempts:
                logger.error(f"database not reachable after {attempts} attempts, giving up")
                raise
            logger.warning(
                f"database not reachable attempt={attempt}/{attempts}, retrying in {delay_seconds:.1f}s"
            )
            time.sleep(delay_seconds)


def dispose_engine(db_url: str) -> None:
    engine = _ENGINE_CACHE.pop(db_url, None)
    if engine is not None:
        engine.dispose()


def dispose_all_engines() -> None:
    for key, engine in list(_ENGINE_CACHE.items()):
        engine.dispose()
        _ENGINE_CACHE.pop(key, None)


atexit.register(dispose_all_engines)
