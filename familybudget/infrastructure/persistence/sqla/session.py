from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Iterator

from sqlalchemy.engine import Connection, Engine


@contextmanager
def connection_scope(engine: Engine) -> Iterator[Connection]:
    """One pooled connection, one transaction, released on exit."""
    with engine.begin() as conn:
        yield conn
