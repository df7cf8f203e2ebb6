from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Column, Table, delete, insert, literal_column, select, text, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from familybudget.domain.enums import Actor, Category
from familybudget.domain.errors import (
    DomainError,
    InternalError,
    OperationNotFoundError,
    QueryTimeoutError,
    UnknownActorOrCategoryError,
)
from familybudget.domain.models.analytics import AnalyticsQuantum, AnalyticsSummary
from familybudget.domain.models.operation import (
    Operation,
    RequestParamAnalytics,
    RequestParamOperations,
)

from .expressions import (
    apply_pagination,
    apply_period,
    group_key_expr,
    joined_operations,
    order_clause,
    resolve_pagination,
    statistics_columns,
)
from .mappers import row_to_operation, row_to_quantum, row_to_summary
from .models import category, family_members, metadata, operations
from .session import connection_scope

NOT_NULL_VIOLATION = "23502"
QUERY_CANCELED = "57014"

_OPERATION_COLUMNS: tuple[ColumnElement[Any], ...] = (
    operations.c.id,
    operations.c.amount,
    family_members.c.fam_member.label("actor"),
    category.c.cat_name.label("category"),
    operations.c.type,
    operations.c.operation_at,
    operations.c.created_at,
    operations.c.description,
)


def _seed_lookup(conn: Connection, table: Table, column: Column[Any], values: Iterable[str]) -> None:
    existing = set(conn.execute(select(column)).scalars())
    missing = [{column.name: value} for value in values if value not in existing]
    if missing:
        conn.execute(insert(table), missing)


def ensure_schema(conn: Connection) -> None:
    metadata.create_all(bind=conn, checkfirst=True)
    _seed_lookup(conn, family_members, family_members.c.fam_member, [a.value for a in Actor])
    _seed_lookup(conn, category, category.c.cat_name, [c.value for c in Category])


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    # psycopg exposes ``sqlstate``, psycopg2 ``pgcode``
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_not_null_violation(exc: IntegrityError) -> bool:
    state = _sqlstate(exc)
    if state:
        return state == NOT_NULL_VIOLATION
    error_name = getattr(exc.orig, "sqlite_errorname", None)
    if error_name:
        return error_name == "SQLITE_CONSTRAINT_NOTNULL"
    message = str(exc.orig).lower()
    return "null value in column" in message or "not null constraint failed" in message


def is_query_canceled(exc: DBAPIError) -> bool:
    return _sqlstate(exc) == QUERY_CANCELED


@contextmanager
def _store_errors() -> Iterator[None]:
    """Translate driver failures into domain errors, keeping the cause chained."""
    try:
        yield
    except DomainError:
        raise
    except IntegrityError as exc:
        if is_not_null_violation(exc):
            raise UnknownActorOrCategoryError() from exc
        raise InternalError() from exc
    except DBAPIError as exc:
        if is_query_canceled(exc):
            raise QueryTimeoutError() from exc
        raise InternalError() from exc
    except SQLAlchemyError as exc:
        raise InternalError() from exc


def _actor_id(actor: str) -> Any:
    return select(family_members.c.id).where(family_members.c.fam_member == actor).scalar_subquery()


def _category_id(category_name: str) -> Any:
    return select(category.c.id).where(category.c.cat_name == category_name).scalar_subquery()


def _write_values(op: Operation) -> dict[str, Any]:
    # unknown names resolve to NULL and trip the NOT NULL constraint
    return {
        "amount": op.amount,
        "actor_id": _actor_id(op.actor),
        "category_id": _category_id(op.category),
        "type": op.type,
        "operation_at": op.operation_at,
        "description": op.description,
    }


class SqlOperationRepository:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    def ping(self) -> None:
        with _store_errors(), connection_scope(self._engine) as conn:
            conn.execute(text("SELECT 1"))

    def create(self, op: Operation) -> int:
        stmt = insert(operations).values(**_write_values(op))
        with _store_errors(), connection_scope(self._engine) as conn:
            result = conn.execute(stmt)
            return int(result.inserted_primary_key[0])

    def get(self, op_id: int) -> Operation:
        stmt = select(*_OPERATION_COLUMNS).select_from(joined_operations()).where(operations.c.id == op_id)
        with _store_errors(), connection_scope(self._engine) as conn:
            row = conn.execute(stmt).first()
        if row is None:
            raise OperationNotFoundError()
        return row_to_operation(row)

    def list(self, params: RequestParamOperations) -> list[Operation]:
        stmt = select(*_OPERATION_COLUMNS).select_from(joined_operations())
        stmt = apply_period(stmt, params.start_time, params.end_time)
        ordering = order_clause(params.order_by, params.asc, params.desc)
        if ordering is not None:
            stmt = stmt.order_by(ordering)
        stmt = apply_pagination(stmt, resolve_pagination(params.limit, params.page))

        with _store_errors(), connection_scope(self._engine) as conn:
            rows = conn.execute(stmt).all()
        return [row_to_operation(row) for row in rows]

    def update(self, op: Operation) -> None:
        stmt = update(operations).where(operations.c.id == op.id).values(**_write_values(op))
        with _store_errors(), connection_scope(self._engine) as conn:
            result = conn.execute(stmt)
            affected = result.rowcount
        if affected == 0:
            raise OperationNotFoundError()

    def delete(self, op_id: int) -> None:
        stmt = delete(operations).where(operations.c.id == op_id)
        with _store_errors(), connection_scope(self._engine) as conn:
            result = conn.execute(stmt)
            affected = result.rowcount
        if affected == 0:
            raise OperationNotFoundError()

    def analytics_summary(self, params: RequestParamAnalytics) -> AnalyticsSummary:
        stmt = select(*statistics_columns(self.dialect_name)).select_from(operations)
        stmt = apply_period(stmt, params.start_time, params.end_time)
        with _store_errors(), connection_scope(self._engine) as conn:
            row = conn.execute(stmt).one()
        return row_to_summary(row)

    def analytics_group(self, params: RequestParamAnalytics) -> list[AnalyticsQuantum]:
        dialect_name = self.dialect_name
        key = group_key_expr(params.group_by, dialect_name)
        # grouped and ordered by the output label so the bucket expression is
        # written (and bound) only once
        group_key = literal_column("group_key")
        stmt = (
            select(key.label("group_key"), *statistics_columns(dialect_name))
            .select_from(joined_operations())
            .group_by(group_key)
            .order_by(group_key.asc())
        )
        stmt = apply_period(stmt, params.start_time, params.end_time)
        stmt = apply_pagination(stmt, resolve_pagination(params.limit, params.page))

        with _store_errors(), connection_scope(self._engine) as conn:
            rows = conn.execute(stmt).all()
        return [row_to_quantum(row) for row in rows]
