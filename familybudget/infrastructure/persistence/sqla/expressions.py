"""
Query fragments for the operations repository.

Each helper turns an already validated request parameter into a SQLAlchemy
construct. Values always travel as bound parameters; only the shape of the
statement (which column, which bucket expression) depends on the closed
vocabularies in ``familybudget.domain.enums``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import Float, Select, cast, func
from sqlalchemy.sql.elements import ColumnElement, UnaryExpression
from sqlalchemy.sql.selectable import Join

from familybudget.domain.enums import TIME_BUCKETS, GroupBy, OrderBy
from familybudget.domain.errors import InvalidGroupByError, InvalidOrderByError

from .models import category, family_members, operations
from .sqlite_functions import PERCENTILE_FUNCTION

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 1000
MINOR_UNITS = 100

_S = TypeVar("_S", bound="Select[Any]")

_ORDER_COLUMNS: dict[OrderBy, ColumnElement[Any]] = {
    OrderBy.ID: operations.c.id,
    OrderBy.AMOUNT: operations.c.amount,
    OrderBy.ACTOR: family_members.c.fam_member,
    OrderBy.CATEGORY: category.c.cat_name,
    OrderBy.TYPE: operations.c.type,
    OrderBy.OPERATION_AT: operations.c.operation_at,
}

_GROUP_COLUMNS: dict[GroupBy, ColumnElement[Any]] = {
    GroupBy.ACTOR: family_members.c.fam_member,
    GroupBy.CATEGORY: category.c.cat_name,
    GroupBy.TYPE: operations.c.type,
}


@dataclass(frozen=True, slots=True)
class Pagination:
    limit: int
    offset: int


def joined_operations() -> Join:
    return operations.outerjoin(
        family_members, family_members.c.id == operations.c.actor_id
    ).outerjoin(category, category.c.id == operations.c.category_id)


def period_clause(start: datetime | None, end: datetime | None) -> ColumnElement[bool] | None:
    column = operations.c.operation_at
    if start is not None and end is not None:
        return column.between(start, end)
    if start is not None:
        return column > start
    if end is not None:
        return column < end
    return None


def resolve_pagination(limit: int | None, page: int | None) -> Pagination | None:
    """
    Effective LIMIT/OFFSET for a request.

    No limit and no page means no pagination at all. If either one is given
    the other is defaulted: a non-positive limit becomes 20, anything above
    1000 is clamped, and a non-positive page becomes 1.
    """
    if limit is None and page is None:
        return None

    effective_limit = limit if limit is not None and limit > 0 else DEFAULT_PAGE_LIMIT
    effective_limit = min(effective_limit, MAX_PAGE_LIMIT)
    effective_page = page if page is not None and page > 0 else 1
    return Pagination(limit=effective_limit, offset=effective_limit * (effective_page - 1))


def order_clause(order_by: str | None, asc: bool, desc: bool) -> UnaryExpression[Any] | None:
    if order_by is None:
        return None
    try:
        column = _ORDER_COLUMNS[OrderBy(order_by)]
    except (ValueError, KeyError):
        raise InvalidOrderByError() from None
    # descending unless ascending was the only direction requested
    if asc and not desc:
        return column.asc()
    return column.desc()


def _time_bucket(unit: GroupBy, dialect_name: str) -> ColumnElement[str]:
    column = operations.c.operation_at
    if dialect_name == "postgresql":
        return func.to_char(func.date_trunc(str(unit), column), "YYYY-MM-DD")
    if unit == GroupBy.DAY:
        return func.date(column)
    if unit == GroupBy.WEEK:
        # Monday of the ISO week
        return func.date(column, "weekday 0", "-6 days")
    if unit == GroupBy.MONTH:
        return func.strftime("%Y-%m-01", column)
    return func.strftime("%Y-01-01", column)


def group_key_expr(group_by: str | None, dialect_name: str) -> ColumnElement[str]:
    if group_by is None:
        raise InvalidGroupByError()
    try:
        key = GroupBy(group_by)
    except ValueError:
        raise InvalidGroupByError() from None
    if key in TIME_BUCKETS:
        return _time_bucket(key, dialect_name)
    return _GROUP_COLUMNS[key]


def percentile_cont(fraction: float, dialect_name: str) -> ColumnElement[Any]:
    if dialect_name == "postgresql":
        return func.percentile_cont(fraction).within_group(operations.c.amount)
    return getattr(func, PERCENTILE_FUNCTION)(operations.c.amount, fraction)


def statistics_columns(dialect_name: str) -> list[ColumnElement[Any]]:
    """sum, avg, count, median and p90 of ``amount``, money in whole units."""
    amount = operations.c.amount
    return [
        (cast(func.sum(amount), Float) / MINOR_UNITS).label("sum"),
        (cast(func.avg(amount), Float) / MINOR_UNITS).label("avg"),
        func.count().label("count"),
        (cast(percentile_cont(0.5, dialect_name), Float) / MINOR_UNITS).label("median"),
        (cast(percentile_cont(0.9, dialect_name), Float) / MINOR_UNITS).label("p90"),
    ]


def apply_period(stmt: _S, start: datetime | None, end: datetime | None) -> _S:
    clause = period_clause(start, end)
    if clause is None:
        return stmt
    return stmt.where(clause)


def apply_pagination(stmt: _S, pagination: Pagination | None) -> _S:
    if pagination is None:
        return stmt
    return stmt.limit(pagination.limit).offset(pagination.offset)
