"""
Request and payload validation.

Every check here runs before a query is built. The validators return a
normalized copy of their input (UTC time bounds, sign-adjusted amounts) and
raise a ``ValidationError`` subclass on the first problem found.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from familybudget.domain.enums import Actor, Category, GroupBy, OperationType, OrderBy, is_member
from familybudget.domain.errors import (
    InvalidActorError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidDirectionError,
    InvalidGroupByError,
    InvalidIDError,
    InvalidLimitError,
    InvalidOpTimeError,
    InvalidOpTypeError,
    InvalidOrderByError,
    InvalidPageError,
    InvalidTimeFormatError,
    InvalidTimeRangeError,
)
from familybudget.domain.models.operation import (
    Operation,
    RequestParamAnalytics,
    RequestParamOperations,
)

# page-bound requests must ask for strictly fewer rows than this
MAX_PAGE_LIMIT = 1000
# identifiers live in a signed 64-bit column
MAX_OPERATION_ID = 2**63 - 1


def to_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _bound_to_utc(value: datetime | None, field: str) -> datetime | None:
    # offsets near datetime.min/max cannot be shifted to UTC
    try:
        return to_utc(value)
    except OverflowError:
        raise InvalidTimeFormatError(field) from None


def _bounds_to_utc(
    start: datetime | None, end: datetime | None
) -> tuple[datetime | None, datetime | None]:
    return _bound_to_utc(start, "from"), _bound_to_utc(end, "to")


def _is_zero_time(value: datetime | None) -> bool:
    return value is None or value.replace(tzinfo=None) == datetime.min


def _check_time_range(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and start > end:
        raise InvalidTimeRangeError()


def _check_pagination(page: int | None, limit: int | None) -> None:
    # without a page the listing is unbounded and limit is not checked
    if page is None:
        return
    if page <= 0:
        raise InvalidPageError()
    if limit is None or limit <= 0 or limit >= MAX_PAGE_LIMIT:
        raise InvalidLimitError()


def validate_list_params(params: RequestParamOperations) -> RequestParamOperations:
    if params.order_by is not None:
        if not is_member(OrderBy, params.order_by):
            raise InvalidOrderByError()
        if params.asc == params.desc:
            raise InvalidDirectionError()

    start, end = _bounds_to_utc(params.start_time, params.end_time)
    _check_time_range(start, end)
    _check_pagination(params.page, params.limit)
    return replace(params, start_time=start, end_time=end)


def validate_analytics_params(params: RequestParamAnalytics) -> RequestParamAnalytics:
    if params.group_by is not None and not is_member(GroupBy, params.group_by):
        raise InvalidGroupByError()

    start, end = _bounds_to_utc(params.start_time, params.end_time)
    _check_time_range(start, end)
    _check_pagination(params.page, params.limit)
    return replace(params, start_time=start, end_time=end)


def validate_operation(op: Operation) -> Operation:
    """
    Check a submitted operation and return the copy that should be stored.

    Amounts are submitted as positive numbers; a credit is negated here so the
    stored sign always matches the type.
    """
    if op.amount <= 0:
        raise InvalidAmountError()
    if not is_member(Actor, op.actor):
        raise InvalidActorError()
    if not is_member(Category, op.category):
        raise InvalidCategoryError()
    if not is_member(OperationType, op.type):
        raise InvalidOpTypeError()
    if _is_zero_time(op.operation_at):
        raise InvalidOpTimeError()

    amount = -op.amount if op.type == OperationType.CREDIT else op.amount
    try:
        operation_at = to_utc(op.operation_at)
    except OverflowError:
        raise InvalidOpTimeError() from None
    return replace(op, amount=amount, operation_at=operation_at)


def validate_operation_id(op_id: int) -> int:
    if op_id <= 0 or op_id > MAX_OPERATION_ID:
        raise InvalidIDError()
    return op_id
