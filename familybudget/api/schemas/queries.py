from __future__ import annotations

from datetime import date, datetime, time, timezone

from fastapi import Query

from familybudget.domain.errors import InvalidIDError, InvalidTimeFormatError
from familybudget.domain.models.operation import RequestParamAnalytics, RequestParamOperations


def parse_time_bound(raw: str | None, field: str, *, end_of_day: bool = False) -> datetime | None:
    """
    Accept ``YYYY-MM-DD`` or a full ISO-8601 datetime; naive values are UTC.

    A bare date means midnight UTC, or the last microsecond of that day when
    ``end_of_day`` is set, so an upper bound of ``2024-01-31`` keeps the 31st.
    """
    if raw is None or not raw.strip():
        return None
    value = raw.strip()
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            return datetime.combine(day, time.max if end_of_day else time.min, tzinfo=timezone.utc)
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise InvalidTimeFormatError(field) from None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_operation_id(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidIDError() from None


def operations_query(
    order_by: str | None = Query(default=None),
    asc: bool = Query(default=False),
    desc: bool = Query(default=False),
    start: str | None = Query(default=None, alias="from"),
    end: str | None = Query(default=None, alias="to"),
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
) -> RequestParamOperations:
    return RequestParamOperations(
        order_by=order_by or None,
        asc=asc,
        desc=desc,
        start_time=parse_time_bound(start, "from"),
        end_time=parse_time_bound(end, "to", end_of_day=True),
        page=page,
        limit=limit,
    )


def analytics_query(
    group_by: str | None = Query(default=None),
    start: str | None = Query(default=None, alias="from"),
    end: str | None = Query(default=None, alias="to"),
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
) -> RequestParamAnalytics:
    return RequestParamAnalytics(
        group_by=group_by or None,
        start_time=parse_time_bound(start, "from"),
        end_time=parse_time_bound(end, "to", end_of_day=True),
        page=page,
        limit=limit,
    )
