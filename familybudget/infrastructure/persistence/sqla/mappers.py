from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.engine import Row

from familybudget.domain.models.analytics import AnalyticsQuantum, AnalyticsSummary
from familybudget.domain.models.operation import Operation


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _figure(value: Any) -> float:
    # aggregates over an empty set come back as NULL
    return float(value) if value is not None else 0.0


def row_to_operation(row: Row[Any]) -> Operation:
    data = dict(row._mapping)
    return Operation(
        id=int(data["id"]),
        amount=int(data["amount"]),
        actor=str(data["actor"]),
        category=str(data["category"]),
        type=str(data["type"]),
        operation_at=_as_utc(data["operation_at"]),
        created_at=_as_utc(data["created_at"]),
        description=data["description"],
    )


def row_to_summary(row: Row[Any]) -> AnalyticsSummary:
    data = dict(row._mapping)
    return AnalyticsSummary(
        sum=_figure(data["sum"]),
        avg=_figure(data["avg"]),
        count=int(data["count"] or 0),
        median=_figure(data["median"]),
        p90=_figure(data["p90"]),
    )


def row_to_quantum(row: Row[Any]) -> AnalyticsQuantum:
    data = dict(row._mapping)
    return AnalyticsQuantum(
        key=str(data["group_key"]),
        sum=_figure(data["sum"]),
        avg=_figure(data["avg"]),
        count=int(data["count"] or 0),
        median=_figure(data["median"]),
        p90=_figure(data["p90"]),
    )
