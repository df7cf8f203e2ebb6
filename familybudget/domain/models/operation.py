from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Operation:
    amount: int  # minor currency units; credits are stored negative
    actor: str
    category: str
    type: str
    operation_at: datetime | None
    description: str | None = None
    id: int = 0
    created_at: datetime | None = None


@dataclass(slots=True)
class RequestParamOperations:
    order_by: str | None = None
    asc: bool = False
    desc: bool = False
    start_time: datetime | None = None
    end_time: datetime | None = None
    page: int | None = None
    limit: int | None = None


@dataclass(slots=True)
class RequestParamAnalytics:
    group_by: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    page: int | None = None
    limit: int | None = None
