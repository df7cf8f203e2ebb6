from __future__ import annotations

from typing import Protocol

from familybudget.domain.models.analytics import AnalyticsQuantum, AnalyticsSummary
from familybudget.domain.models.operation import (
    Operation,
    RequestParamAnalytics,
    RequestParamOperations,
)


class OperationRepositoryPort(Protocol):
    def create(self, op: Operation) -> int: ...

    def get(self, op_id: int) -> Operation: ...

    def list(self, params: RequestParamOperations) -> list[Operation]: ...

    def update(self, op: Operation) -> None: ...

    def delete(self, op_id: int) -> None: ...

    def analytics_summary(self, params: RequestParamAnalytics) -> AnalyticsSummary: ...

    def analytics_group(self, params: RequestParamAnalytics) -> list[AnalyticsQuantum]: ...

    def ping(self) -> None: ...
