from __future__ import annotations

from datetime import datetime

from pydantic import Field

from familybudget.api.schemas.common import RequestModel, ResponseModel
from familybudget.domain.models.analytics import AnalyticsSummary
from familybudget.domain.models.operation import Operation


class OperationPayload(RequestModel):
    amount: int
    actor: str
    category: str
    type: str
    operation_at: datetime | None = None
    description: str | None = Field(default=None, max_length=1000)

    def to_domain(self, op_id: int = 0) -> Operation:
        return Operation(
            id=op_id,
            amount=self.amount,
            actor=self.actor,
            category=self.category,
            type=self.type,
            operation_at=self.operation_at,
            description=self.description,
        )


class OperationOut(ResponseModel):
    id: int
    amount: int
    actor: str
    category: str
    type: str
    operation_at: datetime
    created_at: datetime | None = None
    description: str | None = None


class AnalyticsQuantumOut(ResponseModel):
    key: str
    sum: float
    avg: float
    count: int
    median: float
    p90: float


class AnalyticsSummaryOut(ResponseModel):
    key: str | None = None
    sum: float
    avg: float
    count: int
    median: float
    p90: float
    groups: list[AnalyticsQuantumOut] | None = None

    @classmethod
    def from_summary(cls, summary: AnalyticsSummary) -> "AnalyticsSummaryOut":
        # groups are only reported when a grouping key was requested
        groups = None
        if summary.key is not None:
            groups = [AnalyticsQuantumOut.model_validate(group) for group in summary.groups]
        return cls(
            key=summary.key,
            sum=summary.sum,
            avg=summary.avg,
            count=summary.count,
            median=summary.median,
            p90=summary.p90,
            groups=groups,
        )
