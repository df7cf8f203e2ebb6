from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class AnalyticsQuantum:
    """Statistics of one group; money figures are in whole currency units."""

    key: str
    sum: float
    avg: float
    count: int
    median: float
    p90: float


@dataclass(slots=True)
class AnalyticsSummary:
    sum: float
    avg: float
    count: int
    median: float
    p90: float
    key: str | None = None
    groups: list[AnalyticsQuantum] = field(default_factory=list)
