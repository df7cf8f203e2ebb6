from __future__ import annotations

from datetime import datetime

import pandas as pd

from familybudget.domain.models.analytics import AnalyticsSummary
from familybudget.domain.models.operation import Operation

OPERATIONS_CSV_COLUMNS = ["id", "amount", "type", "category", "actor", "date", "created", "description"]
ANALYTICS_CSV_COLUMNS = ["group_key", "total_amount", "average", "operations_in_group", "median", "p90"]
TOTALS_LABEL = "TOTALS:"

CSV_HEADERS = {
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
    "Access-Control-Expose-Headers": "Content-Disposition",
}


def _day(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else ""


def operations_csv(items: list[Operation]) -> str:
    rows = [
        {
            "id": op.id,
            "amount": f"{op.amount / 100:.2f}",
            "type": op.type,
            "category": op.category,
            "actor": op.actor,
            "date": _day(op.operation_at),
            "created": _day(op.created_at),
            "description": op.description or "",
        }
        for op in items
    ]
    frame = pd.DataFrame(rows, columns=OPERATIONS_CSV_COLUMNS)
    return frame.to_csv(index=False, lineterminator="\n")


def analytics_csv(summary: AnalyticsSummary) -> str:
    """One row per group plus a trailing totals row; figures are already whole units."""
    rows = [
        [group.key, group.sum, group.avg, group.count, group.median, group.p90]
        for group in summary.groups
    ]
    rows.append([TOTALS_LABEL, summary.sum, summary.avg, summary.count, summary.median, summary.p90])
    frame = pd.DataFrame(rows, columns=ANALYTICS_CSV_COLUMNS)
    return frame.to_csv(index=False, float_format="%.2f", lineterminator="\n")


def csv_headers(filename: str) -> dict[str, str]:
    headers = dict(CSV_HEADERS)
    headers["Content-Disposition"] = f"attachment; filename={filename}"
    return headers
