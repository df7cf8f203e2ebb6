import unittest
from datetime import datetime, timezone

from familybudget.application.services.export_service import (
    analytics_csv,
    csv_headers,
    operations_csv,
)
from familybudget.domain.models.analytics import AnalyticsQuantum, AnalyticsSummary
from familybudget.domain.models.operation import Operation


class TestOperationsCsv(unittest.TestCase):
    def test_header_and_rows(self) -> None:
        items = [
            Operation(
                id=1,
                amount=12345,
                actor="mother",
                category="food",
                type="debit",
                operation_at=datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc),
                created_at=datetime(2024, 1, 11, 8, 30, tzinfo=timezone.utc),
                description="weekly groceries",
            ),
            Operation(
                id=2,
                amount=-500,
                actor="son",
                category="transport",
                type="credit",
                operation_at=datetime(2024, 1, 12, tzinfo=timezone.utc),
            ),
        ]
        lines = operations_csv(items).splitlines()
        self.assertEqual(lines[0], "id,amount,type,category,actor,date,created,description")
        self.assertEqual(lines[1], "1,123.45,debit,food,mother,2024-01-10,2024-01-11,weekly groceries")
        self.assertEqual(lines[2], "2,-5.00,credit,transport,son,2024-01-12,,")

    def test_empty_listing_has_header_only(self) -> None:
        self.assertEqual(
            operations_csv([]).splitlines(),
            ["id,amount,type,category,actor,date,created,description"],
        )


class TestAnalyticsCsv(unittest.TestCase):
    def test_groups_then_totals(self) -> None:
        summary = AnalyticsSummary(
            sum=30.5,
            avg=15.25,
            count=2,
            median=15.25,
            p90=19.45,
            key="category",
            groups=[
                AnalyticsQuantum(key="food", sum=10.0, avg=10.0, count=1, median=10.0, p90=10.0),
                AnalyticsQuantum(key="salary", sum=20.5, avg=20.5, count=1, median=20.5, p90=20.5),
            ],
        )
        lines = analytics_csv(summary).splitlines()
        self.assertEqual(lines[0], "group_key,total_amount,average,operations_in_group,median,p90")
        self.assertEqual(lines[1], "food,10.00,10.00,1,10.00,10.00")
        self.assertEqual(lines[2], "salary,20.50,20.50,1,20.50,20.50")
        self.assertEqual(lines[3], "TOTALS:,30.50,15.25,2,15.25,19.45")

    def test_ungrouped_is_totals_only(self) -> None:
        summary = AnalyticsSummary(sum=0.0, avg=0.0, count=0, median=0.0, p90=0.0)
        lines = analytics_csv(summary).splitlines()
        self.assertEqual(lines[1:], ["TOTALS:,0.00,0.00,0,0.00,0.00"])


class TestHeaders(unittest.TestCase):
    def test_attachment_headers(self) -> None:
        headers = csv_headers("operations.csv")
        self.assertEqual(headers["Content-Disposition"], "attachment; filename=operations.csv")
        self.assertEqual(headers["Cache-Control"], "no-store")
