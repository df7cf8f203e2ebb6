import unittest
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from familybudget.domain.errors import InvalidGroupByError, InvalidOrderByError
from familybudget.infrastructure.persistence.sqla.expressions import (
    Pagination,
    group_key_expr,
    order_clause,
    percentile_cont,
    period_clause,
    resolve_pagination,
)

_START = datetime(2024, 1, 1, tzinfo=timezone.utc)
_END = datetime(2024, 2, 1, tzinfo=timezone.utc)


def _sql(expr, dialect) -> str:
    return str(select(expr).compile(dialect=dialect))


class TestPagination(unittest.TestCase):
    def test_absent_means_unbounded(self) -> None:
        self.assertIsNone(resolve_pagination(None, None))

    def test_offsets(self) -> None:
        self.assertEqual(resolve_pagination(10, 3), Pagination(limit=10, offset=20))
        self.assertEqual(resolve_pagination(10, None), Pagination(limit=10, offset=0))

    def test_defaults_and_clamping(self) -> None:
        self.assertEqual(resolve_pagination(None, 2), Pagination(limit=20, offset=20))
        self.assertEqual(resolve_pagination(0, 1), Pagination(limit=20, offset=0))
        self.assertEqual(resolve_pagination(5000, 1), Pagination(limit=1000, offset=0))
        self.assertEqual(resolve_pagination(10, 0), Pagination(limit=10, offset=0))


class TestPeriod(unittest.TestCase):
    def test_shapes(self) -> None:
        self.assertIsNone(period_clause(None, None))
        self.assertIn("BETWEEN", str(period_clause(_START, _END)))
        self.assertIn(">", str(period_clause(_START, None)))
        self.assertIn("<", str(period_clause(None, _END)))


class TestOrder(unittest.TestCase):
    def test_direction(self) -> None:
        self.assertTrue(str(order_clause("amount", True, False)).endswith("ASC"))
        self.assertTrue(str(order_clause("amount", False, True)).endswith("DESC"))

    def test_lookup_columns_through_joins(self) -> None:
        self.assertIn("family_members.fam_member", str(order_clause("actor", True, False)))
        self.assertIn("category.cat_name", str(order_clause("category", True, False)))
        self.assertIn("operations.operation_at", str(order_clause("operation_at", True, False)))

    def test_absent_and_unknown(self) -> None:
        self.assertIsNone(order_clause(None, True, False))
        with self.assertRaises(InvalidOrderByError):
            order_clause("amount; DROP TABLE operations", True, False)


class TestGroupKey(unittest.TestCase):
    def test_categorical_keys(self) -> None:
        self.assertIn("cat_name", _sql(group_key_expr("category", "sqlite"), sqlite.dialect()))
        self.assertIn("fam_member", _sql(group_key_expr("actor", "postgresql"), postgresql.dialect()))

    def test_sqlite_buckets(self) -> None:
        dialect = sqlite.dialect()
        self.assertIn("date(operations.operation_at)", _sql(group_key_expr("day", "sqlite"), dialect))
        week = select(group_key_expr("week", "sqlite")).compile(
            dialect=dialect, compile_kwargs={"literal_binds": True}
        )
        self.assertIn("weekday 0", str(week))
        self.assertIn("strftime", _sql(group_key_expr("month", "sqlite"), dialect))

    def test_postgres_buckets(self) -> None:
        compiled = select(group_key_expr("month", "postgresql")).compile(
            dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
        )
        text = str(compiled)
        self.assertIn("date_trunc('month'", text)
        self.assertIn("to_char", text)

    def test_unknown_or_missing(self) -> None:
        for bad in (None, "hour", ""):
            with self.subTest(bad=bad), self.assertRaises(InvalidGroupByError):
                group_key_expr(bad, "sqlite")


class TestPercentile(unittest.TestCase):
    def test_postgres_uses_ordered_set_aggregate(self) -> None:
        text = _sql(percentile_cont(0.9, "postgresql"), postgresql.dialect())
        self.assertIn("percentile_cont", text)
        self.assertIn("WITHIN GROUP (ORDER BY operations.amount)", text)

    def test_sqlite_uses_registered_aggregate(self) -> None:
        self.assertIn("fb_percentile_cont(operations.amount", _sql(percentile_cont(0.5, "sqlite"), sqlite.dialect()))
