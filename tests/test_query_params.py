import unittest
from datetime import datetime, timedelta, timezone

from familybudget.api.schemas.queries import parse_operation_id, parse_time_bound
from familybudget.domain.errors import InvalidIDError, InvalidTimeFormatError


class TestTimeBounds(unittest.TestCase):
    def test_date_only_lower_bound_is_midnight(self) -> None:
        self.assertEqual(
            parse_time_bound("2024-01-31", "from"),
            datetime(2024, 1, 31, tzinfo=timezone.utc),
        )

    def test_date_only_upper_bound_covers_the_day(self) -> None:
        bound = parse_time_bound("2024-01-31", "to", end_of_day=True)
        self.assertEqual(bound, datetime(2024, 1, 31, 23, 59, 59, 999999, tzinfo=timezone.utc))
        self.assertLess(datetime(2024, 1, 31, 23, 0, tzinfo=timezone.utc), bound)
        self.assertLess(bound, datetime(2024, 2, 1, tzinfo=timezone.utc))

    def test_datetimes_are_kept_as_given(self) -> None:
        self.assertEqual(
            parse_time_bound("2024-01-31T10:00:00", "to", end_of_day=True),
            datetime(2024, 1, 31, 10, 0, tzinfo=timezone.utc),
        )
        offset = parse_time_bound("2024-01-31T10:00:00+03:00", "from")
        self.assertEqual(offset.utcoffset(), timedelta(hours=3))

    def test_blank_and_garbage(self) -> None:
        self.assertIsNone(parse_time_bound("  ", "from"))
        with self.assertRaises(InvalidTimeFormatError):
            parse_time_bound("2024-13-01", "from")
        with self.assertRaises(InvalidTimeFormatError):
            parse_time_bound("yesterday", "to", end_of_day=True)


class TestOperationId(unittest.TestCase):
    def test_parses_integers(self) -> None:
        self.assertEqual(parse_operation_id(" 42 "), 42)

    def test_rejects_non_integers(self) -> None:
        for raw in ("abc", "1.5", ""):
            with self.subTest(raw=raw), self.assertRaises(InvalidIDError):
                parse_operation_id(raw)
