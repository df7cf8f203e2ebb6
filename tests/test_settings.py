import os
import unittest
from contextlib import contextmanager

from familybudget.settings import DEFAULT_DB_URL, DEFAULT_QUERY_TIMEOUT_SECONDS, load_settings

_POSTGRES_PARTS = ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB", "DB_CONTAINER_NAME")


@contextmanager
def temp_environ(update: dict[str, str | None]):
    old = dict(os.environ)
    try:
        for k, v in update.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v
        yield
    finally:
        os.environ.clear()
        os.environ.update(old)


def _cleared(**update: str | None) -> dict[str, str | None]:
    base: dict[str, str | None] = {k: None for k in _POSTGRES_PARTS}
    base.update(
        {
            "FAMILYBUDGET_DB_URL": None,
            "FAMILYBUDGET_PORT": None,
            "APP_PORT": None,
            "FAMILYBUDGET_QUERY_TIMEOUT_SECONDS": None,
        }
    )
    base.update(update)
    return base


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        with temp_environ(_cleared()):
            s = load_settings()
            self.assertEqual(s.db_url, DEFAULT_DB_URL)
            self.assertEqual(s.port, 8000)
            self.assertEqual(s.query_timeout_seconds, DEFAULT_QUERY_TIMEOUT_SECONDS)
            self.assertTrue(s.auto_create_schema)

    def test_legacy_port_still_works(self) -> None:
        with temp_environ(_cleared(APP_PORT="9090")):
            self.assertEqual(load_settings().port, 9090)
        with temp_environ(_cleared(APP_PORT="9090", FAMILYBUDGET_PORT="7070")):
            self.assertEqual(load_settings().port, 7070)

    def test_postgres_url_built_from_parts(self) -> None:
        with temp_environ(
            _cleared(
                POSTGRES_USER="budget",
                POSTGRES_PASSWORD="secret",
                POSTGRES_DB="family",
                DB_CONTAINER_NAME="db",
            )
        ):
            s = load_settings()
            self.assertEqual(s.db_url, "postgresql+psycopg://budget:secret@db:5432/family")

    def test_partial_postgres_parts_fall_back_to_default(self) -> None:
        with temp_environ(_cleared(POSTGRES_USER="budget", POSTGRES_DB="family")):
            self.assertEqual(load_settings().db_url, DEFAULT_DB_URL)

    def test_explicit_url_wins_over_parts(self) -> None:
        with temp_environ(
            _cleared(
                FAMILYBUDGET_DB_URL="sqlite+pysqlite:///:memory:",
                POSTGRES_USER="budget",
                POSTGRES_PASSWORD="secret",
                POSTGRES_DB="family",
                DB_CONTAINER_NAME="db",
            )
        ):
            self.assertEqual(load_settings().db_url, "sqlite+pysqlite:///:memory:")

    def test_invalid_timeout_falls_back(self) -> None:
        for raw in ("abc", "0", "-3"):
            with self.subTest(raw=raw), temp_environ(_cleared(FAMILYBUDGET_QUERY_TIMEOUT_SECONDS=raw)):
                self.assertEqual(load_settings().query_timeout_seconds, DEFAULT_QUERY_TIMEOUT_SECONDS)

    def test_blank_values_are_unset(self) -> None:
        with temp_environ(_cleared(FAMILYBUDGET_DB_URL="  ", FAMILYBUDGET_PORT="")):
            s = load_settings()
            self.assertEqual(s.db_url, DEFAULT_DB_URL)
            self.assertEqual(s.port, 8000)
