import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, select

from familybudget.infrastructure.persistence.sqla import build_db_url
from familybudget.infrastructure.persistence.sqla.models import category, family_members

_SCRIPT_LOCATION = Path(__file__).resolve().parents[1] / "familybudget/infrastructure/persistence/sqla/migrations"


class TestMigrations(unittest.TestCase):
    def test_upgrade_and_downgrade(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            db_url = build_db_url(Path(tmp) / "migrated.db")
            config = Config()
            config.set_main_option("script_location", str(_SCRIPT_LOCATION))

            with mock.patch.dict(os.environ, {"FAMILYBUDGET_DB_URL": db_url}):
                command.upgrade(config, "head")

                engine = create_engine(db_url)
                try:
                    tables = set(inspect(engine).get_table_names())
                    self.assertTrue({"operations", "family_members", "category"} <= tables)
                    with engine.connect() as conn:
                        actors = set(conn.execute(select(family_members.c.fam_member)).scalars())
                        categories = set(conn.execute(select(category.c.cat_name)).scalars())
                    self.assertIn("daughter", actors)
                    self.assertEqual(len(categories), 11)

                    command.downgrade(config, "base")
                    self.assertNotIn("operations", set(inspect(engine).get_table_names()))
                finally:
                    engine.dispose()
