"""Tests for the startup schema bootstrap: table creation, migration planning, failure handling."""

import unittest
from unittest.mock import MagicMock, patch

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from student_manager.core import bootstrap
from student_manager.core.bootstrap import (
    ADD_CREATED_AT,
    ADD_UPDATED_AT,
    TIGHTEN_EMAIL,
    ensure_tables,
    log_initial_data,
    migrate_students_table,
    pending_student_migrations,
    run_bootstrap,
)


def _sqlite():
    return create_engine("sqlite://", poolclass=StaticPool)


def _columns(*names: str, email_nullable: bool = False) -> list[dict]:
    return [
        {"name": n, "nullable": email_nullable if n == "email" else True} for n in names
    ]


UNIQUE_EMAIL_INDEX = [{"name": "ix_students_email", "column_names": ["email"], "unique": True}]


class TestPendingStudentMigrations(unittest.TestCase):
    def test_current_schema_needs_nothing(self) -> None:
        cols = _columns("id", "name", "email", "created_at", "updated_at")
        self.assertEqual(pending_student_migrations(cols, UNIQUE_EMAIL_INDEX, []), [])

    def test_unique_constraint_counts_as_unique(self) -> None:
        cols = _columns("id", "email", "created_at", "updated_at")
        constraints = [{"name": "uq_email", "column_names": ["email"]}]
        self.assertEqual(pending_student_migrations(cols, [], constraints), [])

    def test_missing_timestamps(self) -> None:
        cols = _columns("id", "name", "email")
        self.assertEqual(
            pending_student_migrations(cols, UNIQUE_EMAIL_INDEX, []),
            [ADD_CREATED_AT, ADD_UPDATED_AT],
        )

    def test_nullable_email(self) -> None:
        cols = _columns("id", "email", "created_at", "updated_at", email_nullable=True)
        self.assertEqual(pending_student_migrations(cols, UNIQUE_EMAIL_INDEX, []), [TIGHTEN_EMAIL])

    def test_non_unique_email_index(self) -> None:
        cols = _columns("id", "email", "created_at", "updated_at")
        indexes = [{"name": "idx_email", "column_names": ["email"], "unique": False}]
        self.assertEqual(pending_student_migrations(cols, indexes, []), [TIGHTEN_EMAIL])


class TestEnsureTables(unittest.TestCase):
    def test_creates_missing_tables_once(self) -> None:
        engine = _sqlite()
        self.assertEqual(sorted(ensure_tables(engine)), ["students", "users"])
        self.assertEqual(sorted(inspect(engine).get_table_names()), ["students", "users"])
        self.assertEqual(ensure_tables(engine), [])

    def test_fresh_tables_need_no_migrations(self) -> None:
        engine = _sqlite()
        ensure_tables(engine)
        self.assertEqual(migrate_students_table(engine), [])

    def test_log_initial_data_counts_rows(self) -> None:
        engine = _sqlite()
        ensure_tables(engine)
        with engine.begin() as conn:
            conn.execute(text("INSERT INTO students (name, email) VALUES ('A', 'a@test.com')"))
        self.assertEqual(log_initial_data(engine), (0, 1))


class TestMigrateLegacyTable(unittest.TestCase):
    def test_adds_unique_index_for_legacy_email(self) -> None:
        engine = _sqlite()
        with engine.begin() as conn:
            conn.execute(
                text(
                    "CREATE TABLE students (id INTEGER PRIMARY KEY, name VARCHAR(100) NOT NULL, "
                    "email VARCHAR(100) NOT NULL, created_at TIMESTAMP, updated_at TIMESTAMP)"
                )
            )
            conn.execute(text("INSERT INTO students (id, name, email) VALUES (1, 'A', '')"))
        self.assertEqual(migrate_students_table(engine), [TIGHTEN_EMAIL])
        with engine.connect() as conn:
            email = conn.execute(text("SELECT email FROM students WHERE id = 1")).scalar()
        self.assertEqual(email, "student1@placeholder.com")
        indexes = inspect(engine).get_indexes("students")
        self.assertTrue(any(ix["unique"] and ix["column_names"] == ["email"] for ix in indexes))
        self.assertEqual(migrate_students_table(engine), [])

    def test_failed_migration_is_logged_not_raised(self) -> None:
        engine = _sqlite()
        with engine.begin() as conn:
            # Duplicate emails make the unique index impossible.
            conn.execute(
                text(
                    "CREATE TABLE students (id INTEGER PRIMARY KEY, name VARCHAR(100), "
                    "email VARCHAR(100) NOT NULL, created_at TIMESTAMP, updated_at TIMESTAMP)"
                )
            )
            conn.execute(
                text("INSERT INTO students (id, name, email) VALUES (1, 'A', 'x@t.co'), (2, 'B', 'x@t.co')")
            )
        with self.assertLogs("student_manager.core.bootstrap", level="WARNING"):
            self.assertEqual(migrate_students_table(engine), [])


class TestRunBootstrap(unittest.TestCase):
    def test_success_on_sqlite(self) -> None:
        engine = _sqlite()
        settings = MagicMock()
        with patch.object(bootstrap, "ensure_database", return_value=False):
            result = run_bootstrap(settings, engine)
        self.assertTrue(result.success)
        self.assertEqual(sorted(result.tables_created), ["students", "users"])
        self.assertIsNone(result.error)

    def test_failure_is_reported_not_raised(self) -> None:
        settings = MagicMock()
        with patch.object(
            bootstrap, "ensure_database", side_effect=RuntimeError("connection refused")
        ):
            with self.assertLogs("student_manager.core.bootstrap", level="ERROR"):
                result = run_bootstrap(settings, _sqlite())
        self.assertFalse(result.success)
        self.assertIn("connection refused", result.error)

    def test_ensure_database_skips_non_postgres(self) -> None:
        settings = MagicMock()
        settings.database_url.drivername = "sqlite"
        self.assertFalse(bootstrap.ensure_database(settings))


if __name__ == "__main__":
    unittest.main()
