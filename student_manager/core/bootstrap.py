"""Startup schema bootstrap: create the database and tables, apply column migrations.

Every step is idempotent. Failures are logged and reported in the result; the
application keeps starting either way.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import NullPool

from student_manager.models import Base

if TYPE_CHECKING:
    from student_manager.core.config import Settings

logger = logging.getLogger(__name__)

MAINTENANCE_DATABASE = "postgres"

ADD_CREATED_AT = "add_created_at"
ADD_UPDATED_AT = "add_updated_at"
TIGHTEN_EMAIL = "tighten_email"

EMAIL_UNIQUE_INDEX = "ix_students_email_unique"


@dataclass
class BootstrapResult:
    success: bool
    database_created: bool = False
    tables_created: list[str] = field(default_factory=list)
    migrations_applied: list[str] = field(default_factory=list)
    error: str | None = None


def ensure_database(settings: "Settings") -> bool:
    """
    Create the application database when it does not exist (PostgreSQL only).
    Returns True when the database was created.
    """
    url = settings.database_url
    if not url.drivername.startswith("postgresql"):
        return False
    maintenance = create_engine(
        url.set(database=MAINTENANCE_DATABASE),
        poolclass=NullPool,
        isolation_level="AUTOCOMMIT",
    )
    try:
        with maintenance.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": url.database},
            ).first()
            if exists:
                logger.info("Database '%s' already exists", url.database)
                return False
            quoted = conn.dialect.identifier_preparer.quote(url.database)
            conn.execute(text(f"CREATE DATABASE {quoted}"))
            logger.info("Database '%s' created", url.database)
            return True
    finally:
        maintenance.dispose()


def ensure_tables(engine: Engine) -> list[str]:
    """Create any ORM tables missing from the database. Returns the names created."""
    existing = set(inspect(engine).get_table_names())
    missing = [t.name for t in Base.metadata.sorted_tables if t.name not in existing]
    logger.info("Found %s existing table(s)", len(existing))
    if missing:
        Base.metadata.create_all(engine)
        logger.info("Created tables: %s", ", ".join(missing))
    return missing


def _email_is_unique(
    indexes: list[dict[str, Any]], unique_constraints: list[dict[str, Any]]
) -> bool:
    return any(
        ix.get("unique") and ix.get("column_names") == ["email"] for ix in indexes
    ) or any(uc.get("column_names") == ["email"] for uc in unique_constraints)


def pending_student_migrations(
    columns: list[dict[str, Any]],
    indexes: list[dict[str, Any]],
    unique_constraints: list[dict[str, Any]],
) -> list[str]:
    """Decide which column migrations the students table still needs, from inspector output."""
    by_name = {c["name"]: c for c in columns}
    pending: list[str] = []

    email = by_name.get("email")
    if email is not None:
        if email.get("nullable") or not _email_is_unique(indexes, unique_constraints):
            pending.append(TIGHTEN_EMAIL)
    if "created_at" not in by_name:
        pending.append(ADD_CREATED_AT)
    if "updated_at" not in by_name:
        pending.append(ADD_UPDATED_AT)
    return pending


def _tighten_email(conn: Connection, nullable: bool, unique: bool) -> None:
    conn.execute(
        text(
            "UPDATE students SET email = 'student' || id || '@placeholder.com' "
            "WHERE email IS NULL OR email = ''"
        )
    )
    if nullable:
        conn.execute(text("ALTER TABLE students ALTER COLUMN email SET NOT NULL"))
    if not unique:
        conn.execute(
            text(f"CREATE UNIQUE INDEX IF NOT EXISTS {EMAIL_UNIQUE_INDEX} ON students (email)")
        )


def migrate_students_table(engine: Engine) -> list[str]:
    """
    Bring an existing students table up to the current shape. Returns the
    migrations applied. A failed migration is logged and does not raise.
    """
    insp = inspect(engine)
    if "students" not in insp.get_table_names():
        return []
    columns = insp.get_columns("students")
    indexes = insp.get_indexes("students")
    unique_constraints = insp.get_unique_constraints("students")
    pending = pending_student_migrations(columns, indexes, unique_constraints)
    if not pending:
        return []

    applied: list[str] = []
    try:
        with engine.begin() as conn:
            for name in pending:
                if name == TIGHTEN_EMAIL:
                    email = next(c for c in columns if c["name"] == "email")
                    _tighten_email(
                        conn,
                        nullable=bool(email.get("nullable")),
                        unique=_email_is_unique(indexes, unique_constraints),
                    )
                elif name == ADD_CREATED_AT:
                    conn.execute(
                        text(
                            "ALTER TABLE students ADD COLUMN created_at "
                            "TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP"
                        )
                    )
                elif name == ADD_UPDATED_AT:
                    conn.execute(
                        text(
                            "ALTER TABLE students ADD COLUMN updated_at "
                            "TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP"
                        )
                    )
                applied.append(name)
                logger.info("Applied students migration: %s", name)
    except Exception as e:
        logger.warning("Could not update students table schema: %s", e)
        return []
    return applied


def log_initial_data(engine: Engine) -> tuple[int, int]:
    """Log user and student counts; returns (users, students)."""
    with engine.connect() as conn:
        user_count = conn.execute(text("SELECT COUNT(*) FROM users")).scalar() or 0
        student_count = conn.execute(text("SELECT COUNT(*) FROM students")).scalar() or 0
    logger.info("Found %s user(s) and %s student(s) in database", user_count, student_count)
    if user_count == 0:
        logger.warning(
            "No users in database. Register through POST /api/auth/register with the "
            "ADMIN_REGISTRATION_CODE, or run: python -m student_manager.scripts.admin create-user"
        )
    return user_count, student_count


def run_bootstrap(settings: "Settings", engine: Engine) -> BootstrapResult:
    """Run every bootstrap step. Never raises."""
    logger.info("Database initialization started")
    result = BootstrapResult(success=False)
    try:
        result.database_created = ensure_database(settings)
        result.tables_created = ensure_tables(engine)
        result.migrations_applied = migrate_students_table(engine)
        log_initial_data(engine)
        result.success = True
        logger.info("Database initialization completed")
    except Exception as e:
        result.error = str(e)
        logger.error(
            "Database initialization failed: %s. Check the DB_* settings and that "
            "PostgreSQL is reachable.",
            e,
        )
    return result
