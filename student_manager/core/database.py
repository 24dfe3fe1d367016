"""PostgreSQL connection and session management."""

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import Session, sessionmaker

from student_manager.core.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.database_url,
    pool_size=10,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def get_database_status(db: Session) -> dict[str, Any]:
    """
    Connectivity plus table and row counts for the health endpoint.
    Never raises; an unreachable database reports connected=False.
    """
    # Imported here to keep models importable without a configured engine.
    from student_manager.services.students import count_students
    from student_manager.services.users import count_users

    status: dict[str, Any] = {
        "connected": False,
        "name": db.get_bind().url.database,
        "tables": 0,
        "users": 0,
        "students": 0,
    }
    if not check_db_connected(db):
        return status
    status["connected"] = True
    try:
        status["tables"] = len(inspect(db.get_bind()).get_table_names())
        status["users"] = count_users(db)
        status["students"] = count_students(db)
    except Exception as e:
        logger.warning("Could not read database status: %s", e)
        db.rollback()
    return status
