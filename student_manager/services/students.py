"""Student data access: every read and write against the students table.

Thin wrappers over parameterized ORM queries. Nothing here validates input or
raises for missing rows; handlers check preconditions and map zero-row results
to 404.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session

from student_manager.core.security import normalize_email
from student_manager.models import Student
from student_manager.schemas.student import StudentBase

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "course", "enrolment_date")


def _newest_first(query: Query) -> Query:
    # created_at has second resolution on some backends; id breaks ties.
    return query.order_by(Student.created_at.desc(), Student.id.desc())


def _row_values(data: StudentBase) -> dict[str, Any]:
    """Column values for insert/update; optional fields fall back to NULL."""
    return {
        "name": data.name,
        "email": normalize_email(data.email) if data.email else data.email,
        "phone": data.phone or None,
        "course": data.course or None,
        "enrolment_date": data.enrolment_date or None,
    }


def list_active(session: Session) -> list[Student]:
    return _newest_first(session.query(Student).filter(Student.is_active.is_(True))).all()


def list_inactive(session: Session) -> list[Student]:
    return _newest_first(session.query(Student).filter(Student.is_active.is_(False))).all()


def list_all(session: Session) -> list[Student]:
    return _newest_first(session.query(Student)).all()


def list_by_status(session: Session, status: str | None) -> list[Student]:
    """Dispatch on status; anything other than inactive/all lists active records."""
    if status == "inactive":
        return list_inactive(session)
    if status == "all":
        return list_all(session)
    return list_active(session)


def get_by_id(session: Session, student_id: int) -> Student | None:
    return session.get(Student, student_id)


def find_by_email(session: Session, email: str) -> int | None:
    """Return the id of the student using email (any case, any status), else None."""
    row = (
        session.query(Student.id)
        .filter(func.lower(Student.email) == normalize_email(email))
        .first()
    )
    return row[0] if row else None


def create(session: Session, data: StudentBase) -> int:
    """Insert a student and return its id. Caller validates name/email and uniqueness."""
    student = Student(**_row_values(data))
    session.add(student)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("Student created: id=%s", student.id)
    return student.id


def update(session: Session, student_id: int, data: StudentBase) -> int:
    """Replace the editable fields of one row. Returns affected rows (0 if the id is unknown)."""
    try:
        affected = (
            session.query(Student)
            .filter(Student.id == student_id)
            .update(_row_values(data), synchronize_session=False)
        )
        session.commit()
    except Exception:
        session.rollback()
        raise
    return affected


def soft_delete(session: Session, student_id: int) -> int:
    """Mark one student inactive. Returns affected rows."""
    return soft_delete_multiple(session, [student_id])


def soft_delete_multiple(session: Session, student_ids: Iterable[int]) -> int:
    """
    Mark every listed student inactive. Returns affected rows, which may be
    fewer than requested when some ids do not exist.
    """
    ids = list(dict.fromkeys(student_ids))
    if not ids:
        return 0
    try:
        affected = (
            session.query(Student)
            .filter(Student.id.in_(ids))
            .update({Student.is_active: False}, synchronize_session=False)
        )
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("Soft-deleted students: requested=%s affected=%s", len(ids), affected)
    return affected


def hard_delete(session: Session, student_id: int) -> int:
    """Remove the row permanently. Only reachable from the admin script."""
    try:
        affected = (
            session.query(Student)
            .filter(Student.id == student_id)
            .delete(synchronize_session=False)
        )
        session.commit()
    except Exception:
        session.rollback()
        raise
    if affected:
        logger.warning("Student permanently deleted: id=%s", student_id)
    return affected


def search(session: Session, term: str) -> list[Student]:
    """Case-insensitive substring match on name, email and course among active students."""
    query = session.query(Student).filter(
        Student.is_active.is_(True),
        or_(
            Student.name.icontains(term, autoescape=True),
            Student.email.icontains(term, autoescape=True),
            Student.course.icontains(term, autoescape=True),
        ),
    )
    return _newest_first(query).all()


def count_students(session: Session) -> int:
    return session.query(func.count(Student.id)).scalar() or 0
