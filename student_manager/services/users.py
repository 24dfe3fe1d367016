"""User account data access for the users table."""

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from student_manager.core.exceptions import ValidationError
from student_manager.core.security import normalize_email
from student_manager.models import User

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"username", "email", "password_hash"})


def create_user(session: Session, username: str, email: str, password_hash: str) -> User:
    """Insert an account. Raises sqlalchemy IntegrityError if username or email is taken."""
    user = User(
        username=username,
        email=normalize_email(email),
        password_hash=password_hash,
    )
    session.add(user)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(user)
    return user


def get_by_id(session: Session, user_id: int) -> User | None:
    return session.get(User, user_id)


def get_by_email(session: Session, email: str) -> User | None:
    return (
        session.query(User)
        .filter(func.lower(User.email) == normalize_email(email))
        .first()
    )


def get_by_username(session: Session, username: str) -> User | None:
    return session.query(User).filter(User.username == username).first()


def list_users(session: Session) -> list[User]:
    return session.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def username_exists(session: Session, username: str) -> bool:
    return get_by_username(session, username) is not None


def email_exists(session: Session, email: str) -> bool:
    return get_by_email(session, email) is not None


def update_user(session: Session, user_id: int, **fields: Any) -> bool:
    """
    Update username, email and/or password_hash. Other keys and None values are ignored.
    Returns True when a row was updated.
    """
    values = {
        key: value
        for key, value in fields.items()
        if key in UPDATABLE_FIELDS and value is not None
    }
    if not values:
        raise ValidationError("No valid fields to update")
    if "email" in values:
        values["email"] = normalize_email(values["email"])
    try:
        affected = (
            session.query(User)
            .filter(User.id == user_id)
            .update(values, synchronize_session=False)
        )
        session.commit()
    except Exception:
        session.rollback()
        raise
    return affected > 0


def delete_user(session: Session, user_id: int) -> bool:
    try:
        affected = (
            session.query(User)
            .filter(User.id == user_id)
            .delete(synchronize_session=False)
        )
        session.commit()
    except Exception:
        session.rollback()
        raise
    if affected:
        logger.info("User deleted: id=%s", user_id)
    return affected > 0


def count_users(session: Session) -> int:
    return session.query(func.count(User.id)).scalar() or 0
