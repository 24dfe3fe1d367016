"""ORM model for application user accounts (login and registration)."""

from sqlalchemy import Column, Integer, String

from student_manager.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """
    Account allowed to manage student records.

    email is stored lowercase; password_hash never leaves the service layer.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(100), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
