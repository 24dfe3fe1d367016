"""SQLAlchemy ORM models."""

from student_manager.models.base import Base, TimestampMixin
from student_manager.models.student import Student
from student_manager.models.user import User

__all__ = ["Base", "Student", "TimestampMixin", "User"]
