"""ORM model for managed student records."""

from sqlalchemy import Boolean, Column, Date, Integer, String, true

from student_manager.models.base import Base, TimestampMixin


class Student(TimestampMixin, Base):
    """
    One student record. Deleting through the API only clears is_active.

    email is unique across active and inactive rows.
    """

    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, index=True)
    email = Column(String(100), nullable=False, unique=True, index=True)
    phone = Column(String(20), nullable=True)
    course = Column(String(100), nullable=True)
    enrolment_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
