"""Core app configuration and database."""

from student_manager.core.config import get_settings, settings
from student_manager.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
