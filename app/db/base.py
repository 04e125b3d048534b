"""
Database base module - imports all models for Alembic migration detection.

This module imports all SQLAlchemy models to ensure they are registered
with Alembic for automatic migration generation. While the imports appear
unused, they are essential for the migration system to work properly.
"""

from app.auth.models.user_profile import UserProfile
from app.courses.models.course import Course, TeacherAssignment
from app.courses.models.enrollment import Enrollment
from app.courses.models.progress import Progress
from app.courses.models.video import Video
from app.db.session import Base

# Export all models for Alembic
__all__ = [
    "Base",
    "UserProfile",
    "Course",
    "TeacherAssignment",
    "Enrollment",
    "Progress",
    "Video",
]
