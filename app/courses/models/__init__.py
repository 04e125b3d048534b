"""Course models."""

from app.courses.models.course import Course, TeacherAssignment
from app.courses.models.enrollment import Enrollment
from app.courses.models.progress import Progress
from app.courses.models.video import Video

__all__ = [
    "Course",
    "TeacherAssignment",
    "Enrollment",
    "Progress",
    "Video",
]
