from uuid import UUID

from pydantic import BaseModel

from app.core.datetime_utils import UTCDatetime
from app.courses.schemas.course import CourseResponse


class AdminStats(BaseModel):
    total_students: int
    total_courses: int
    total_videos: int
    active_enrollments: int


class InstructorCourse(BaseModel):
    course: CourseResponse
    video_count: int
    student_count: int


class StudentCourse(BaseModel):
    enrollment_id: UUID
    course: CourseResponse
    expires_at: UTCDatetime
    days_remaining: int
    is_expired: bool
    total_videos: int
    completed_videos: int
    progress_percentage: int
