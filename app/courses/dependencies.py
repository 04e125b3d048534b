from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser, get_current_user
from app.core.exceptions import ForbiddenError, NotFoundError
from app.courses.models import Video
from app.courses.repositories import (
    EnrollmentRepository,
    TeacherAssignmentRepository,
    VideoRepository,
)
from app.db.session import get_db


def ensure_course_access(db: Session, current_user: CurrentUser, course_id: UUID) -> None:
    """Check the caller may read a course's content.

    Admins read everything, instructors the courses assigned to them, and
    students need an active, unexpired enrollment in an active course.
    """
    if current_user.is_admin:
        return
    if current_user.is_instructor:
        if not TeacherAssignmentRepository(db).is_assigned(current_user.id, course_id):
            raise ForbiddenError("You are not assigned to this course")
        return
    if EnrollmentRepository(db).find_accessible(current_user.id, course_id) is None:
        raise ForbiddenError("You do not have access to this course")


class RequireCourseAccess:
    """Dependency class checking the caller may read a course's content."""

    def __call__(
        self,
        course_id: UUID,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> CurrentUser:
        ensure_course_access(db, current_user, course_id)
        return current_user


class RequireVideoAccess:
    """Dependency class resolving a video and checking access to its course."""

    def __call__(
        self,
        video_id: UUID,
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> Video:
        video = VideoRepository(db).get_by_id(video_id)
        if video is None or (current_user.is_student and not video.active):
            raise NotFoundError("Video not found", resource="video")
        ensure_course_access(db, current_user, video.course_id)
        return video
