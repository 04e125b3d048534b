import logging
import random
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser
from app.auth.models.user_profile import UserRole
from app.auth.repository import ProfileRepository
from app.core.constants import COURSE_COLORS
from app.core.exceptions import (
    DuplicateCourseCodeError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    StoreError,
    ValidationError,
)
from app.core.repository import is_unique_violation
from app.core.storage import StorageBackend
from app.courses.models import Course, TeacherAssignment
from app.courses.repositories import (
    CourseRepository,
    TeacherAssignmentRepository,
    VideoRepository,
)
from app.courses.schemas.course import CourseCreate, CourseUpdate

logger = logging.getLogger(__name__)


def _translate_write_error(e: SQLAlchemyError, code: str | None) -> Exception:
    if isinstance(e, IntegrityError) and code and is_unique_violation(e, "code"):
        return DuplicateCourseCodeError(code)
    logger.error("Course write failed: %s", e)
    return StoreError("Could not save course", operation="course_write")


class CourseService:
    @staticmethod
    def get_course(db: Session, course_id: UUID) -> Course:
        course = CourseRepository(db).get_by_id(course_id)
        if course is None:
            raise NotFoundError("Course not found", resource="course")
        return course

    @staticmethod
    def list_courses(db: Session, current_user: CurrentUser, active: bool | None = None) -> list[Course]:
        """Courses visible to staff: all for admins, assigned ones for instructors."""
        courses = CourseRepository(db)
        if current_user.is_admin:
            return courses.list_courses(active=active)
        course_ids = TeacherAssignmentRepository(db).active_course_ids(current_user.id)
        return [
            c for c in courses.get_many(course_ids) if active is None or c.active == active
        ]

    @staticmethod
    def create_course(db: Session, data: CourseCreate, created_by: UUID) -> Course:
        courses = CourseRepository(db)
        code = data.code.strip().upper()
        if courses.find_by_code(code):
            raise DuplicateCourseCodeError(code)

        values = data.model_dump()
        values["code"] = code
        values["color"] = data.color or random.choice(COURSE_COLORS)
        try:
            course = courses.create(**values, created_by=created_by)
        except SQLAlchemyError as e:
            raise _translate_write_error(e, code) from e

        logger.info("Created course %s (%s)", course.id, course.code)
        return course

    @staticmethod
    def update_course(db: Session, course_id: UUID, data: CourseUpdate) -> Course:
        course = CourseService.get_course(db, course_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("code"):
            changes["code"] = changes["code"].strip().upper()
        try:
            return CourseRepository(db).update(course, **changes)
        except SQLAlchemyError as e:
            raise _translate_write_error(e, changes.get("code")) from e

    @staticmethod
    def toggle_active(db: Session, course_id: UUID) -> Course:
        course = CourseService.get_course(db, course_id)
        return CourseRepository(db).update(course, active=not course.active)

    @staticmethod
    def delete_course(db: Session, course_id: UUID, storage: StorageBackend) -> None:
        """Delete a course with its videos and enrollments.

        Video binaries are removed first, best-effort.
        """
        course = CourseService.get_course(db, course_id)
        for video in VideoRepository(db).list_for_course(course_id, active_only=False):
            try:
                storage.delete(video.video_url)
            except (StorageError, ValueError) as e:
                logger.warning("Could not delete video object %s: %s", video.video_url, e)
        CourseRepository(db).delete(course)
        logger.info("Deleted course %s", course_id)

    @staticmethod
    def assign_teacher(db: Session, course_id: UUID, teacher_id: UUID) -> TeacherAssignment:
        CourseService.get_course(db, course_id)
        teacher = ProfileRepository(db).get_by_id(teacher_id)
        if teacher is None:
            raise NotFoundError("User not found", resource="user")
        if teacher.role != UserRole.INSTRUCTOR:
            raise ValidationError("Only instructors can be assigned to courses", field="teacher_id")

        assignments = TeacherAssignmentRepository(db)
        existing = assignments.find_one(teacher_id=teacher_id, course_id=course_id)
        if existing is not None:
            return assignments.update(existing, active=True)
        return assignments.create(teacher_id=teacher_id, course_id=course_id, active=True)

    @staticmethod
    def unassign_teacher(db: Session, course_id: UUID, teacher_id: UUID) -> None:
        assignments = TeacherAssignmentRepository(db)
        existing = assignments.find_one(teacher_id=teacher_id, course_id=course_id, active=True)
        if existing is None:
            raise NotFoundError("Assignment not found", resource="teacher_assignment")
        assignments.update(existing, active=False)

    @staticmethod
    def ensure_can_manage(db: Session, current_user: CurrentUser, course_id: UUID) -> None:
        """Admins manage every course; instructors only the ones assigned to them."""
        if current_user.is_admin:
            return
        if current_user.is_instructor and TeacherAssignmentRepository(db).is_assigned(
            current_user.id, course_id
        ):
            return
        raise ForbiddenError("You are not assigned to this course")
