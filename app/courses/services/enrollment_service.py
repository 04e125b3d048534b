import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.models.user_profile import UserRole
from app.auth.repository import ProfileRepository
from app.core.config import settings
from app.core.datetime_utils import ensure_utc, utcnow, weeks_from
from app.core.exceptions import (
    DuplicateActiveEnrollmentError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from app.core.repository import is_unique_violation
from app.courses.models import Enrollment
from app.courses.models.enrollment import ACTIVE_ENROLLMENT_INDEX
from app.courses.repositories import CourseRepository, EnrollmentRepository

logger = logging.getLogger(__name__)


def _translate_write_error(e: SQLAlchemyError) -> Exception:
    if isinstance(e, IntegrityError) and is_unique_violation(
        e, ACTIVE_ENROLLMENT_INDEX, "enrollments"
    ):
        return DuplicateActiveEnrollmentError()
    logger.error("Enrollment write failed: %s", e)
    return StoreError("Could not save enrollment", operation="enrollment_write")


class EnrollmentService:
    @staticmethod
    def get_enrollment(db: Session, enrollment_id: UUID) -> Enrollment:
        enrollment = EnrollmentRepository(db).get_by_id(enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found", resource="enrollment")
        return enrollment

    @staticmethod
    def create_enrollment(
        db: Session,
        student_id: UUID,
        course_id: UUID,
        duration_weeks: int | None = None,
        notes: str | None = None,
        created_by: UUID | None = None,
        now: datetime | None = None,
    ) -> Enrollment:
        """Enroll a student in a course for a bounded window.

        The window starts now and lasts ``duration_weeks`` weeks (default
        from settings). A student holds at most one active enrollment per
        course; the existence check runs first and the partial unique index
        catches concurrent inserts that slip past it.

        Raises:
            NotFoundError: unknown student or course.
            ValidationError: the profile is not a student, or weeks < 1.
            DuplicateActiveEnrollmentError: an active enrollment already exists.
        """
        weeks = duration_weeks if duration_weeks is not None else settings.DEFAULT_ENROLLMENT_WEEKS
        if weeks < 1:
            raise ValidationError("Duration must be at least one week", field="duration_weeks")

        student = ProfileRepository(db).get_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found", resource="user")
        if student.role != UserRole.STUDENT:
            raise ValidationError("Only students can be enrolled", field="student_id")
        if CourseRepository(db).get_by_id(course_id) is None:
            raise NotFoundError("Course not found", resource="course")

        enrollments = EnrollmentRepository(db)
        if enrollments.find_active(student_id, course_id) is not None:
            raise DuplicateActiveEnrollmentError()

        enrolled_at = now or utcnow()
        try:
            enrollment = enrollments.create(
                user_id=student_id,
                course_id=course_id,
                enrolled_at=enrolled_at,
                expires_at=weeks_from(enrolled_at, weeks),
                active=True,
                payment_verified=False,
                notes=notes,
                created_by=created_by,
            )
        except SQLAlchemyError as e:
            raise _translate_write_error(e) from e

        logger.info(
            "Enrolled student %s in course %s for %d weeks", student_id, course_id, weeks
        )
        return enrollment

    @staticmethod
    def toggle_active(db: Session, enrollment_id: UUID) -> Enrollment:
        """Flip the active flag. ``expires_at`` is left alone."""
        enrollments = EnrollmentRepository(db)
        enrollment = EnrollmentService.get_enrollment(db, enrollment_id)
        if not enrollment.active:
            other = enrollments.find_active(enrollment.user_id, enrollment.course_id)
            if other is not None and other.id != enrollment.id:
                raise DuplicateActiveEnrollmentError()
        try:
            return enrollments.update(enrollment, active=not enrollment.active)
        except SQLAlchemyError as e:
            raise _translate_write_error(e) from e

    @staticmethod
    def delete_enrollment(db: Session, enrollment_id: UUID) -> None:
        """Hard delete. Progress rows of the student are kept."""
        enrollment = EnrollmentService.get_enrollment(db, enrollment_id)
        EnrollmentRepository(db).delete(enrollment)
        logger.info("Deleted enrollment %s", enrollment_id)

    @staticmethod
    def set_payment_verified(db: Session, enrollment_id: UUID, verified: bool) -> Enrollment:
        enrollment = EnrollmentService.get_enrollment(db, enrollment_id)
        return EnrollmentRepository(db).update(enrollment, payment_verified=verified)

    @staticmethod
    def extend(
        db: Session, enrollment_id: UUID, weeks: int, now: datetime | None = None
    ) -> Enrollment:
        """Push ``expires_at`` forward by ``weeks``, counting from now if already expired."""
        if weeks < 1:
            raise ValidationError("Extension must be at least one week", field="weeks")
        enrollment = EnrollmentService.get_enrollment(db, enrollment_id)
        start = max(ensure_utc(enrollment.expires_at), ensure_utc(now or utcnow()))
        return EnrollmentRepository(db).update(enrollment, expires_at=weeks_from(start, weeks))

    @staticmethod
    def has_access(
        db: Session, student_id: UUID, course_id: UUID, now: datetime | None = None
    ) -> bool:
        return EnrollmentRepository(db).find_accessible(student_id, course_id, now) is not None

    @staticmethod
    def list_for_student(db: Session, student_id: UUID, active_only: bool = True) -> list[Enrollment]:
        return EnrollmentRepository(db).list_for_student(student_id, active_only=active_only)
