"""Typed repositories for the course domain.

Each repository returns the domain models of ``app.courses.models``; query
details such as ordering and the access predicate live here only.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.core.datetime_utils import utcnow
from app.core.repository import BaseRepository
from app.courses.models import Course, Enrollment, Progress, TeacherAssignment, Video


class CourseRepository(BaseRepository[Course]):
    def __init__(self, db: Session):
        super().__init__(db, Course)

    def find_by_code(self, code: str) -> Course | None:
        return self.find_one(code=code)

    def list_courses(self, active: bool | None = None) -> list[Course]:
        query = self.db.query(Course)
        if active is not None:
            query = query.filter(Course.active == active)
        return query.order_by(Course.cycle, Course.name).all()

    def get_many(self, ids: list[UUID]) -> list[Course]:
        if not ids:
            return []
        return (
            self.db.query(Course)
            .filter(Course.id.in_(ids))
            .order_by(Course.cycle, Course.name)
            .all()
        )


class TeacherAssignmentRepository(BaseRepository[TeacherAssignment]):
    def __init__(self, db: Session):
        super().__init__(db, TeacherAssignment)

    def active_course_ids(self, teacher_id: UUID) -> list[UUID]:
        rows = (
            self.db.query(TeacherAssignment.course_id)
            .filter(TeacherAssignment.teacher_id == teacher_id, TeacherAssignment.active)
            .all()
        )
        return [row[0] for row in rows]

    def is_assigned(self, teacher_id: UUID, course_id: UUID) -> bool:
        return self.exists(teacher_id=teacher_id, course_id=course_id, active=True)


class VideoRepository(BaseRepository[Video]):
    def __init__(self, db: Session):
        super().__init__(db, Video)

    def list_for_course(self, course_id: UUID, active_only: bool = True) -> list[Video]:
        query = self.db.query(Video).filter(Video.course_id == course_id)
        if active_only:
            query = query.filter(Video.active)
        return query.order_by(Video.week, Video.order_in_week, Video.created_at).all()

    def list_for_courses(self, course_ids: list[UUID], active_only: bool = True) -> list[Video]:
        if not course_ids:
            return []
        query = self.db.query(Video).filter(Video.course_id.in_(course_ids))
        if active_only:
            query = query.filter(Video.active)
        return query.order_by(Video.week, Video.order_in_week).all()

    def next_order_in_week(self, course_id: UUID, week: int) -> int:
        current = (
            self.db.query(func.max(Video.order_in_week))
            .filter(Video.course_id == course_id, Video.week == week)
            .scalar()
        )
        return 0 if current is None else current + 1

    def count_uploaded_by(self, user_id: UUID, course_id: UUID) -> int:
        return self.count(uploaded_by=user_id, course_id=course_id, active=True)


class EnrollmentRepository(BaseRepository[Enrollment]):
    def __init__(self, db: Session):
        super().__init__(db, Enrollment)

    def find_active(self, user_id: UUID, course_id: UUID) -> Enrollment | None:
        return self.find_one(user_id=user_id, course_id=course_id, active=True)

    def find_accessible(
        self, user_id: UUID, course_id: UUID, now: datetime | None = None
    ) -> Enrollment | None:
        """Active, unexpired enrollment in an active course, if any."""
        now = now or utcnow()
        result = (
            self.db.query(Enrollment)
            .join(Course, Course.id == Enrollment.course_id)
            .filter(
                Enrollment.user_id == user_id,
                Enrollment.course_id == course_id,
                Enrollment.active,
                Enrollment.expires_at > now,
                Course.active,
            )
            .first()
        )
        return result

    def list_for_student(self, user_id: UUID, active_only: bool = True) -> list[Enrollment]:
        query = (
            self.db.query(Enrollment)
            .options(joinedload(Enrollment.course))
            .filter(Enrollment.user_id == user_id)
        )
        if active_only:
            query = query.filter(Enrollment.active)
        return query.order_by(Enrollment.enrolled_at.desc()).all()

    def search(
        self,
        user_id: UUID | None = None,
        course_id: UUID | None = None,
        active: bool | None = None,
        expired: bool | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Enrollment], int]:
        query = self.db.query(Enrollment).options(
            joinedload(Enrollment.student), joinedload(Enrollment.course)
        )
        if user_id is not None:
            query = query.filter(Enrollment.user_id == user_id)
        if course_id is not None:
            query = query.filter(Enrollment.course_id == course_id)
        if active is not None:
            query = query.filter(Enrollment.active == active)
        if expired is not None:
            now = utcnow()
            if expired:
                query = query.filter(Enrollment.expires_at <= now)
            else:
                query = query.filter(Enrollment.expires_at > now)
        total = query.count()
        rows = query.order_by(Enrollment.enrolled_at.desc()).offset(skip).limit(limit).all()
        return rows, total

    def active_student_ids(self, course_ids: list[UUID]) -> dict[UUID, set[UUID]]:
        """Map course id to the ids of students actively enrolled in it."""
        if not course_ids:
            return {}
        rows = (
            self.db.query(Enrollment.course_id, Enrollment.user_id)
            .filter(Enrollment.course_id.in_(course_ids), Enrollment.active)
            .all()
        )
        result: dict[UUID, set[UUID]] = {course_id: set() for course_id in course_ids}
        for course_id, user_id in rows:
            result[course_id].add(user_id)
        return result


class ProgressRepository(BaseRepository[Progress]):
    def __init__(self, db: Session):
        super().__init__(db, Progress)

    def find_for(self, user_id: UUID, video_id: UUID) -> Progress | None:
        return self.find_one(user_id=user_id, video_id=video_id)

    def by_video(self, user_id: UUID, video_ids: list[UUID]) -> dict[UUID, Progress]:
        if not video_ids:
            return {}
        rows = (
            self.db.query(Progress)
            .filter(Progress.user_id == user_id, Progress.video_id.in_(video_ids))
            .all()
        )
        return {row.video_id: row for row in rows}

    def completed_video_ids(self, user_ids: list[UUID], video_ids: list[UUID]) -> dict[UUID, set[UUID]]:
        """Map each user id to the ids of the given videos they completed."""
        result: dict[UUID, set[UUID]] = {user_id: set() for user_id in user_ids}
        if not user_ids or not video_ids:
            return result
        rows = (
            self.db.query(Progress.user_id, Progress.video_id)
            .filter(
                Progress.user_id.in_(user_ids),
                Progress.video_id.in_(video_ids),
                Progress.completed,
            )
            .all()
        )
        for user_id, video_id in rows:
            result[user_id].add(video_id)
        return result
