from uuid import UUID

from sqlalchemy.orm import Session

from app.auth.models.user_profile import UserRole
from app.auth.repository import ProfileRepository
from app.courses.repositories import (
    CourseRepository,
    EnrollmentRepository,
    ProgressRepository,
    TeacherAssignmentRepository,
    VideoRepository,
)
from app.courses.schemas.course import CourseResponse
from app.courses.schemas.dashboard import AdminStats, InstructorCourse, StudentCourse
from app.courses.services.progress_service import calculate_percentage


class DashboardService:
    @staticmethod
    def admin_stats(db: Session) -> AdminStats:
        return AdminStats(
            total_students=ProfileRepository(db).count(role=UserRole.STUDENT, active=True),
            total_courses=CourseRepository(db).count(active=True),
            total_videos=VideoRepository(db).count(active=True),
            active_enrollments=EnrollmentRepository(db).count(active=True),
        )

    @staticmethod
    def instructor_courses(db: Session, instructor_id: UUID) -> list[InstructorCourse]:
        """Assigned active courses with the instructor's uploads and enrolled students."""
        course_ids = TeacherAssignmentRepository(db).active_course_ids(instructor_id)
        courses = [c for c in CourseRepository(db).get_many(course_ids) if c.active]
        students = EnrollmentRepository(db).active_student_ids([c.id for c in courses])
        videos = VideoRepository(db)
        return [
            InstructorCourse(
                course=CourseResponse.model_validate(course),
                video_count=videos.count_uploaded_by(instructor_id, course.id),
                student_count=len(students.get(course.id, set())),
            )
            for course in courses
        ]

    @staticmethod
    def student_courses(db: Session, student_id: UUID) -> list[StudentCourse]:
        """Courses the student is actively enrolled in, with completion."""
        enrollments = [
            e for e in EnrollmentRepository(db).list_for_student(student_id) if e.course.active
        ]
        videos = VideoRepository(db).list_for_courses([e.course_id for e in enrollments])
        completed = ProgressRepository(db).completed_video_ids(
            [student_id], [v.id for v in videos]
        )[student_id]

        result = []
        for enrollment in enrollments:
            course_video_ids = {v.id for v in videos if v.course_id == enrollment.course_id}
            done = len(course_video_ids & completed)
            result.append(
                StudentCourse(
                    enrollment_id=enrollment.id,
                    course=CourseResponse.model_validate(enrollment.course),
                    expires_at=enrollment.expires_at,
                    days_remaining=enrollment.days_remaining,
                    is_expired=enrollment.is_expired,
                    total_videos=len(course_video_ids),
                    completed_videos=done,
                    progress_percentage=calculate_percentage(done, len(course_video_ids)),
                )
            )
        return result
