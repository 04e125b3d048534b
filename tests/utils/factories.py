import uuid
from datetime import datetime, timedelta

from faker import Faker
from sqlalchemy.orm import Session

from app.auth.models.user_profile import UserProfile, UserRole
from app.core.datetime_utils import utcnow
from app.courses.models import Course, Enrollment, Progress, TeacherAssignment, Video

fake = Faker()


def create_profile_factory(
    db_session: Session,
    email: str | None = None,
    full_name: str | None = None,
    role: UserRole = UserRole.STUDENT,
    active: bool = True,
) -> UserProfile:
    """
    Factory function to create test profiles.

    Args:
        db_session: Database session
        email: Profile email (generates random if None)
        full_name: Display name (generates random if None)
        role: Profile role
        active: Whether the profile is active

    Returns:
        Created UserProfile instance
    """
    profile = UserProfile(
        id=uuid.uuid4(),
        email=email or fake.unique.email(),
        full_name=full_name or fake.name(),
        role=role,
        active=active,
    )

    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)

    return profile


def create_course_factory(
    db_session: Session,
    code: str | None = None,
    name: str | None = None,
    cycle: int = 1,
    active: bool = True,
) -> Course:
    course = Course(
        name=name or fake.catch_phrase(),
        code=code or f"C{fake.unique.random_int(min=100, max=99999)}",
        cycle=cycle,
        credits=4,
        color="#3B82F6",
        active=active,
    )

    db_session.add(course)
    db_session.commit()
    db_session.refresh(course)

    return course


def create_video_factory(
    db_session: Session,
    course: Course,
    title: str | None = None,
    week: int = 1,
    order_in_week: int = 0,
    duration: int = 600,
    active: bool = True,
    uploaded_by: uuid.UUID | None = None,
) -> Video:
    video = Video(
        course_id=course.id,
        title=title or fake.sentence(nb_words=3),
        video_url=f"{course.id}/{fake.unique.random_int(min=1, max=10**9)}-abc123.mp4",
        week=week,
        order_in_week=order_in_week,
        duration=duration,
        file_size=1024,
        active=active,
        uploaded_by=uploaded_by,
    )

    db_session.add(video)
    db_session.commit()
    db_session.refresh(video)

    return video


def create_enrollment_factory(
    db_session: Session,
    student: UserProfile,
    course: Course,
    expires_at: datetime | None = None,
    active: bool = True,
) -> Enrollment:
    now = utcnow()
    enrollment = Enrollment(
        user_id=student.id,
        course_id=course.id,
        enrolled_at=now,
        expires_at=expires_at or now + timedelta(weeks=14),
        active=active,
    )

    db_session.add(enrollment)
    db_session.commit()
    db_session.refresh(enrollment)

    return enrollment


def create_progress_factory(
    db_session: Session,
    student: UserProfile,
    video: Video,
    last_position: int = 0,
    completed: bool = False,
) -> Progress:
    progress = Progress(
        user_id=student.id,
        video_id=video.id,
        last_position=last_position,
        watch_time=last_position,
        completed=completed,
        completed_at=utcnow() if completed else None,
    )

    db_session.add(progress)
    db_session.commit()
    db_session.refresh(progress)

    return progress


def assign_teacher_factory(
    db_session: Session, teacher: UserProfile, course: Course
) -> TeacherAssignment:
    assignment = TeacherAssignment(teacher_id=teacher.id, course_id=course.id, active=True)

    db_session.add(assignment)
    db_session.commit()
    db_session.refresh(assignment)

    return assignment
