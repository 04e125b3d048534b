import enum
import logging
import math
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.repository import ProfileRepository
from app.core.config import settings
from app.core.datetime_utils import days_remaining, ensure_utc, utcnow
from app.core.exceptions import StoreError
from app.core.repository import is_unique_violation
from app.courses.models import Progress, Video
from app.courses.repositories import EnrollmentRepository, ProgressRepository, VideoRepository
from app.courses.schemas.progress import (
    CourseProgressSummary,
    StudentCourseProgress,
    VideoProgressItem,
)
from app.courses.services.video_service import VideoService

logger = logging.getLogger(__name__)


class ProgressState(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def calculate_percentage(completed: int, total: int) -> int:
    """Completion percentage with halves rounded up; 0 for an empty course."""
    if total <= 0:
        return 0
    return math.floor(completed / total * 100 + 0.5)


def watched_percentage(position: float, duration: float) -> float:
    if duration <= 0:
        return 0.0
    return position / duration * 100


def progress_state(progress: Progress | None) -> ProgressState:
    if progress is None:
        return ProgressState.NOT_STARTED
    if progress.completed:
        return ProgressState.COMPLETED
    return ProgressState.IN_PROGRESS


class ProgressService:
    @staticmethod
    def save_progress(
        db: Session,
        user_id: UUID,
        video: Video,
        position: float,
        duration: float | None = None,
        watch_time: int | None = None,
        now: datetime | None = None,
    ) -> Progress | None:
        """Upsert the progress row of ``user_id`` for ``video``.

        Completion is reached at ``COMPLETION_THRESHOLD_PERCENT`` of the
        duration and is never cleared afterwards. A report at position 0
        with no existing row stores nothing and returns ``None``.
        """
        if duration and duration > 0 and not video.duration:
            VideoService.record_duration(db, video, duration)
        effective_duration = duration if duration and duration > 0 else video.duration
        reached = (
            watched_percentage(position, effective_duration)
            >= settings.COMPLETION_THRESHOLD_PERCENT
        )

        progress_repo = ProgressRepository(db)
        progress = progress_repo.find_for(user_id, video.id)
        if progress is None and position <= 0:
            return None

        now = now or utcnow()
        last_position = int(position)
        watched = watch_time if watch_time is not None else last_position

        if progress is None:
            try:
                progress = progress_repo.create(
                    user_id=user_id,
                    video_id=video.id,
                    last_position=last_position,
                    watch_time=watched,
                    last_watched_at=now,
                    completed=reached,
                    completed_at=now if reached else None,
                )
                if reached:
                    logger.info("User %s completed video %s", user_id, video.id)
                return progress
            except IntegrityError as e:
                if not is_unique_violation(e, "progress"):
                    logger.error("Progress insert failed: %s", e)
                    raise StoreError("Could not save progress", operation="progress_insert") from e
                # A concurrent save created the row first
                progress = progress_repo.find_for(user_id, video.id)
                if progress is None:
                    raise StoreError("Could not save progress", operation="progress_insert") from e
            except SQLAlchemyError as e:
                logger.error("Progress insert failed: %s", e)
                raise StoreError("Could not save progress", operation="progress_insert") from e

        newly_completed = reached and not progress.completed
        try:
            progress = progress_repo.update(
                progress,
                last_position=last_position,
                watch_time=watched,
                last_watched_at=now,
                completed=progress.completed or reached,
                completed_at=progress.completed_at or (now if reached else None),
            )
        except SQLAlchemyError as e:
            logger.error("Progress update failed: %s", e)
            raise StoreError("Could not save progress", operation="progress_update") from e

        if newly_completed:
            logger.info("User %s completed video %s", user_id, video.id)
        return progress

    @staticmethod
    def get_progress(db: Session, user_id: UUID, video_id: UUID) -> Progress | None:
        return ProgressRepository(db).find_for(user_id, video_id)

    @staticmethod
    def course_summary(db: Session, user_id: UUID, course_id: UUID) -> CourseProgressSummary:
        """Per-video progress of one user across the active videos of a course."""
        videos = VideoRepository(db).list_for_course(course_id)
        by_video = ProgressRepository(db).by_video(user_id, [v.id for v in videos])

        items = []
        for video in videos:
            progress = by_video.get(video.id)
            items.append(
                VideoProgressItem(
                    video_id=video.id,
                    title=video.title,
                    week=video.week,
                    order_in_week=video.order_in_week,
                    duration=video.duration,
                    last_position=progress.last_position if progress else 0,
                    watch_time=progress.watch_time if progress else 0,
                    completed=progress.completed if progress else False,
                    state=progress_state(progress).value,
                    last_watched_at=progress.last_watched_at if progress else None,
                )
            )

        completed = sum(1 for item in items if item.completed)
        watched_dates = [ensure_utc(p.last_watched_at) for p in by_video.values()]
        return CourseProgressSummary(
            course_id=course_id,
            total_videos=len(videos),
            completed_videos=completed,
            progress_percentage=calculate_percentage(completed, len(videos)),
            total_watch_time=sum(p.watch_time for p in by_video.values()),
            last_watched_at=max(watched_dates) if watched_dates else None,
            videos=items,
        )

    @staticmethod
    def students_progress(db: Session, course_id: UUID) -> list[StudentCourseProgress]:
        """Completion of every actively enrolled student of a course."""
        video_ids = [v.id for v in VideoRepository(db).list_for_course(course_id)]
        enrollments = EnrollmentRepository(db).find_all(course_id=course_id, active=True)
        user_ids = [e.user_id for e in enrollments]
        completed = ProgressRepository(db).completed_video_ids(user_ids, video_ids)
        profiles = ProfileRepository(db).get_many(user_ids)

        rows = []
        for enrollment in enrollments:
            profile = profiles.get(enrollment.user_id)
            done = len(completed.get(enrollment.user_id, set()))
            rows.append(
                StudentCourseProgress(
                    user_id=enrollment.user_id,
                    full_name=profile.full_name if profile else None,
                    email=profile.email if profile else None,
                    completed_videos=done,
                    total_videos=len(video_ids),
                    progress_percentage=calculate_percentage(done, len(video_ids)),
                    expires_at=enrollment.expires_at,
                    days_remaining=days_remaining(enrollment.expires_at),
                )
            )
        rows.sort(key=lambda row: (row.full_name or "").lower())
        return rows
