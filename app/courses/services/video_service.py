import logging
from pathlib import Path
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser
from app.core.config import settings
from app.core.constants import VIDEO_MIME_PREFIX
from app.core.exceptions import NotFoundError, StorageError, StoreError, ValidationError
from app.core.storage import StorageBackend, build_video_path
from app.courses.models import Video
from app.courses.repositories import VideoRepository
from app.courses.services.course_service import CourseService

logger = logging.getLogger(__name__)


def default_title(filename: str | None) -> str:
    """File name without its extension, used when no title is given."""
    stem = Path(filename or "").stem.strip()
    return stem or "Untitled video"


class VideoService:
    @staticmethod
    def get_video(db: Session, video_id: UUID) -> Video:
        video = VideoRepository(db).get_by_id(video_id)
        if video is None:
            raise NotFoundError("Video not found", resource="video")
        return video

    @staticmethod
    def list_videos(db: Session, course_id: UUID, include_inactive: bool = False) -> list[Video]:
        CourseService.get_course(db, course_id)
        return VideoRepository(db).list_for_course(course_id, active_only=not include_inactive)

    @staticmethod
    def upload_video(
        db: Session,
        storage: StorageBackend,
        current_user: CurrentUser,
        course_id: UUID,
        file_content: bytes,
        filename: str | None,
        content_type: str | None,
        title: str | None = None,
        week: int = 1,
        description: str | None = None,
    ) -> Video:
        """Store a video binary, then register it.

        The row is inserted only after the upload succeeds. If the insert
        fails the uploaded object is removed again and ``StoreError`` is
        raised. Duration starts at 0; players report it later.
        """
        CourseService.get_course(db, course_id)
        CourseService.ensure_can_manage(db, current_user, course_id)

        if not content_type or not content_type.startswith(VIDEO_MIME_PREFIX):
            raise ValidationError(
                f"Invalid file type. Only video files are allowed. Received: {content_type}",
                field="file",
            )
        if not file_content:
            raise ValidationError("The uploaded file is empty", field="file")
        if len(file_content) > settings.max_video_size_bytes:
            raise ValidationError(
                f"File size exceeds maximum allowed size of {settings.MAX_VIDEO_SIZE_MB}MB",
                field="file",
            )
        if week < 1:
            raise ValidationError("Week must be 1 or greater", field="week")

        path = build_video_path(course_id, filename or "")
        pointer = storage.upload(file_content, path, content_type=content_type)

        videos = VideoRepository(db)
        try:
            video = videos.create(
                course_id=course_id,
                title=(title or "").strip() or default_title(filename),
                description=description,
                video_url=pointer,
                week=week,
                order_in_week=videos.next_order_in_week(course_id, week),
                duration=0,
                file_size=len(file_content),
                uploaded_by=current_user.id,
                active=True,
            )
        except SQLAlchemyError as e:
            logger.error("Video insert failed, removing uploaded object %s: %s", pointer, e)
            try:
                storage.delete(pointer)
            except StorageError as cleanup_error:
                logger.error("Could not remove orphaned object %s: %s", pointer, cleanup_error)
            raise StoreError("Could not save video", operation="video_insert") from e

        logger.info("Uploaded video %s to course %s (%d bytes)", video.id, course_id, video.file_size)
        return video

    @staticmethod
    def update_video(
        db: Session, current_user: CurrentUser, video_id: UUID, **changes: object
    ) -> Video:
        video = VideoService.get_video(db, video_id)
        CourseService.ensure_can_manage(db, current_user, video.course_id)
        if "title" in changes and not str(changes["title"] or "").strip():
            raise ValidationError("Title cannot be empty", field="title")
        return VideoRepository(db).update(video, **changes)

    @staticmethod
    def delete_video(
        db: Session, storage: StorageBackend, current_user: CurrentUser, video_id: UUID
    ) -> None:
        """Delete the stored object, then the row.

        A storage failure is logged and does not stop the row deletion.
        """
        video = VideoService.get_video(db, video_id)
        CourseService.ensure_can_manage(db, current_user, video.course_id)
        try:
            storage.delete(video.video_url)
        except (StorageError, ValueError) as e:
            logger.warning("Could not delete video object %s: %s", video.video_url, e)
        VideoRepository(db).delete(video)
        logger.info("Deleted video %s", video_id)

    @staticmethod
    def get_playback_url(storage: StorageBackend, video: Video) -> str:
        """Signed URL for the video, or its unsigned URL when signing fails."""
        try:
            return storage.signed_url(video.video_url, settings.SIGNED_URL_EXPIRE_SECONDS)
        except StorageError as e:
            logger.warning("Signing failed for video %s, using public URL: %s", video.id, e)
            return storage.public_url(video.video_url)

    @staticmethod
    def record_duration(db: Session, video: Video, duration: int | float | None) -> Video:
        """Persist a player-reported duration for a video still stored with 0."""
        if video.duration or not duration or duration <= 0:
            return video
        try:
            return VideoRepository(db).update(video, duration=int(round(duration)))
        except SQLAlchemyError as e:
            logger.error("Could not record duration of video %s: %s", video.id, e)
            raise StoreError("Could not save video duration", operation="video_duration") from e
