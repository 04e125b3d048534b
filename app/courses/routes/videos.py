from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser, get_current_user, require_staff
from app.core.config import settings
from app.core.storage import StorageBackend, get_storage
from app.courses.dependencies import RequireCourseAccess, RequireVideoAccess
from app.courses.models import Video
from app.courses.repositories import ProgressRepository
from app.courses.schemas.video import PlaybackResponse, VideoResponse, VideoUpdate
from app.courses.services.video_service import VideoService
from app.db.session import get_db

router = APIRouter()


@router.get("/courses/{course_id}/videos", response_model=list[VideoResponse])
async def list_course_videos(
    course_id: UUID,
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(RequireCourseAccess()),
) -> list[VideoResponse]:
    """Videos of a course ordered by week and position in the week."""
    videos = VideoService.list_videos(
        db, course_id, include_inactive=include_inactive and not current_user.is_student
    )
    return [VideoResponse.model_validate(v) for v in videos]


@router.post(
    "/courses/{course_id}/videos",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_video(
    course_id: UUID,
    file: UploadFile = File(...),
    title: str | None = Form(None),
    week: int = Form(1),
    description: str | None = Form(None),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: CurrentUser = Depends(require_staff),
) -> VideoResponse:
    """Upload a video binary and register it in the course (staff only)."""
    file_content = await file.read()
    video = VideoService.upload_video(
        db,
        storage,
        current_user,
        course_id=course_id,
        file_content=file_content,
        filename=file.filename,
        content_type=file.content_type,
        title=title,
        week=week,
        description=description,
    )
    return VideoResponse.model_validate(video)


@router.get("/videos/{video_id}", response_model=VideoResponse)
async def get_video(video: Video = Depends(RequireVideoAccess())) -> VideoResponse:
    return VideoResponse.model_validate(video)


@router.get("/videos/{video_id}/playback", response_model=PlaybackResponse)
async def get_playback(
    video: Video = Depends(RequireVideoAccess()),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: CurrentUser = Depends(get_current_user),
) -> PlaybackResponse:
    """Signed playback URL plus the caller's resume point."""
    progress = ProgressRepository(db).find_for(current_user.id, video.id)
    return PlaybackResponse(
        video=VideoResponse.model_validate(video),
        url=VideoService.get_playback_url(storage, video),
        expires_in=settings.SIGNED_URL_EXPIRE_SECONDS,
        last_position=progress.last_position if progress else 0,
        completed=progress.completed if progress else False,
        save_interval_seconds=settings.PROGRESS_SAVE_INTERVAL_SECONDS,
    )


@router.patch("/videos/{video_id}", response_model=VideoResponse)
async def update_video(
    video_id: UUID,
    data: VideoUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
) -> VideoResponse:
    video = VideoService.update_video(
        db, current_user, video_id, **data.model_dump(exclude_unset=True)
    )
    return VideoResponse.model_validate(video)


@router.delete("/videos/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: UUID,
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: CurrentUser = Depends(require_staff),
) -> None:
    VideoService.delete_video(db, storage, current_user, video_id)
