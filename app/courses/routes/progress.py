from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser, require_staff, require_student
from app.courses.dependencies import RequireVideoAccess, ensure_course_access
from app.courses.models import Progress, Video
from app.courses.schemas.progress import (
    CourseProgressSummary,
    ProgressResponse,
    ProgressSaveRequest,
    StudentCourseProgress,
)
from app.courses.services.course_service import CourseService
from app.courses.services.progress_service import ProgressService, progress_state
from app.db.session import get_db

router = APIRouter()


def _to_response(video_id: UUID, progress: Progress | None) -> ProgressResponse:
    if progress is None:
        return ProgressResponse(video_id=video_id, state=progress_state(None).value)
    return ProgressResponse(
        video_id=video_id,
        state=progress_state(progress).value,
        completed=progress.completed,
        last_position=progress.last_position,
        watch_time=progress.watch_time,
        last_watched_at=progress.last_watched_at,
        completed_at=progress.completed_at,
    )


@router.post("/videos/{video_id}", response_model=ProgressResponse)
async def save_progress(
    request: ProgressSaveRequest,
    video: Video = Depends(RequireVideoAccess()),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_student),
) -> ProgressResponse:
    """Record the player position. Called periodically and on leaving the page."""
    video_id = video.id
    progress = ProgressService.save_progress(
        db,
        current_user.id,
        video,
        position=request.position,
        duration=request.duration,
        watch_time=request.watch_time,
    )
    return _to_response(video_id, progress)


@router.get("/videos/{video_id}", response_model=ProgressResponse)
async def get_video_progress(
    video: Video = Depends(RequireVideoAccess()),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_student),
) -> ProgressResponse:
    return _to_response(video.id, ProgressService.get_progress(db, current_user.id, video.id))


@router.get("/courses/{course_id}", response_model=CourseProgressSummary)
async def get_course_progress(
    course_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_student),
) -> CourseProgressSummary:
    ensure_course_access(db, current_user, course_id)
    return ProgressService.course_summary(db, current_user.id, course_id)


@router.get("/courses/{course_id}/students", response_model=list[StudentCourseProgress])
async def get_students_progress(
    course_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
) -> list[StudentCourseProgress]:
    """Completion of each enrolled student (admins, or instructors of the course)."""
    CourseService.get_course(db, course_id)
    CourseService.ensure_can_manage(db, current_user, course_id)
    return ProgressService.students_progress(db, course_id)
