from uuid import UUID

from pydantic import BaseModel, Field

from app.core.datetime_utils import UTCDatetime


class ProgressSaveRequest(BaseModel):
    position: float = Field(..., ge=0, description="Current playback position in seconds")
    duration: float | None = Field(None, ge=0, description="Duration reported by the player")
    watch_time: int | None = Field(None, ge=0)


class ProgressResponse(BaseModel):
    video_id: UUID
    state: str
    completed: bool = False
    last_position: int = 0
    watch_time: int = 0
    last_watched_at: UTCDatetime | None = None
    completed_at: UTCDatetime | None = None


class VideoProgressItem(BaseModel):
    video_id: UUID
    title: str
    week: int
    order_in_week: int
    duration: int
    last_position: int = 0
    watch_time: int = 0
    completed: bool = False
    state: str
    last_watched_at: UTCDatetime | None = None


class CourseProgressSummary(BaseModel):
    course_id: UUID
    total_videos: int
    completed_videos: int
    progress_percentage: int
    total_watch_time: int
    last_watched_at: UTCDatetime | None = None
    videos: list[VideoProgressItem] = []


class StudentCourseProgress(BaseModel):
    user_id: UUID
    full_name: str | None = None
    email: str | None = None
    completed_videos: int
    total_videos: int
    progress_percentage: int  # 0-100
    expires_at: UTCDatetime
    days_remaining: int
