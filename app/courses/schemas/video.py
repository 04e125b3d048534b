from uuid import UUID

from pydantic import BaseModel, Field

from app.core.datetime_utils import UTCDatetime


class VideoResponse(BaseModel):
    id: UUID
    course_id: UUID
    title: str
    description: str | None = None
    week: int
    order_in_week: int
    duration: int
    file_size: int
    uploaded_by: UUID | None = None
    active: bool
    created_at: UTCDatetime

    class Config:
        from_attributes = True


class VideoUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    week: int | None = Field(None, ge=1)
    order_in_week: int | None = Field(None, ge=0)
    active: bool | None = None


class PlaybackResponse(BaseModel):
    video: VideoResponse
    url: str
    expires_in: int
    last_position: int = 0
    completed: bool = False
    save_interval_seconds: int
