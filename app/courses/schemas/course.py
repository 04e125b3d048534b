from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.datetime_utils import UTCDatetime


class CourseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    code: str = Field(..., min_length=1, max_length=50)
    cycle: Literal[1, 2]
    credits: int | None = Field(None, ge=0, le=30)
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class CourseCreate(CourseBase):
    active: bool = True


class CourseUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    code: str | None = Field(None, min_length=1, max_length=50)
    cycle: Literal[1, 2] | None = None
    credits: int | None = Field(None, ge=0, le=30)
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    active: bool | None = None


class CourseResponse(CourseBase):
    id: UUID
    active: bool
    created_at: UTCDatetime
    created_by: UUID | None = None

    class Config:
        from_attributes = True


class TeacherAssignmentRequest(BaseModel):
    teacher_id: UUID


class TeacherAssignmentResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    course_id: UUID
    active: bool
    assigned_at: UTCDatetime

    class Config:
        from_attributes = True
