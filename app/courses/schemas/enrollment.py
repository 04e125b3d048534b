from uuid import UUID

from pydantic import BaseModel, Field

from app.core.datetime_utils import UTCDatetime


class EnrollmentCreateRequest(BaseModel):
    student_id: UUID = Field(..., alias="studentId")
    course_id: UUID = Field(..., alias="courseId")
    duration_weeks: int | None = Field(None, alias="durationWeeks", ge=1, le=104)
    notes: str | None = None

    class Config:
        populate_by_name = True


class EnrollmentExtendRequest(BaseModel):
    weeks: int = Field(..., ge=1, le=104)


class PaymentVerifiedRequest(BaseModel):
    payment_verified: bool = Field(..., alias="paymentVerified")

    class Config:
        populate_by_name = True


class EnrollmentResponse(BaseModel):
    id: UUID
    user_id: UUID
    course_id: UUID
    enrolled_at: UTCDatetime
    expires_at: UTCDatetime
    payment_verified: bool
    active: bool
    notes: str | None = None
    created_by: UUID | None = None
    is_expired: bool
    days_remaining: int
    student_name: str | None = None
    student_email: str | None = None
    course_name: str | None = None
    course_code: str | None = None


class AccessResponse(BaseModel):
    course_id: UUID
    has_access: bool
