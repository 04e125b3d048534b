from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.auth.models.user_profile import UserRole
from app.core.datetime_utils import UTCDatetime


class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: UserRole
    active: bool
    created_at: UTCDatetime | None = None

    class Config:
        from_attributes = True


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., alias="fullName", min_length=1, max_length=255)
    role: UserRole

    class Config:
        populate_by_name = True


class CreateUserResponse(BaseModel):
    success: bool = True
    user: UserResponse


class DeleteUserRequest(BaseModel):
    user_id: UUID = Field(..., alias="userId")
    delete_profile: bool = Field(False, alias="deleteProfile")

    class Config:
        populate_by_name = True


class DeleteUserResponse(BaseModel):
    success: bool = True


class UpdateUserRequest(BaseModel):
    full_name: str | None = Field(None, alias="fullName", min_length=1, max_length=255)
    active: bool | None = None

    class Config:
        populate_by_name = True
