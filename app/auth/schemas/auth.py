from pydantic import BaseModel, EmailStr, Field

from app.auth.schemas.user import UserResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    user: UserResponse
    redirect_to: str


class MessageResponse(BaseModel):
    message: str
