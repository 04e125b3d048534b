from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Cookie, Depends, Header
from sqlalchemy.orm import Session

from app.auth.models.user_profile import UserProfile, UserRole
from app.auth.repository import ProfileRepository
from app.core import security
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.db.session import get_db


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller, resolved once per request."""

    id: UUID
    email: str
    full_name: str
    role: UserRole
    active: bool

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "CurrentUser":
        return cls(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            role=profile.role,
            active=profile.active,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_instructor(self) -> bool:
        return self.role == UserRole.INSTRUCTOR

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT


async def get_access_token(
    access_token: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Take the access token from the cookie, or from a Bearer header."""
    if access_token:
        return access_token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    raise UnauthorizedError("Not authenticated")


async def get_current_user(
    access_token: str = Depends(get_access_token),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Resolve the provider session into an application-level user."""
    payload = security.decode_access_token(access_token)
    if payload is None or not payload.get("sub"):
        raise UnauthorizedError("Could not validate credentials")

    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError as e:
        raise UnauthorizedError("Could not validate credentials") from e

    profile = ProfileRepository(db).get_by_id(user_id)
    if profile is None:
        raise UnauthorizedError("User not found in the system")
    if not profile.active:
        raise ForbiddenError("Account is inactive")

    return CurrentUser.from_profile(profile)


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise ForbiddenError("Administrator privileges required")
    return current_user


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[CurrentUser]]:
    """Build a dependency admitting only the given roles."""

    async def dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise ForbiddenError("Your role cannot perform this action")
        return current_user

    return dependency


require_staff = require_roles(UserRole.ADMIN, UserRole.INSTRUCTOR)
require_student = require_roles(UserRole.STUDENT)
