import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.auth.dependencies import CurrentUser, get_access_token, get_current_user
from app.auth.repository import ProfileRepository
from app.auth.schemas.auth import LoginRequest, LoginResponse, MessageResponse
from app.auth.schemas.user import UserResponse
from app.auth.services.identity_provider import IdentityProvider, get_identity_provider
from app.core import security
from app.core.config import settings
from app.core.constants import ROLE_HOME_PATHS
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.rate_limit import limiter
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> LoginResponse:
    """Sign in with the identity provider and open an API session."""
    session = await provider.sign_in_with_password(credentials.email, credentials.password)

    profile = ProfileRepository(db).get_by_id(session.user_id)
    if profile is None:
        await provider.sign_out(session.access_token)
        raise UnauthorizedError("User not found in the system. Contact the administrator.")
    if not profile.active:
        await provider.sign_out(session.access_token)
        raise ForbiddenError("Your account is inactive. Contact the administrator.")

    security.set_auth_cookie(response, session.access_token, max_age=session.expires_in)
    logger.info("User %s signed in", profile.id)

    return LoginResponse(
        user=UserResponse.model_validate(profile),
        redirect_to=ROLE_HOME_PATHS[profile.role.value],
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    access_token: str = Depends(get_access_token),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> MessageResponse:
    await provider.sign_out(access_token)
    security.clear_auth_cookie(response)
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=UserResponse)
async def me(current_user: CurrentUser = Depends(get_current_user)) -> UserResponse:
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        role=current_user.role,
        active=current_user.active,
    )
