import logging
from datetime import timedelta
from typing import Any, Literal

from fastapi import Response
from jose import JWTError, jwt

from app.core.config import settings
from app.core.datetime_utils import utcnow

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
MEDIA_TOKEN_TYPE = "media"


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Verify a provider-issued access token and return its claims."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.debug("Rejected access token: %s", e)
        return None
    # Media tokens are signed with the same secret but carry no audience
    if payload.get("type") == MEDIA_TOKEN_TYPE:
        return None
    return payload


def create_media_token(path: str, expires_in: int) -> str:
    now = utcnow()
    to_encode = {
        "sub": path,
        "type": MEDIA_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    encoded: str = jwt.encode(
        to_encode, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )
    return encoded


def verify_media_token(token: str, path: str) -> bool:
    try:
        payload = jwt.decode(
            token, settings.SUPABASE_JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        return False
    return payload.get("type") == MEDIA_TOKEN_TYPE and payload.get("sub") == path


def _cookie_samesite() -> Literal["lax", "none"]:
    """Return SameSite policy: 'none' for cross-site production, 'lax' for same-site/dev."""
    return "lax" if settings.DEBUG else "none"


def set_auth_cookie(response: Response, access_token: str, max_age: int | None = None) -> None:
    """Set the httpOnly access token cookie."""
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        httponly=True,
        secure=not settings.DEBUG,
        samesite=_cookie_samesite(),
        max_age=max_age or settings.ACCESS_TOKEN_COOKIE_MAX_AGE,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        ACCESS_TOKEN_COOKIE, samesite=_cookie_samesite(), secure=not settings.DEBUG
    )
