from datetime import timedelta
from typing import Any
from uuid import UUID

import httpx
from jose import jwt

from app.core.config import settings
from app.core.datetime_utils import utcnow


def create_provider_token(user_id: UUID, email: str, expires_in: int = 3600) -> str:
    """Mint an access token the way the identity provider signs them."""
    now = utcnow()
    claims = {
        "sub": str(user_id),
        "email": email,
        "aud": settings.JWT_AUDIENCE,
        "role": "authenticated",
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    token: str = jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token


def create_auth_headers(token: str) -> dict[str, str]:
    """Create Authorization headers with Bearer token."""
    return {"Authorization": f"Bearer {token}"}


def assert_user_response_valid(data: dict[str, Any]) -> None:
    assert "id" in data
    assert "email" in data
    assert "full_name" in data
    assert "role" in data


def assert_error_code(response: httpx.Response, status_code: int, code: str) -> None:
    assert response.status_code == status_code, response.text
    assert response.json()["error"]["code"] == code
