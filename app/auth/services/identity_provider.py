"""Client for the hosted identity provider (Supabase Auth / GoTrue REST API).

The provider owns credentials and sessions. This module only signs users in,
revokes sessions and, with the service role key, creates or deletes accounts.
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import httpx

from app.core.config import settings
from app.core.exceptions import (
    IdentityProviderError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSession:
    """Session issued by the provider after a password sign-in."""

    access_token: str
    expires_in: int
    user_id: UUID
    email: str


@dataclass(frozen=True)
class ProviderUser:
    id: UUID
    email: str


def _error_message(response: httpx.Response) -> str:
    try:
        body: dict[str, Any] = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    for key in ("msg", "error_description", "message", "error"):
        if body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


class IdentityProvider:
    """Async wrapper around the provider's auth endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        anon_key: str | None = None,
        service_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.anon_key = anon_key or settings.SUPABASE_ANON_KEY
        self.service_key = service_key or settings.SUPABASE_SERVICE_ROLE_KEY
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/auth/v1",
            timeout=settings.IDENTITY_TIMEOUT_SECONDS,
            transport=self._transport,
        )

    def _public_headers(self, token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self.anon_key}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _admin_headers(self) -> dict[str, str]:
        return {"apikey": self.service_key, "Authorization": f"Bearer {self.service_key}"}

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error("Identity provider unreachable: %s", e)
            raise IdentityProviderError("Identity provider is unreachable") from e

    async def sign_in_with_password(self, email: str, password: str) -> ProviderSession:
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            headers=self._public_headers(),
        )
        if response.status_code in (400, 401, 422):
            raise UnauthorizedError("Invalid credentials. Check your email and password.")
        if response.is_error:
            logger.error(
                "Sign-in failed with provider status %s: %s",
                response.status_code,
                _error_message(response),
            )
            raise IdentityProviderError("Could not sign in, try again later")

        body = response.json()
        user = body.get("user") or {}
        return ProviderSession(
            access_token=body["access_token"],
            expires_in=int(body.get("expires_in", settings.ACCESS_TOKEN_COOKIE_MAX_AGE)),
            user_id=UUID(user["id"]),
            email=user.get("email", email),
        )

    async def sign_out(self, access_token: str) -> None:
        """Revoke a session. Failures are logged, never raised."""
        try:
            response = await self._request(
                "POST", "/logout", headers=self._public_headers(access_token)
            )
        except IdentityProviderError:
            return
        if response.is_error and response.status_code != 401:
            logger.warning("Provider sign-out returned %s", response.status_code)

    async def admin_create_user(self, email: str, password: str) -> ProviderUser:
        response = await self._request(
            "POST",
            "/admin/users",
            json={"email": email, "password": password, "email_confirm": True},
            headers=self._admin_headers(),
        )
        if response.status_code >= 500:
            logger.error("Provider failed to create %s: %s", email, _error_message(response))
            raise IdentityProviderError()
        if response.is_error:
            raise ValidationError(_error_message(response), field="email")

        body = response.json()
        return ProviderUser(id=UUID(body["id"]), email=body.get("email", email))

    async def admin_delete_user(self, user_id: UUID) -> None:
        response = await self._request(
            "DELETE", f"/admin/users/{user_id}", headers=self._admin_headers()
        )
        if response.status_code == 404:
            raise NotFoundError("User not found in identity provider", resource="user")
        if response.status_code >= 500:
            logger.error("Provider failed to delete %s: %s", user_id, _error_message(response))
            raise IdentityProviderError()
        if response.is_error:
            raise ValidationError(_error_message(response), field="userId")


def get_identity_provider() -> IdentityProvider:
    return IdentityProvider()
