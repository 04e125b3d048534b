"""
E2E tests for the privileged user management endpoints.
"""

import uuid
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from app.auth.models.user_profile import UserProfile
from app.auth.repository import ProfileRepository
from app.auth.services.identity_provider import ProviderUser
from app.core.exceptions import ValidationError
from tests.utils.factories import create_profile_factory
from tests.utils.helpers import assert_error_code, create_auth_headers


def _create_payload(email: str = "new.student@example.com") -> dict:
    return {
        "email": email,
        "password": "secret123",
        "fullName": "New Student",
        "role": "student",
    }


@pytest.mark.asyncio
async def test_create_user(test_client: AsyncClient, identity_provider, db_session, test_admin_token):
    account_id = uuid.uuid4()
    identity_provider.admin_create_user.return_value = ProviderUser(
        id=account_id, email="new.student@example.com"
    )

    response = await test_client.post(
        "/api/users/create",
        json=_create_payload(),
        headers=create_auth_headers(test_admin_token),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["user"]["id"] == str(account_id)
    assert data["user"]["full_name"] == "New Student"

    profile = db_session.get(UserProfile, account_id)
    assert profile is not None
    assert profile.role.value == "student"
    identity_provider.admin_create_user.assert_awaited_once_with(
        "new.student@example.com", "secret123"
    )


@pytest.mark.asyncio
async def test_create_user_rolls_back_provider_account_when_profile_insert_fails(
    test_client: AsyncClient, identity_provider, db_session, test_admin_token
):
    account_id = uuid.uuid4()
    identity_provider.admin_create_user.return_value = ProviderUser(
        id=account_id, email="new.student@example.com"
    )

    with patch.object(
        ProfileRepository,
        "create",
        side_effect=OperationalError("INSERT", {}, Exception("database is down")),
    ):
        response = await test_client.post(
            "/api/users/create",
            json=_create_payload(),
            headers=create_auth_headers(test_admin_token),
        )

    assert_error_code(response, 500, "STORE_ERROR")
    identity_provider.admin_delete_user.assert_awaited_once_with(account_id)
    assert db_session.get(UserProfile, account_id) is None


@pytest.mark.asyncio
async def test_create_user_rejects_short_password(
    test_client: AsyncClient, identity_provider, test_admin_token
):
    payload = _create_payload()
    payload["password"] = "123"

    response = await test_client.post(
        "/api/users/create", json=payload, headers=create_auth_headers(test_admin_token)
    )

    assert_error_code(response, 400, "VALIDATION_ERROR")
    identity_provider.admin_create_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_user_duplicate_email(
    test_client: AsyncClient, identity_provider, test_student, test_admin_token
):
    response = await test_client.post(
        "/api/users/create",
        json=_create_payload(email=test_student.email),
        headers=create_auth_headers(test_admin_token),
    )

    assert_error_code(response, 409, "CONFLICT")
    identity_provider.admin_create_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_user_provider_rejection(
    test_client: AsyncClient, identity_provider, test_admin_token
):
    identity_provider.admin_create_user.side_effect = ValidationError(
        "A user with this email address has already been registered", field="email"
    )

    response = await test_client.post(
        "/api/users/create", json=_create_payload(), headers=create_auth_headers(test_admin_token)
    )

    assert_error_code(response, 400, "VALIDATION_ERROR")


@pytest.mark.asyncio
async def test_create_user_requires_admin(
    test_client: AsyncClient, identity_provider, test_instructor_token
):
    response = await test_client.post(
        "/api/users/create",
        json=_create_payload(),
        headers=create_auth_headers(test_instructor_token),
    )

    assert_error_code(response, 403, "FORBIDDEN")
    identity_provider.admin_create_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_user_requires_authentication(test_client: AsyncClient):
    response = await test_client.post("/api/users/create", json=_create_payload())
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_delete_user_keeps_profile_by_default(
    test_client: AsyncClient, identity_provider, db_session, test_student, test_admin_token
):
    response = await test_client.post(
        "/api/users/delete",
        json={"userId": str(test_student.id)},
        headers=create_auth_headers(test_admin_token),
    )

    assert response.status_code == 200
    assert response.json() == {"success": True}
    identity_provider.admin_delete_user.assert_awaited_once_with(test_student.id)
    assert db_session.get(UserProfile, test_student.id) is not None


@pytest.mark.asyncio
async def test_delete_user_with_profile(
    test_client: AsyncClient, identity_provider, db_session, test_admin_token
):
    profile = create_profile_factory(db_session)
    profile_id = profile.id

    response = await test_client.post(
        "/api/users/delete",
        json={"userId": str(profile_id), "deleteProfile": True},
        headers=create_auth_headers(test_admin_token),
    )

    assert response.status_code == 200
    db_session.expire_all()
    assert db_session.get(UserProfile, profile_id) is None


@pytest.mark.asyncio
async def test_admin_cannot_delete_themselves(
    test_client: AsyncClient, identity_provider, test_admin, test_admin_token
):
    response = await test_client.post(
        "/api/users/delete",
        json={"userId": str(test_admin.id)},
        headers=create_auth_headers(test_admin_token),
    )

    assert_error_code(response, 400, "VALIDATION_ERROR")
    identity_provider.admin_delete_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_user_requires_admin(
    test_client: AsyncClient, test_admin, test_student_token
):
    response = await test_client.post(
        "/api/users/delete",
        json={"userId": str(test_admin.id)},
        headers=create_auth_headers(test_student_token),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_users_filters_by_role(
    test_client: AsyncClient, test_admin_token, test_student, test_instructor
):
    response = await test_client.get(
        "/api/users", params={"role": "student"}, headers=create_auth_headers(test_admin_token)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["meta"]["total"] == 1
    assert data["data"][0]["id"] == str(test_student.id)


@pytest.mark.asyncio
async def test_update_user_deactivates(
    test_client: AsyncClient, db_session, test_student, test_admin_token
):
    response = await test_client.patch(
        f"/api/users/{test_student.id}",
        json={"active": False, "fullName": "Renamed Student"},
        headers=create_auth_headers(test_admin_token),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["active"] is False
    assert data["full_name"] == "Renamed Student"
    assert data["role"] == "student"
