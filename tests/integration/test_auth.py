"""Integration tests: Authentication endpoints."""

import pytest
from tests.conftest import requires_db, login

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_school_and_login(
    async_client: AsyncClient, api_base: str, registered_school: dict
):
    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": registered_school["owner_email"], "password": registered_school["password"]},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["access_token"]
    assert data["refresh_token"]
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_register_duplicate_email(
    async_client: AsyncClient, api_base: str, registered_school: dict
):
    resp = await async_client.post(
        f"{api_base}/auth/register/school",
        json={
            "email": registered_school["owner_email"],
            "password": "AnotherPass123!",
            "first_name": "Dup",
            "last_name": "Owner",
            "school_name": "Duplicate School",
        },
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "EMAIL_ALREADY_IN_USE"


@pytest.mark.asyncio
async def test_register_weak_password(async_client: AsyncClient, api_base: str, unique_suffix: str):
    resp = await async_client.post(
        f"{api_base}/auth/register/school",
        json={
            "email": f"weak_{unique_suffix}@test.example.com",
            "password": "123",
            "first_name": "Weak",
            "last_name": "Owner",
            "school_name": f"Weak School {unique_suffix}",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "WEAK_PASSWORD"


@pytest.mark.asyncio
async def test_login_error_codes(
    async_client: AsyncClient, api_base: str, registered_school: dict, unique_suffix: str
):
    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": registered_school["owner_email"], "password": "wrong-password"},
    )
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "WRONG_PASSWORD"

    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": f"nobody_{unique_suffix}@test.example.com", "password": "whatever"},
    )
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_validation_error_envelope(async_client: AsyncClient, api_base: str):
    resp = await async_client.post(f"{api_base}/auth/login", json={"email": "not-an-email"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["detail"]


@pytest.mark.asyncio
async def test_me_and_refresh(
    async_client: AsyncClient, api_base: str, registered_school: dict
):
    resp = await async_client.get(f"{api_base}/auth/me", headers=registered_school["headers"])
    assert resp.status_code == 200
    me = resp.json()["data"]
    assert me["email"] == registered_school["owner_email"]
    assert me["role"] == "owner"
    assert me["school_id"] == registered_school["school_id"]
    assert me["display_name"] == "Olivia Owner"

    resp = await async_client.post(
        f"{api_base}/auth/login",
        json={"email": registered_school["owner_email"], "password": registered_school["password"]},
    )
    refresh_token = resp.json()["data"]["refresh_token"]
    resp = await async_client.post(f"{api_base}/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 200
    assert resp.json()["data"]["access_token"]


@pytest.mark.asyncio
async def test_access_token_is_not_a_refresh_token(
    async_client: AsyncClient, api_base: str, registered_school: dict
):
    access = registered_school["headers"]["Authorization"].split(" ", 1)[1]
    resp = await async_client.post(f"{api_base}/auth/refresh", json={"refresh_token": access})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_update_profile(async_client: AsyncClient, api_base: str, registered_school: dict):
    resp = await async_client.put(
        f"{api_base}/auth/me",
        headers=registered_school["headers"],
        json={"first_name": "Olive", "phone": "0899999999"},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["first_name"] == "Olive"
    assert data["display_name"] == "Olive Owner"


@pytest.mark.asyncio
async def test_change_password(async_client: AsyncClient, api_base: str, registered_school: dict):
    resp = await async_client.post(
        f"{api_base}/auth/password/change",
        headers=registered_school["headers"],
        json={"current_password": "wrong-password", "new_password": "NewPassword123!"},
    )
    assert resp.status_code in (400, 401)

    resp = await async_client.post(
        f"{api_base}/auth/password/change",
        headers=registered_school["headers"],
        json={"current_password": registered_school["password"], "new_password": "NewPassword123!"},
    )
    assert resp.status_code == 200
    await login(async_client, api_base, registered_school["owner_email"], "NewPassword123!")


@pytest.mark.asyncio
async def test_reset_password_with_token(
    async_client: AsyncClient, api_base: str, registered_school: dict
):
    from classpass.core.security import generate_password_reset_token

    token = generate_password_reset_token(registered_school["user_id"])
    resp = await async_client.post(
        f"{api_base}/auth/password/reset",
        json={"token": token, "new_password": "ResetPassword123!"},
    )
    assert resp.status_code == 200
    await login(async_client, api_base, registered_school["owner_email"], "ResetPassword123!")

    resp = await async_client.post(
        f"{api_base}/auth/password/reset",
        json={"token": "garbage", "new_password": "ResetPassword123!"},
    )
    assert resp.status_code == 400
