"""Integration tests: Course catalog endpoints."""

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_course(async_client: AsyncClient, api_base: str, course: dict):
    assert course["code"].startswith("SPO")
    assert course["code"].endswith("001")
    assert course["status"] == "active"
    assert course["total_enrolled"] == 0
    assert [s["day"] for s in course["sessions"]] == ["monday", "wednesday"]


@pytest.mark.asyncio
async def test_session_times_validated(
    async_client: AsyncClient, api_base: str, registered_school: dict
):
    resp = await async_client.post(
        f"{api_base}/courses",
        headers=registered_school["headers"],
        json={
            "name": "Backwards",
            "category": "art",
            "sessions": [{"day": "friday", "start_time": "17:00:00", "end_time": "16:00:00"}],
        },
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_search_by_tag(
    async_client: AsyncClient, api_base: str, registered_school: dict, course: dict
):
    resp = await async_client.get(
        f"{api_base}/courses/search",
        headers=registered_school["headers"],
        params={"q": "WATER"},
    )
    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()["data"]] == [course["id"]]


@pytest.mark.asyncio
async def test_update_course_replaces_sessions(
    async_client: AsyncClient, api_base: str, registered_school: dict, course: dict
):
    resp = await async_client.put(
        f"{api_base}/courses/{course['id']}",
        headers=registered_school["headers"],
        json={
            "name": "Swimming Advanced",
            "sessions": [{"day": "saturday", "start_time": "09:00:00", "end_time": "10:30:00"}],
        },
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "Swimming Advanced"
    assert data["code"] == course["code"]
    assert [s["day"] for s in data["sessions"]] == ["saturday"]


@pytest.mark.asyncio
async def test_delete_course_archives(
    async_client: AsyncClient, api_base: str, registered_school: dict, course: dict
):
    resp = await async_client.delete(
        f"{api_base}/courses/{course['id']}", headers=registered_school["headers"]
    )
    assert resp.status_code == 200

    resp = await async_client.get(f"{api_base}/courses", headers=registered_school["headers"])
    assert course["id"] not in [c["id"] for c in resp.json()["data"]]


@pytest.mark.asyncio
async def test_free_plan_course_quota(
    async_client: AsyncClient, api_base: str, registered_school: dict
):
    for i in range(5):
        resp = await async_client.post(
            f"{api_base}/courses",
            headers=registered_school["headers"],
            json={"name": f"Course {i}", "category": "academic"},
        )
        assert resp.status_code == 200, resp.text

    resp = await async_client.post(
        f"{api_base}/courses",
        headers=registered_school["headers"],
        json={"name": "One too many", "category": "academic"},
    )
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "QUOTA_EXCEEDED"
