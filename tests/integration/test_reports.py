"""Integration tests: Reports endpoints."""

from decimal import Decimal

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_revenue_report(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict
):
    resp = await async_client.get(
        f"{api_base}/reports/revenue",
        headers=registered_school["headers"],
        params={"time_range": "today"},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert Decimal(data["total"]) == Decimal("2800.00")
    assert data["growth"] == 0.0
    assert len(data["chart"]) == 1


@pytest.mark.asyncio
async def test_student_and_credit_reports(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict
):
    headers = registered_school["headers"]
    resp = await async_client.get(f"{api_base}/reports/students", headers=headers)
    assert resp.status_code == 200
    students = resp.json()["data"]
    assert students["total"] == 1
    assert students["active"] == 1
    assert students["new"] == 1

    resp = await async_client.get(f"{api_base}/reports/credits", headers=headers)
    assert resp.status_code == 200
    credits = resp.json()["data"]
    assert credits["sold"] == 12
    assert credits["remaining"] == 12
    assert credits["expiring_soon"] == 0


@pytest.mark.asyncio
async def test_attendance_report(
    async_client: AsyncClient, api_base: str, registered_school: dict,
    student: dict, course: dict, purchased_credit: dict,
):
    headers = registered_school["headers"]
    resp = await async_client.post(
        f"{api_base}/attendance/check-in",
        headers=headers,
        json={"student_id": student["id"], "course_id": course["id"]},
    )
    assert resp.status_code == 200

    resp = await async_client.get(
        f"{api_base}/reports/attendance", headers=headers, params={"time_range": "week"}
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["rate"] == 100.0
    assert data["total_sessions"] == 1
    assert data["total_checkins"] == 1


@pytest.mark.asyncio
async def test_top_courses(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict, course: dict
):
    resp = await async_client.get(f"{api_base}/reports/top-courses", headers=registered_school["headers"])
    assert resp.status_code == 200
    top = resp.json()["data"]
    assert top[0]["course_id"] == course["id"]
    assert top[0]["students"] == 1


@pytest.mark.asyncio
async def test_export_json_and_csv(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict
):
    headers = registered_school["headers"]
    resp = await async_client.get(f"{api_base}/reports/export", headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["time_range"] == "month"
    assert set(data) >= {"revenue", "students", "attendance", "credits", "top_courses"}

    resp = await async_client.get(
        f"{api_base}/reports/export", headers=headers, params={"format": "csv", "time_range": "year"}
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in resp.headers["content-disposition"]
    assert resp.text.splitlines()[0] == "section,metric,value"


@pytest.mark.asyncio
async def test_invalid_time_range(async_client: AsyncClient, api_base: str, registered_school: dict):
    resp = await async_client.get(
        f"{api_base}/reports/revenue",
        headers=registered_school["headers"],
        params={"time_range": "decade"},
    )
    assert resp.status_code == 422
