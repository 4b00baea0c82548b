"""Integration tests: Credit purchase, usage and adjustment endpoints."""

from datetime import date
from decimal import Decimal

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_purchase_snapshots_package(purchased_credit: dict, package: dict, student: dict, course: dict):
    assert purchased_credit["student_id"] == student["id"]
    assert purchased_credit["student_code"] == student["student_code"]
    assert purchased_credit["package_code"] == package["code"]
    assert purchased_credit["course_name"] == course["name"]
    assert purchased_credit["total_credits"] == 12
    assert purchased_credit["remaining_credits"] == 12
    assert purchased_credit["used_credits"] == 0
    assert Decimal(purchased_credit["final_price"]) == Decimal("2800.00")
    assert Decimal(purchased_credit["price_per_credit"]) == Decimal("233.33")
    assert purchased_credit["payment_status"] == "paid"
    assert purchased_credit["status"] == "active"
    assert purchased_credit["has_expiry"] is True
    assert date.fromisoformat(purchased_credit["expiry_date"]) > date.today()
    assert purchased_credit["receipt_number"].startswith("RCP")
    assert purchased_credit["days_until_expiry"] > 80


@pytest.mark.asyncio
async def test_purchase_for_unrelated_course(
    async_client: AsyncClient, api_base: str, registered_school: dict, student: dict, package: dict
):
    resp = await async_client.post(
        f"{api_base}/courses",
        headers=registered_school["headers"],
        json={"name": "Piano", "category": "art"},
    )
    other_course = resp.json()["data"]

    resp = await async_client.post(
        f"{api_base}/credits/purchase",
        headers=registered_school["headers"],
        json={
            "student_id": student["id"],
            "package_id": package["id"],
            "course_id": other_course["id"],
            "payment_method": "transfer",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "PACKAGE_NOT_APPLICABLE"


@pytest.mark.asyncio
async def test_student_credits_by_course(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict, course: dict
):
    resp = await async_client.get(
        f"{api_base}/credits/students/{purchased_credit['student_id']}",
        headers=registered_school["headers"],
        params={"course_id": course["id"]},
    )
    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()["data"]] == [purchased_credit["id"]]


@pytest.mark.asyncio
async def test_use_credits_until_depleted(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict
):
    url = f"{api_base}/credits/{purchased_credit['id']}/use"
    resp = await async_client.post(url, headers=registered_school["headers"], params={"amount": 12})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["remaining_credits"] == 0
    assert data["used_credits"] == 12
    assert data["status"] == "depleted"

    resp = await async_client.post(url, headers=registered_school["headers"], params={"amount": 1})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INSUFFICIENT_CREDITS"


@pytest.mark.asyncio
async def test_adjust_credits_with_history(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict
):
    resp = await async_client.post(
        f"{api_base}/credits/{purchased_credit['id']}/adjust",
        headers=registered_school["headers"],
        json={"adjustment_type": "subtract", "amount": 2, "reason": "Missed class without notice"},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["remaining_credits"] == 10
    assert data["used_credits"] == 2

    resp = await async_client.get(
        f"{api_base}/credits/adjustments",
        headers=registered_school["headers"],
        params={"student_id": purchased_credit["student_id"]},
    )
    assert resp.status_code == 200
    history = resp.json()["data"]
    assert len(history) == 1
    assert history[0]["credits_before"] == 12
    assert history[0]["credits_after"] == 10
    assert history[0]["adjusted_by_name"] == "Olivia Owner"
    assert history[0]["adjusted_by_role"] == "owner"


@pytest.mark.asyncio
async def test_adjust_requires_reason(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict
):
    resp = await async_client.post(
        f"{api_base}/credits/{purchased_credit['id']}/adjust",
        headers=registered_school["headers"],
        json={"adjustment_type": "add", "amount": 1, "reason": ""},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_and_expire(
    async_client: AsyncClient, api_base: str, registered_school: dict, purchased_credit: dict
):
    resp = await async_client.get(
        f"{api_base}/credits", headers=registered_school["headers"], params={"status": "active"}
    )
    assert resp.status_code == 200
    assert purchased_credit["id"] in [c["id"] for c in resp.json()["data"]]

    resp = await async_client.post(f"{api_base}/credits/expire", headers=registered_school["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["expired"] == 0


@pytest.mark.asyncio
async def test_unknown_credit(async_client: AsyncClient, api_base: str, registered_school: dict):
    resp = await async_client.get(
        f"{api_base}/credits/00000000-0000-0000-0000-000000000000",
        headers=registered_school["headers"],
    )
    assert resp.status_code == 404
