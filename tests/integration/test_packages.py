"""Integration tests: Credit package endpoints."""

from decimal import Decimal

import pytest
from tests.conftest import requires_db

pytestmark = requires_db
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_create_package_derives_pricing(package: dict, course: dict):
    assert package["code"].startswith("PKG")
    assert package["total_credits_with_bonus"] == 12
    assert Decimal(package["price_per_credit"]) == Decimal("250.00")
    assert package["validity_description"] == "3 months"
    assert package["applicable_course_ids"] == [course["id"]]
    assert package["status"] == "active"


@pytest.mark.asyncio
async def test_package_requires_target(
    async_client: AsyncClient, api_base: str, registered_school: dict
):
    resp = await async_client.post(
        f"{api_base}/packages",
        headers=registered_school["headers"],
        json={"name": "Nowhere", "credits": 5, "price": "500", "validity_type": "unlimited"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_packages_for_courses(
    async_client: AsyncClient, api_base: str, registered_school: dict, package: dict, course: dict
):
    resp = await async_client.post(
        f"{api_base}/packages",
        headers=registered_school["headers"],
        json={
            "name": "Any class",
            "is_universal": True,
            "credits": 5,
            "price": "2000",
            "validity_type": "unlimited",
        },
    )
    assert resp.status_code == 200
    universal = resp.json()["data"]
    assert universal["validity_value"] is None
    assert universal["validity_description"] == "No expiry"

    resp = await async_client.get(
        f"{api_base}/packages/for-courses",
        headers=registered_school["headers"],
        params={"course_ids": [course["id"]]},
    )
    assert resp.status_code == 200
    ids = {p["id"] for p in resp.json()["data"]}
    assert ids == {package["id"], universal["id"]}


@pytest.mark.asyncio
async def test_update_package_recomputes(
    async_client: AsyncClient, api_base: str, registered_school: dict, package: dict
):
    resp = await async_client.put(
        f"{api_base}/packages/{package['id']}",
        headers=registered_school["headers"],
        json={"bonus_credits": 0, "validity_type": "days", "validity_value": 45},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total_credits_with_bonus"] == 10
    assert Decimal(data["price_per_credit"]) == Decimal("300.00")
    assert data["validity_description"] == "45 days"


@pytest.mark.asyncio
async def test_reorder_and_delete(
    async_client: AsyncClient, api_base: str, registered_school: dict, package: dict
):
    resp = await async_client.put(
        f"{api_base}/packages/order",
        headers=registered_school["headers"],
        json={"items": [{"id": package["id"], "display_order": 7}]},
    )
    assert resp.status_code == 200

    resp = await async_client.get(
        f"{api_base}/packages/{package['id']}", headers=registered_school["headers"]
    )
    assert resp.json()["data"]["display_order"] == 7

    resp = await async_client.delete(
        f"{api_base}/packages/{package['id']}", headers=registered_school["headers"]
    )
    assert resp.status_code == 200
    resp = await async_client.get(f"{api_base}/packages", headers=registered_school["headers"])
    assert package["id"] not in [p["id"] for p in resp.json()["data"]]


@pytest.mark.asyncio
async def test_migrate_is_idempotent(
    async_client: AsyncClient, api_base: str, registered_school: dict, package: dict
):
    resp = await async_client.post(f"{api_base}/packages/migrate", headers=registered_school["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["packages_migrated"] == 0


@pytest.mark.asyncio
async def test_update_keeps_package_rules(
    async_client: AsyncClient, api_base: str, registered_school: dict, package: dict
):
    headers = registered_school["headers"]
    url = f"{api_base}/packages/{package['id']}"

    resp = await async_client.put(url, headers=headers, json={"applicable_course_ids": []})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "PACKAGE_TARGET_REQUIRED"

    resp = await async_client.put(url, headers=headers, json={"validity_type": "days", "validity_value": None})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDITY_VALUE_REQUIRED"

    resp = await async_client.put(url, headers=headers, json={"credits": None, "price": None})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["credits"] == 10
    assert Decimal(data["price"]) == Decimal("3000.00")

    resp = await async_client.get(url, headers=headers)
    assert resp.json()["data"]["validity_description"] == "3 months"
