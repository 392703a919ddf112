"""Tests for the employee directory endpoints."""

from datetime import datetime, timezone

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_create_employee(async_client: AsyncClient):
    resp = await async_client.post("/employees", json={
        "employeeId": "E100",
        "name": "Ravi Kumar",
        "email": "Ravi.Kumar@Lemonpay.com",
        "team": "Accounts",
    })
    assert resp.status_code == 201
    data = resp.json()
    assert data["employeeId"] == "E100"
    assert data["email"] == "ravi.kumar@lemonpay.com"
    assert data["team"] == "Accounts"


@pytest.mark.asyncio
async def test_create_duplicate_employee_rejected(async_client: AsyncClient, employee):
    resp = await async_client.post("/employees", json={
        "employeeId": "e001",
        "name": "Someone Else",
        "email": "else@lemonpay.com",
    })
    assert resp.status_code == 409

    resp = await async_client.post("/employees", json={
        "employeeId": "E200",
        "name": "Someone Else",
        "email": "ASHA.RAO@lemonpay.com",
    })
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_create_employee_invalid(async_client: AsyncClient):
    resp = await async_client.post("/employees", json={
        "employeeId": "E300",
        "name": "No Mail",
        "email": "not-an-email",
    })
    assert resp.status_code == 400

    resp = await async_client.post("/employees", json={
        "employeeId": "E301",
        "name": "Extra",
        "email": "extra@lemonpay.com",
        "salary": 100,
    })
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_get_employee_by_id_or_email(async_client: AsyncClient, employee):
    resp = await async_client.get("/employees/e001")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Asha Rao"

    resp = await async_client.get("/employees/Asha.Rao@lemonpay.com")
    assert resp.status_code == 200
    assert resp.json()["employeeId"] == "E001"

    resp = await async_client.get("/employees/E999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_employees(async_client: AsyncClient, employee):
    await async_client.post("/employees", json={
        "employeeId": "E002",
        "name": "Meera Iyer",
        "email": "meera@lemonpay.com",
        "team": "HR",
    })
    resp = await async_client.get("/employees")
    assert [e["employeeId"] for e in resp.json()] == ["E001", "E002"]

    resp = await async_client.get("/employees", params={"team": "HR"})
    assert [e["employeeId"] for e in resp.json()] == ["E002"]


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(async_client: AsyncClient):
    resp = await async_client.get("/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Not Found", "success": False}


@pytest.mark.asyncio
async def test_list_employees_is_not_truncated(async_client: AsyncClient, db):
    now = datetime.now(timezone.utc)
    await db["employees"].insert_many(
        [
            {
                "employeeId": f"E{i:05d}",
                "name": f"Employee {i}",
                "email": f"employee{i}@lemonpay.com",
                "team": "Tech",
                "department": None,
                "createdAt": now,
                "updatedAt": now,
            }
            for i in range(1201)
        ]
    )
    resp = await async_client.get("/employees")
    assert resp.status_code == 200
    assert len(resp.json()) == 1201
