"""
Shared test fixtures for the Lemonpay leave service test suite.

MongoDB is replaced by mongomock-motor (in-memory, Motor-compatible API);
the FastAPI database dependency is overridden to point at it.
"""

import uuid
from datetime import date
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from lemonpay.core.db import get_database
from lemonpay.main import app
from lemonpay.schemas.employee import EmployeeCreate
from lemonpay.services import directory, leave_store
from lemonpay.services.leave_policy import LeavePolicy


@pytest.fixture
def db():
    """A fresh in-memory database per test."""
    client = AsyncMongoMockClient()
    return client[f"lemonpay_test_{uuid.uuid4().hex}"]


@pytest.fixture
def policy(db) -> LeavePolicy:
    return LeavePolicy(db, limit=12, cap_guard=False)


@pytest.fixture
async def employee(db):
    """Employee E001 registered in the directory."""
    return await directory.create_employee(
        db,
        EmployeeCreate(
            employeeId="E001",
            name="Asha Rao",
            email="asha.rao@lemonpay.com",
            team="Tech",
            department="Engineering",
        ),
    )


@pytest.fixture
async def async_client(db) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_database():
        yield db

    app.dependency_overrides[get_database] = _override_get_database
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_database, None)


async def seed_leave(
    db,
    *,
    employee_id: str = "E001",
    leave_type: str = "sick",
    start: date = date(2025, 2, 1),
    days: float = 1,
    status: str = "approved",
):
    """Insert a historical leave record directly into the store."""
    return await leave_store.insert_leave(
        db,
        employee_id=employee_id,
        employee_name="Asha Rao",
        leave_type=leave_type,
        start_date=start,
        end_date=start,
        days=days,
        description=None,
        status=status,
    )


@pytest.fixture
def seed(db):
    """Bound version of seed_leave for the current test database."""

    async def _seed(**kwargs):
        return await seed_leave(db, **kwargs)

    return _seed
