import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from lemonpay.core.db import EMPLOYEES_COLLECTION
from lemonpay.core.exceptions import Conflict, NotFound
from lemonpay.schemas.employee import Employee, EmployeeCreate

logger = logging.getLogger(__name__)


def exact_ci(value: str) -> Dict[str, str]:
    """대소문자 무시 완전 일치용 $regex 조건. 입력값은 escape 처리."""
    return {"$regex": f"^{re.escape(value)}$", "$options": "i"}


def _serialize(raw: dict) -> Employee:
    data = raw.copy()
    data.pop("_id", None)
    return Employee(**data)


async def find_employee(
    db: AsyncIOMotorDatabase,
    identifier: str,
) -> Optional[Employee]:
    """
    identifier에 '@'가 있으면 이메일, 없으면 사번으로 조회.
    """
    identifier = identifier.strip()
    if not identifier:
        return None

    field = "email" if "@" in identifier else "employeeId"
    raw = await db[EMPLOYEES_COLLECTION].find_one({field: exact_ci(identifier)})
    return _serialize(raw) if raw else None


async def lookup_employee(
    db: AsyncIOMotorDatabase,
    identifier: str,
) -> Employee:
    employee = await find_employee(db, identifier)
    if employee is None:
        raise NotFound("Employee not found with given Employee ID or Email.")
    return employee


async def create_employee(
    db: AsyncIOMotorDatabase,
    payload: EmployeeCreate,
) -> Employee:
    collection = db[EMPLOYEES_COLLECTION]
    employee_id = payload.employeeId.strip()
    email = payload.email.strip().lower()

    # 대소문자만 다른 중복도 막는다 (unique 인덱스는 대소문자 구분)
    existing = await collection.find_one(
        {"$or": [{"employeeId": exact_ci(employee_id)}, {"email": exact_ci(email)}]}
    )
    if existing:
        raise Conflict("Employee with the same Employee ID or Email already exists.")

    now = datetime.now(timezone.utc)
    doc: Dict[str, Any] = {
        "employeeId": employee_id,
        "name": payload.name.strip(),
        "email": email,
        "team": payload.team,
        "department": payload.department,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        await collection.insert_one(doc)
    except DuplicateKeyError:
        raise Conflict("Employee with the same Employee ID or Email already exists.")

    logger.info("Employee created: employeeId=%s", employee_id)
    return _serialize(doc)


async def list_employees(
    db: AsyncIOMotorDatabase,
    team: Optional[str] = None,
) -> List[Employee]:
    query: Dict[str, Any] = {}
    if team:
        query["team"] = team

    cursor = db[EMPLOYEES_COLLECTION].find(query).sort("employeeId", 1)
    docs = await cursor.to_list(length=None)
    return [_serialize(doc) for doc in docs]
