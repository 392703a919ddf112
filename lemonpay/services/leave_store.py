from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from lemonpay.core.db import COUNTERS_COLLECTION, LEAVES_COLLECTION
from lemonpay.schemas.leave import LeaveDocument
from lemonpay.services.directory import exact_ci

LEAVE_ID_COUNTER = "leave_request_id"


def year_range(year: int) -> Tuple[str, str]:
    """
    해당 연도의 [1/1, 12/31] 구간. 날짜는 ISO 문자열로 저장하므로
    문자열 비교로 범위 조회가 된다.
    """
    return date(year, 1, 1).isoformat(), date(year, 12, 31).isoformat()


def serialize_leave(raw: dict) -> LeaveDocument:
    """
    MongoDB Document(dict) -> Pydantic 모델로 변환.
    _id 필드는 응답에서 제외.
    """
    data = raw.copy()
    data.pop("_id", None)
    return LeaveDocument(**data)


async def _get_next_leave_id(db: AsyncIOMotorDatabase) -> int:
    """Atomic하게 leaveId 증가.
    counters 컬렉션에 {_id: 'leave_request_id', seq: N} 형태로 저장 후 $inc.
    """
    counter = await db[COUNTERS_COLLECTION].find_one_and_update(
        {"_id": LEAVE_ID_COUNTER},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(counter["seq"])


async def insert_leave(
    db: AsyncIOMotorDatabase,
    *,
    employee_id: str,
    employee_name: str,
    leave_type: str,
    start_date: date,
    end_date: date,
    days: float,
    description: Optional[str],
    status: str,
) -> LeaveDocument:
    leave_id = await _get_next_leave_id(db)
    now = datetime.now(timezone.utc)

    doc = {
        "leaveId": leave_id,
        "employeeId": employee_id,
        "employeeName": employee_name,
        "leaveType": leave_type,
        "startDate": start_date.isoformat(),
        "endDate": end_date.isoformat(),
        "days": days,
        "description": description,
        "status": status,
        "createdAt": now,
        "updatedAt": now,
    }
    await db[LEAVES_COLLECTION].insert_one(doc)
    return serialize_leave(doc)


async def query_leaves(
    db: AsyncIOMotorDatabase,
    employee_id: str,
    leave_type: str,
    statuses: Iterable[str],
    year: Optional[int] = None,
) -> List[dict]:
    query: Dict[str, Any] = {
        "employeeId": employee_id,
        "leaveType": leave_type,
        "status": {"$in": list(statuses)},
    }
    if year is not None:
        start, end = year_range(year)
        query["startDate"] = {"$gte": start, "$lte": end}

    cursor = db[LEAVES_COLLECTION].find(query)
    return await cursor.to_list(length=None)


async def sum_days(
    db: AsyncIOMotorDatabase,
    employee_id: str,
    leave_type: str,
    statuses: Iterable[str],
    year: Optional[int] = None,
) -> float:
    docs = await query_leaves(db, employee_id, leave_type, statuses, year)
    return sum(doc.get("days", 0) for doc in docs)


async def get_leave(db: AsyncIOMotorDatabase, leave_id: int) -> Optional[dict]:
    return await db[LEAVES_COLLECTION].find_one({"leaveId": leave_id})


async def update_status(
    db: AsyncIOMotorDatabase,
    leave_id: int,
    from_status: str,
    new_status: str,
) -> Optional[dict]:
    """
    현재 상태가 from_status일 때만 변경 (조건부 업데이트).
    조건이 안 맞으면 None.
    """
    return await db[LEAVES_COLLECTION].find_one_and_update(
        {"leaveId": leave_id, "status": from_status},
        {"$set": {"status": new_status, "updatedAt": datetime.now(timezone.utc)}},
        return_document=ReturnDocument.AFTER,
    )


async def list_leaves(
    db: AsyncIOMotorDatabase,
    *,
    employee_id: Optional[str] = None,
    status: Optional[str] = None,
    leave_type: Optional[str] = None,
    employee_name: Optional[str] = None,
    exact_employee_id: bool = False,
) -> List[LeaveDocument]:
    """
    최신 신청 순으로 목록 조회. employeeId/employeeName 필터는 대소문자 무시 완전 일치.
    exact_employee_id=True면 이미 확인된 사번으로 그대로 조회.
    """
    query: Dict[str, Any] = {}
    if status:
        query["status"] = status
    if leave_type:
        query["leaveType"] = leave_type
    if employee_id:
        query["employeeId"] = employee_id if exact_employee_id else exact_ci(employee_id)
    if employee_name:
        query["employeeName"] = exact_ci(employee_name)

    cursor = db[LEAVES_COLLECTION].find(query).sort(
        [("createdAt", DESCENDING), ("leaveId", DESCENDING)]
    )
    docs = await cursor.to_list(length=None)
    return [serialize_leave(doc) for doc in docs]
