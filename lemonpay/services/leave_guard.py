import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from lemonpay.core.db import LEAVE_USAGE_COLLECTION
from lemonpay.core.exceptions import InsufficientBalance

logger = logging.getLogger(__name__)


def usage_key(employee_id: str, leave_type: str, year: int) -> str:
    return f"{employee_id}:{leave_type}:{year}"


async def reserve_days(
    db: AsyncIOMotorDatabase,
    *,
    employee_id: str,
    leave_type: str,
    year: int,
    days: float,
    limit: int,
    used_from_history: float,
) -> float:
    """
    leave_usage 카운터에서 days만큼 원자적으로 예약하고 예약 후 사용량을 반환.

    1) 카운터가 없으면 이력 재계산 값(used_from_history)으로 초기화 ($setOnInsert)
    2) used <= limit - days 조건부 $inc (upsert)
       조건이 안 맞으면 upsert가 같은 _id로 insert를 시도하다 DuplicateKeyError
       -> 한도 초과로 처리
    동시 신청이 같은 잔여 일수를 읽고 둘 다 통과하는 레이스를 막는다.
    """
    collection = db[LEAVE_USAGE_COLLECTION]
    key = usage_key(employee_id, leave_type, year)

    await collection.update_one(
        {"_id": key},
        {"$setOnInsert": {"used": used_from_history}},
        upsert=True,
    )

    try:
        counter = await collection.find_one_and_update(
            {"_id": key, "used": {"$lte": limit - days}},
            {"$inc": {"used": days}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        current = await collection.find_one({"_id": key})
        used = current["used"] if current else used_from_history
        logger.info(
            "Leave cap guard rejected reservation: key=%s used=%s days=%s",
            key,
            used,
            days,
        )
        raise InsufficientBalance(leave_type, limit - used, limit)

    return counter["used"]


async def release_days(
    db: AsyncIOMotorDatabase,
    *,
    employee_id: str,
    leave_type: str,
    year: int,
    days: float,
) -> None:
    """예약 후 저장이 실패한 경우 되돌리기."""
    await db[LEAVE_USAGE_COLLECTION].update_one(
        {"_id": usage_key(employee_id, leave_type, year)},
        {"$inc": {"used": -days}},
    )
