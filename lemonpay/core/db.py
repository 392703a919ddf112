import logging
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from lemonpay.core.config import settings

logger = logging.getLogger(__name__)

LEAVES_COLLECTION = "leaves"
EMPLOYEES_COLLECTION = "employees"
COUNTERS_COLLECTION = "counters"
LEAVE_USAGE_COLLECTION = "leave_usage"


async def init_mongo(app: FastAPI) -> None:
    """
    애플리케이션 시작 시 한 번만 MongoDB 클라이언트를 만들어 app.state에 보관.
    핸들러는 get_database 의존성으로만 접근한다 (전역 싱글톤 X).
    """
    client = AsyncIOMotorClient(settings.MONGODB_URI)
    db = client[settings.MONGODB_DB_NAME]

    app.state.mongo_client = client
    app.state.mongo_db = db

    await ensure_indexes(db)
    logger.info("MongoDB connected: db=%s", settings.MONGODB_DB_NAME)


async def close_mongo(app: FastAPI) -> None:
    client = getattr(app.state, "mongo_client", None)
    if client:
        client.close()
        logger.info("MongoDB connection closed")


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """
    조회/유일성에 필요한 인덱스 생성. 이미 있으면 아무 일도 안 함.
    """
    leaves = db[LEAVES_COLLECTION]
    await leaves.create_index("leaveId", unique=True)
    await leaves.create_index(
        [
            ("employeeId", ASCENDING),
            ("leaveType", ASCENDING),
            ("status", ASCENDING),
            ("startDate", ASCENDING),
        ]
    )

    employees = db[EMPLOYEES_COLLECTION]
    await employees.create_index("employeeId", unique=True)
    await employees.create_index("email", unique=True)


async def get_database(request: Request) -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """
    FastAPI 의존성 주입용.
    """
    yield request.app.state.mongo_db
