from typing import List, Optional

from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from lemonpay.core.db import get_database
from lemonpay.schemas.employee import Employee, EmployeeCreate
from lemonpay.services import directory

router = APIRouter(
    prefix="/employees",
    tags=["employees"],
)


@router.post(
    "",
    response_model=Employee,
    status_code=status.HTTP_201_CREATED,
)
async def create_employee(
    payload: EmployeeCreate,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await directory.create_employee(db, payload)


@router.get(
    "",
    response_model=List[Employee],
)
async def list_employees(
    team: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    return await directory.list_employees(db, team=team)


@router.get(
    "/{identifier}",
    response_model=Employee,
)
async def get_employee(
    identifier: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    사번 또는 이메일로 조회 (대소문자 무시).
    """
    return await directory.lookup_employee(db, identifier)
