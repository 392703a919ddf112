from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from lemonpay.core.db import get_database
from lemonpay.core.exceptions import NotFound
from lemonpay.schemas.leave import (
    LeaveBalance,
    LeaveDocument,
    LeaveStatusUpdate,
    LeaveSubmit,
    LeaveSubmitResult,
)
from lemonpay.services import leave_store
from lemonpay.services.directory import find_employee
from lemonpay.services.leave_policy import LeavePolicy, get_leave_policy

router = APIRouter(
    prefix="/leaves",
    tags=["leaves"],
)


@router.post(
    "",
    response_model=LeaveSubmitResult,
    status_code=status.HTTP_201_CREATED,
)
async def submit_leave(
    payload: LeaveSubmit,
    policy: LeavePolicy = Depends(get_leave_policy),
):
    """
    휴가 신청
    - sick/casual 1일: auto-approved (잔여일 즉시 차감되어 응답)
    - sick/casual 2일 이상, planned/unplanned: pending
    """
    return await policy.submit(
        identifier=payload.identifier,
        leave_type=payload.leaveType,
        start_date=payload.startDate,
        end_date=payload.endDate,
        days=payload.days,
        description=payload.description,
    )


@router.get(
    "/balance",
    response_model=LeaveBalance,
)
async def get_balance(
    identifier: str = Query(..., min_length=1),
    policy: LeavePolicy = Depends(get_leave_policy),
):
    """
    예:
    GET /leaves/balance?identifier=E001
    GET /leaves/balance?identifier=someone@lemonpay.com
    """
    return await policy.balance(identifier)


@router.get(
    "",
    response_model=List[LeaveDocument],
)
async def list_leaves(
    identifier: Optional[str] = None,
    leave_status: Optional[str] = Query(None, alias="status"),
    leave_type: Optional[str] = Query(None, alias="leaveType"),
    employee_id: Optional[str] = Query(None, alias="employeeId"),
    employee_name: Optional[str] = Query(None, alias="employeeName"),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    """
    휴가 신청 목록 (최신순).

    identifier가 있으면 해당 직원의 전체 신청 내역 (직원이 없으면 빈 목록).
    없으면 status / leaveType / employeeId / employeeName 필터 조합.
    """
    if identifier:
        employee = await find_employee(db, identifier)
        if employee is None:
            return []
        return await leave_store.list_leaves(
            db,
            employee_id=employee.employeeId,
            exact_employee_id=True,
        )

    return await leave_store.list_leaves(
        db,
        employee_id=employee_id,
        status=leave_status,
        leave_type=leave_type,
        employee_name=employee_name,
    )


@router.get(
    "/{leave_id}",
    response_model=LeaveDocument,
)
async def get_leave(
    leave_id: int,
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    raw = await leave_store.get_leave(db, leave_id)
    if raw is None:
        raise NotFound("Leave request not found.")
    return leave_store.serialize_leave(raw)


@router.put(
    "/{leave_id}/status",
    response_model=LeaveDocument,
)
async def update_leave_status(
    leave_id: int,
    payload: LeaveStatusUpdate,
    policy: LeavePolicy = Depends(get_leave_policy),
):
    """
    결재자 처리 (pending -> approved / rejected)
    """
    return await policy.set_status(leave_id, payload.status)
