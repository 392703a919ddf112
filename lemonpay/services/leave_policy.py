import asyncio
import logging
from datetime import date
from typing import Dict, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lemonpay.core.config import settings
from lemonpay.core.db import get_database
from lemonpay.core.exceptions import (
    InsufficientBalance,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from lemonpay.schemas.leave import LeaveBalance, LeaveDocument, LeaveSubmitResult
from lemonpay.services import leave_store
from lemonpay.services.directory import lookup_employee
from lemonpay.services.leave_guard import release_days, reserve_days

logger = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
AUTO_APPROVED = "auto-approved"

LEAVE_TYPES = ("sick", "casual", "planned", "unplanned")
# 연간 한도가 적용되는 유형
CAPPED_TYPES = ("sick", "casual")
# 한도 계산에 포함되는 상태
CONSUMED_STATUSES = (APPROVED, AUTO_APPROVED)
REVIEW_STATUSES = (APPROVED, REJECTED)


class LeavePolicy:
    """
    휴가 잔여일 계산 + 승인 정책.

    잔여일은 저장하지 않고 매번 이력(approved/auto-approved)을 다시 합산한다.
    cap_guard가 켜져 있으면 leave_usage 카운터로 한도를 원자적으로 한 번 더 확인.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        limit: int = settings.ANNUAL_SICK_CASUAL_LIMIT,
        cap_guard: bool = settings.LEAVE_CAP_GUARD,
    ) -> None:
        self.db = db
        self.limit = limit
        self.cap_guard = cap_guard

    async def remaining_balances(self, employee_id: str, year: int) -> Dict[str, float]:
        used = await asyncio.gather(
            *(
                leave_store.sum_days(self.db, employee_id, leave_type, CONSUMED_STATUSES, year)
                for leave_type in CAPPED_TYPES
            )
        )
        return {
            leave_type: self.limit - used_days
            for leave_type, used_days in zip(CAPPED_TYPES, used)
        }

    async def submit(
        self,
        identifier: str,
        leave_type: str,
        start_date: Optional[date],
        end_date: Optional[date],
        days: float,
        description: Optional[str] = None,
    ) -> LeaveSubmitResult:
        """
        휴가 신청 흐름:
        1) 입력 검증 (잔여일 계산 전에 실패)
        2) 사번/이메일로 직원 조회
        3) start_date 연도 기준 sick/casual 잔여일 재계산
        4) sick/casual은 한도 초과 시 InsufficientBalance, 1일이면 auto-approved
        5) Document 1건 저장
        """
        identifier = (identifier or "").strip()
        _validate_submission(identifier, leave_type, start_date, end_date, days)

        employee = await lookup_employee(self.db, identifier)
        year = start_date.year
        remaining = await self.remaining_balances(employee.employeeId, year)

        status = PENDING
        if leave_type in CAPPED_TYPES:
            before = remaining[leave_type]
            if days > before:
                logger.info(
                    "Leave rejected (insufficient balance): employeeId=%s type=%s days=%s remaining=%s",
                    employee.employeeId,
                    leave_type,
                    days,
                    before,
                )
                raise InsufficientBalance(leave_type, before, self.limit)
            if days == 1:
                status = AUTO_APPROVED

        reserved = False
        if status == AUTO_APPROVED and self.cap_guard:
            await reserve_days(
                self.db,
                employee_id=employee.employeeId,
                leave_type=leave_type,
                year=year,
                days=days,
                limit=self.limit,
                used_from_history=self.limit - remaining[leave_type],
            )
            reserved = True

        try:
            leave = await leave_store.insert_leave(
                self.db,
                employee_id=employee.employeeId,
                employee_name=employee.name or "Unknown",
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                days=days,
                description=description,
                status=status,
            )
        except Exception:
            if reserved:
                await release_days(
                    self.db,
                    employee_id=employee.employeeId,
                    leave_type=leave_type,
                    year=year,
                    days=days,
                )
            raise

        if status == AUTO_APPROVED:
            remaining[leave_type] -= days
            logger.info(
                "Leave auto-approved: leaveId=%s employeeId=%s type=%s",
                leave.leaveId,
                leave.employeeId,
                leave_type,
            )
        else:
            logger.info(
                "Leave submitted (pending): leaveId=%s employeeId=%s type=%s days=%s",
                leave.leaveId,
                leave.employeeId,
                leave_type,
                days,
            )

        return LeaveSubmitResult(
            leave=leave,
            remainingSick=remaining["sick"],
            remainingCasual=remaining["casual"],
        )

    async def balance(self, identifier: str, today: Optional[date] = None) -> LeaveBalance:
        """
        올해 기준 잔여 sick/casual + planned/unplanned 대기(pending) 일수 합계.
        """
        employee = await lookup_employee(self.db, identifier or "")
        year = (today or date.today()).year

        remaining, planned, unplanned = await asyncio.gather(
            self.remaining_balances(employee.employeeId, year),
            leave_store.sum_days(self.db, employee.employeeId, "planned", (PENDING,), year),
            leave_store.sum_days(self.db, employee.employeeId, "unplanned", (PENDING,), year),
        )

        return LeaveBalance(
            sick=remaining["sick"],
            casual=remaining["casual"],
            plannedRequests=planned,
            unplannedRequests=unplanned,
        )

    async def set_status(self, leave_id: int, new_status: str) -> LeaveDocument:
        """
        결재자 처리: pending -> approved | rejected 만 허용.
        sick/casual 승인 시에는 그 사이 다른 휴가가 승인됐을 수 있으니 한도를 다시 확인.
        """
        if new_status not in REVIEW_STATUSES:
            raise InvalidTransition(
                f"Invalid status '{new_status}'. Only 'approved' or 'rejected' are allowed."
            )

        raw = await leave_store.get_leave(self.db, leave_id)
        if raw is None:
            raise NotFound("Leave request not found.")

        current = raw.get("status")
        if current != PENDING:
            raise InvalidTransition(
                f"Only pending requests can be updated (current status: {current})."
            )

        leave_type = raw["leaveType"]
        days = raw["days"]
        year = date.fromisoformat(raw["startDate"]).year
        reserved = False

        if new_status == APPROVED and leave_type in CAPPED_TYPES:
            used = await leave_store.sum_days(
                self.db, raw["employeeId"], leave_type, CONSUMED_STATUSES, year
            )
            remaining = self.limit - used
            if days > remaining:
                raise InsufficientBalance(leave_type, remaining, self.limit)
            if self.cap_guard:
                await reserve_days(
                    self.db,
                    employee_id=raw["employeeId"],
                    leave_type=leave_type,
                    year=year,
                    days=days,
                    limit=self.limit,
                    used_from_history=used,
                )
                reserved = True

        try:
            updated = await leave_store.update_status(self.db, leave_id, PENDING, new_status)
            if updated is None:
                # 조회 이후 다른 결재자가 먼저 처리한 경우
                raise InvalidTransition("Only pending requests can be updated.")
        except Exception:
            if reserved:
                await release_days(
                    self.db,
                    employee_id=raw["employeeId"],
                    leave_type=leave_type,
                    year=year,
                    days=days,
                )
            raise

        logger.info(
            "Leave status changed: leaveId=%s %s -> %s",
            leave_id,
            PENDING,
            new_status,
        )
        return leave_store.serialize_leave(updated)


def _validate_submission(
    identifier: str,
    leave_type: str,
    start_date: Optional[date],
    end_date: Optional[date],
    days: float,
) -> None:
    if not identifier or not leave_type or start_date is None or end_date is None or days is None:
        raise ValidationError(
            "identifier, leaveType, startDate, endDate, days are required"
        )
    if leave_type not in LEAVE_TYPES:
        raise ValidationError(
            f"Invalid leaveType '{leave_type}'. Allowed: {', '.join(LEAVE_TYPES)}"
        )
    if start_date > end_date:
        raise ValidationError("Invalid date range")
    if days <= 0:
        raise ValidationError("Days must be greater than 0")


async def get_leave_policy(
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> LeavePolicy:
    """
    FastAPI 의존성 주입용.
    """
    return LeavePolicy(db)
