from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, StrictFloat

LeaveType = Literal["sick", "casual", "planned", "unplanned"]
LeaveStatus = Literal["pending", "approved", "rejected", "auto-approved"]


class LeaveSubmit(BaseModel):
    """
    POST /leaves 요청 바디

    identifier는 사번 또는 이메일. days는 호출자가 넘긴 값을 그대로 사용한다
    (startDate~endDate 기간과 대조하지 않음). 0.5 같은 반일도 허용, bool은 거부 (strict).
    """
    identifier: str
    leaveType: LeaveType
    startDate: date
    endDate: date
    days: StrictFloat
    description: Optional[str] = None


class LeaveDocument(BaseModel):
    """
    MongoDB에 저장된 휴가 신청 Document 응답용
    """
    leaveId: int
    employeeId: str
    employeeName: str
    leaveType: LeaveType
    startDate: date
    endDate: date
    days: float
    description: Optional[str] = None
    status: LeaveStatus
    createdAt: datetime
    updatedAt: datetime


class LeaveSubmitResult(BaseModel):
    leave: LeaveDocument
    remainingSick: float
    remainingCasual: float


class LeaveBalance(BaseModel):
    sick: float
    casual: float
    plannedRequests: float
    unplannedRequests: float


class LeaveStatusUpdate(BaseModel):
    # 허용 값(approved/rejected) 검증은 정책 쪽에서 InvalidTransition으로 처리
    status: str
