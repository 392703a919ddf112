from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EmployeeCreate(BaseModel):
    """POST /employees 요청 바디"""
    employeeId: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+$")
    team: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)

    class Config:
        extra = "forbid"  # 정의되지 않은 필드가 들어오면 에러


class Employee(BaseModel):
    """응답용 스키마"""
    employeeId: str
    name: str
    email: str
    team: Optional[str] = None
    department: Optional[str] = None
    createdAt: datetime
    updatedAt: datetime
