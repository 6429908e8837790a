from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from hr_portal.models.workflow import RequestStatus


class LeaveType(str, Enum):
    ANNUAL = "annual"
    SICK = "sick"
    CASUAL = "casual"


class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(min_length=1, max_length=500)
    medical_certificate_url: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def validate_request(self) -> "LeaveRequestCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        if not self.reason.strip():
            raise ValueError("reason must not be blank")
        return self


class LeaveRequestRecord(BaseModel):
    request_id: str
    employee_id: str
    department_id: Optional[str] = None
    leave_type: LeaveType
    start_date: date
    end_date: date
    days: int
    reason: str
    medical_certificate_url: Optional[str] = None
    status: RequestStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approver_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LeaveUsage(BaseModel):
    casual: int = 0
    sick: int = 0
    annual: int = 0


class LeaveBalanceRecord(BaseModel):
    employee_id: str
    year: int
    casual: int
    sick: int
    annual: int
    used: LeaveUsage
    remaining: LeaveUsage
    updated_at: datetime


class LeaveAllotmentUpdate(BaseModel):
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    casual: Optional[int] = Field(default=None, ge=0)
    sick: Optional[int] = Field(default=None, ge=0)
    annual: Optional[int] = Field(default=None, ge=0)


class MedicalCertificateCheck(BaseModel):
    leave_type: LeaveType
    days: int
    requires_medical_certificate: bool
