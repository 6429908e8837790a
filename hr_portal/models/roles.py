from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from hr_portal.models.workflow import RequestStatus


class JobRoleCreate(BaseModel):
    title: str = Field(min_length=2, max_length=120)
    level: int = Field(default=1, ge=1, le=5)
    base_salary: float = Field(default=0, ge=0)
    department_id: Optional[str] = None


class JobRoleRecord(BaseModel):
    role_id: str
    title: str
    level: int
    base_salary: float
    department_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PromotionCreate(BaseModel):
    employee_id: str
    new_role_id: str
    new_salary: Optional[float] = Field(default=None, ge=0)
    notes: str = Field(default="", max_length=500)


class PromotionRecord(BaseModel):
    promotion_id: str
    employee_id: str
    old_role_id: Optional[str] = None
    new_role_id: str
    new_salary: Optional[float] = None
    notes: str
    requested_by: str
    status: RequestStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    approver_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RoleHistoryRecord(BaseModel):
    history_id: str
    employee_id: str
    role_id: str
    salary: Optional[float] = None
    effective_from: datetime
    effective_to: Optional[datetime] = None
    promotion_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
