from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"


class EmployeeCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=80)
    last_name: str = Field(min_length=1, max_length=80)
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    position: str = Field(default="Employee", max_length=120)
    department_id: Optional[str] = None
    role_id: Optional[str] = None
    manager_id: Optional[str] = None
    salary: Optional[float] = Field(default=None, ge=0)


class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    position: Optional[str] = Field(default=None, max_length=120)
    manager_id: Optional[str] = None
    salary: Optional[float] = Field(default=None, ge=0)
    status: Optional[EmployeeStatus] = None


class EmployeeRecord(BaseModel):
    employee_id: str
    first_name: str
    last_name: str
    email: str
    position: str
    department_id: Optional[str] = None
    role_id: Optional[str] = None
    manager_id: Optional[str] = None
    salary: Optional[float] = None
    is_manager: bool = False
    status: EmployeeStatus
    created_at: datetime
    updated_at: datetime


class TransferRequest(BaseModel):
    department_id: str


class DepartmentCreate(BaseModel):
    name: str = Field(min_length=2, max_length=120)
    description: str = Field(default="", max_length=500)
    head_id: Optional[str] = None
    deputy_head_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_leadership(self) -> "DepartmentCreate":
        if self.deputy_head_id and self.deputy_head_id == self.head_id:
            raise ValueError("deputy_head_id must differ from head_id")
        return self


class DeputyUpdateRequest(BaseModel):
    deputy_head_id: Optional[str] = None


class DepartmentRecord(BaseModel):
    department_id: str
    name: str
    description: str
    head_id: Optional[str] = None
    deputy_head_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
