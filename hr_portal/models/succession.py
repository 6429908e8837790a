from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, model_validator

from hr_portal.models.employee import EmployeeRecord


class SuccessionReason(str, Enum):
    DEACTIVATION = "deactivation"
    TRANSFER = "transfer"
    REASSIGNMENT = "reassignment"


class SuccessionStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class SuccessionChoice(str, Enum):
    DEPUTY = "deputy"
    REPLACEMENT = "replacement"


class SuccessionTicket(BaseModel):
    ticket_id: str
    department_id: str
    department_name: str
    outgoing_head_id: str
    reason: SuccessionReason
    target_department_id: Optional[str] = None
    deputy: Optional[EmployeeRecord] = None
    candidates: list[EmployeeRecord]
    status: SuccessionStatus
    opened_by: str
    new_head_id: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime


class SuccessionDecision(BaseModel):
    decision: SuccessionChoice
    replacement_id: Optional[str] = None
    outgoing_role_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_replacement(self) -> "SuccessionDecision":
        if self.decision == SuccessionChoice.REPLACEMENT and not self.replacement_id:
            raise ValueError("replacement_id is required when decision is 'replacement'")
        return self


class StaffingChangeResult(BaseModel):
    employee: EmployeeRecord
    succession: Optional[SuccessionTicket] = None
