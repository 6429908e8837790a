from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from hr_portal.models.workflow import RequestStatus


class ExpenseCategory(str, Enum):
    TRAVEL = "travel"
    MEALS = "meals"
    OFFICE_SUPPLIES = "office_supplies"
    TRAINING = "training"
    OTHER = "other"


class ApprovalStage(str, Enum):
    MANAGER = "manager"
    HR = "hr"


class ExpenseRequestCreate(BaseModel):
    amount: float = Field(gt=0, le=1_000_000)
    category: ExpenseCategory
    description: str = Field(min_length=1, max_length=500)
    receipt_url: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def validate_description(self) -> "ExpenseRequestCreate":
        if not self.description.strip():
            raise ValueError("description must not be blank")
        return self


class StageApproval(BaseModel):
    status: RequestStatus = RequestStatus.PENDING
    approver_id: Optional[str] = None
    decided_at: Optional[datetime] = None
    comment: Optional[str] = None


class ExpenseRequestRecord(BaseModel):
    request_id: str
    employee_id: str
    department_id: Optional[str] = None
    amount: float
    category: ExpenseCategory
    description: str
    receipt_url: Optional[str] = None
    status: RequestStatus
    current_stage: Optional[ApprovalStage] = None
    manager_approval: StageApproval
    hr_approval: StageApproval
    created_at: datetime
    updated_at: datetime


class ExpenseDecisionRequest(BaseModel):
    stage: ApprovalStage
    approve: bool
    note: Optional[str] = Field(default=None, max_length=300)
