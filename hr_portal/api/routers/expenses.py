from typing import Optional

from fastapi import APIRouter, Depends

from hr_portal.api.deps import APPROVERS, get_current_user, require_roles
from hr_portal.models.expense import (
    ApprovalStage,
    ExpenseDecisionRequest,
    ExpenseRequestCreate,
    ExpenseRequestRecord,
)
from hr_portal.models.workflow import RequestStatus
from hr_portal.services.container import expense_service


router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post("", response_model=ExpenseRequestRecord, status_code=201)
def create_expense_request(
    payload: ExpenseRequestCreate,
    current_user: dict = Depends(get_current_user),
) -> ExpenseRequestRecord:
    return expense_service.create_expense_request(current_user, payload)


@router.get("", response_model=list[ExpenseRequestRecord])
def list_expense_requests(
    status: Optional[RequestStatus] = None,
    stage: Optional[ApprovalStage] = None,
    current_user: dict = Depends(get_current_user),
) -> list[ExpenseRequestRecord]:
    return expense_service.list_expense_requests(current_user, status, stage)


@router.post("/{request_id}/decision", response_model=ExpenseRequestRecord)
def decide_expense_request(
    request_id: str,
    payload: ExpenseDecisionRequest,
    current_user: dict = Depends(require_roles(APPROVERS)),
) -> ExpenseRequestRecord:
    return expense_service.decide_expense_request(current_user, request_id, payload)
