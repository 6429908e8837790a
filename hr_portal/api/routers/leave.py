from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from hr_portal.api.deps import APPROVERS, HR_STAFF, get_current_user, require_roles
from hr_portal.models.leave import (
    LeaveAllotmentUpdate,
    LeaveBalanceRecord,
    LeaveRequestCreate,
    LeaveRequestRecord,
    LeaveType,
    MedicalCertificateCheck,
)
from hr_portal.models.workflow import DecisionRequest, RequestStatus
from hr_portal.services.container import leave_service


router = APIRouter(prefix="/leave", tags=["Leave"])


@router.post("", response_model=LeaveRequestRecord, status_code=201)
def create_leave_request(
    payload: LeaveRequestCreate,
    current_user: dict = Depends(get_current_user),
) -> LeaveRequestRecord:
    return leave_service.create_leave_request(current_user, payload)


@router.get("", response_model=list[LeaveRequestRecord])
def list_leave_requests(
    status: Optional[RequestStatus] = None,
    current_user: dict = Depends(get_current_user),
) -> list[LeaveRequestRecord]:
    return leave_service.list_leave_requests(current_user, status)


@router.get("/medical-certificate-check", response_model=MedicalCertificateCheck)
def medical_certificate_check(
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    current_user: dict = Depends(get_current_user),
) -> MedicalCertificateCheck:
    _ = current_user
    return leave_service.medical_certificate_check(leave_type, start_date, end_date)


@router.post("/{request_id}/decision", response_model=LeaveRequestRecord)
def decide_leave_request(
    request_id: str,
    payload: DecisionRequest,
    current_user: dict = Depends(require_roles(APPROVERS)),
) -> LeaveRequestRecord:
    return leave_service.decide_leave_request(current_user, request_id, payload)


@router.get("/balances/{employee_id}", response_model=LeaveBalanceRecord)
def get_leave_balance(
    employee_id: str,
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    current_user: dict = Depends(get_current_user),
) -> LeaveBalanceRecord:
    return leave_service.get_balance(current_user, employee_id, year)


@router.put("/balances/{employee_id}", response_model=LeaveBalanceRecord)
def set_leave_allotment(
    employee_id: str,
    payload: LeaveAllotmentUpdate,
    current_user: dict = Depends(require_roles(HR_STAFF)),
) -> LeaveBalanceRecord:
    return leave_service.set_allotment(current_user, employee_id, payload)
