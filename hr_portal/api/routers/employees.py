from typing import Optional

from fastapi import APIRouter, Depends

from hr_portal.api.deps import get_current_user, require_permission
from hr_portal.models.employee import (
    EmployeeCreate,
    EmployeeRecord,
    EmployeeStatus,
    EmployeeUpdate,
    TransferRequest,
)
from hr_portal.models.succession import StaffingChangeResult
from hr_portal.services.container import employee_service, succession_service


router = APIRouter(prefix="/employees", tags=["Employees"])


@router.get("", response_model=list[EmployeeRecord])
def list_employees(
    department_id: Optional[str] = None,
    status: Optional[EmployeeStatus] = None,
    current_user: dict = Depends(get_current_user),
) -> list[EmployeeRecord]:
    return employee_service.list_employees(current_user, department_id, status)


@router.post("", response_model=EmployeeRecord, status_code=201)
def create_employee(
    payload: EmployeeCreate,
    current_user: dict = Depends(require_permission("can_manage_employees")),
) -> EmployeeRecord:
    return employee_service.create_employee(current_user, payload)


@router.get("/{employee_id}", response_model=EmployeeRecord)
def get_employee(
    employee_id: str,
    current_user: dict = Depends(get_current_user),
) -> EmployeeRecord:
    return employee_service.get_employee(current_user, employee_id)


@router.patch("/{employee_id}", response_model=EmployeeRecord)
def update_employee(
    employee_id: str,
    payload: EmployeeUpdate,
    current_user: dict = Depends(require_permission("can_manage_employees")),
) -> EmployeeRecord:
    return employee_service.update_employee(current_user, employee_id, payload)


@router.post("/{employee_id}/deactivate", response_model=StaffingChangeResult)
def deactivate_employee(
    employee_id: str,
    current_user: dict = Depends(require_permission("can_manage_employees")),
) -> StaffingChangeResult:
    return succession_service.deactivate_employee(current_user, employee_id)


@router.post("/{employee_id}/transfer", response_model=StaffingChangeResult)
def transfer_employee(
    employee_id: str,
    payload: TransferRequest,
    current_user: dict = Depends(require_permission("can_manage_employees")),
) -> StaffingChangeResult:
    return succession_service.transfer_employee(current_user, employee_id, payload.department_id)
