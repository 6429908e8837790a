from fastapi import APIRouter, Depends

from hr_portal.api.deps import get_current_user, require_permission
from hr_portal.models.employee import DepartmentCreate, DepartmentRecord, DeputyUpdateRequest
from hr_portal.models.succession import SuccessionDecision, SuccessionTicket
from hr_portal.services.container import department_service, succession_service


router = APIRouter(prefix="/departments", tags=["Departments"])
succession_router = APIRouter(prefix="/successions", tags=["Departments"])


@router.get("", response_model=list[DepartmentRecord])
def list_departments(current_user: dict = Depends(get_current_user)) -> list[DepartmentRecord]:
    _ = current_user
    return department_service.list_departments()


@router.post("", response_model=DepartmentRecord, status_code=201)
def create_department(
    payload: DepartmentCreate,
    current_user: dict = Depends(require_permission("can_manage_departments")),
) -> DepartmentRecord:
    return department_service.create_department(current_user, payload)


@router.get("/{department_id}", response_model=DepartmentRecord)
def get_department(
    department_id: str,
    current_user: dict = Depends(get_current_user),
) -> DepartmentRecord:
    _ = current_user
    return department_service.get_department(department_id)


@router.put("/{department_id}/deputy", response_model=DepartmentRecord)
def set_deputy(
    department_id: str,
    payload: DeputyUpdateRequest,
    current_user: dict = Depends(require_permission("can_manage_departments")),
) -> DepartmentRecord:
    return department_service.set_deputy(current_user, department_id, payload.deputy_head_id)


@router.post("/{department_id}/succession", response_model=SuccessionTicket, status_code=201)
def open_reassignment(
    department_id: str,
    current_user: dict = Depends(require_permission("can_manage_departments")),
) -> SuccessionTicket:
    return succession_service.open_reassignment(current_user, department_id)


@succession_router.get("/{ticket_id}", response_model=SuccessionTicket)
def get_succession(
    ticket_id: str,
    current_user: dict = Depends(require_permission("can_manage_departments")),
) -> SuccessionTicket:
    return succession_service.get_ticket(current_user, ticket_id)


@succession_router.post("/{ticket_id}/resolve", response_model=SuccessionTicket)
def resolve_succession(
    ticket_id: str,
    payload: SuccessionDecision,
    current_user: dict = Depends(require_permission("can_manage_departments")),
) -> SuccessionTicket:
    return succession_service.resolve(current_user, ticket_id, payload)


@succession_router.post("/{ticket_id}/cancel", response_model=SuccessionTicket)
def cancel_succession(
    ticket_id: str,
    current_user: dict = Depends(require_permission("can_manage_departments")),
) -> SuccessionTicket:
    return succession_service.cancel(current_user, ticket_id)
