from typing import Optional

from fastapi import APIRouter, Depends

from hr_portal.api.deps import get_current_user, require_permission
from hr_portal.models.roles import (
    JobRoleCreate,
    JobRoleRecord,
    PromotionCreate,
    PromotionRecord,
    RoleHistoryRecord,
)
from hr_portal.models.workflow import DecisionRequest
from hr_portal.services.container import role_service


router = APIRouter(prefix="/roles", tags=["Roles"])


@router.get("", response_model=list[JobRoleRecord])
def list_roles(
    department_id: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
) -> list[JobRoleRecord]:
    _ = current_user
    return role_service.list_roles(department_id)


@router.post("", response_model=JobRoleRecord, status_code=201)
def create_role(
    payload: JobRoleCreate,
    current_user: dict = Depends(require_permission("can_manage_roles")),
) -> JobRoleRecord:
    return role_service.create_role(current_user, payload)


@router.get("/promotions", response_model=list[PromotionRecord])
def list_promotions(current_user: dict = Depends(get_current_user)) -> list[PromotionRecord]:
    return role_service.list_promotions(current_user)


@router.post("/promotions", response_model=PromotionRecord, status_code=201)
def submit_promotion(
    payload: PromotionCreate,
    current_user: dict = Depends(require_permission("can_manage_employees")),
) -> PromotionRecord:
    return role_service.submit_promotion(current_user, payload)


@router.post("/promotions/{promotion_id}/decision", response_model=PromotionRecord)
def decide_promotion(
    promotion_id: str,
    payload: DecisionRequest,
    current_user: dict = Depends(require_permission("can_manage_roles")),
) -> PromotionRecord:
    return role_service.decide_promotion(current_user, promotion_id, payload)


@router.get("/history/{employee_id}", response_model=list[RoleHistoryRecord])
def get_role_history(
    employee_id: str,
    current_user: dict = Depends(get_current_user),
) -> list[RoleHistoryRecord]:
    return role_service.role_history(current_user, employee_id)
