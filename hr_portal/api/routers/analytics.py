from typing import Optional

from fastapi import APIRouter, Depends, Query

from hr_portal.api.deps import APPROVERS, HR_STAFF, require_roles
from hr_portal.models.analytics import RequestStatsResponse
from hr_portal.services.container import analytics_service, employee_service


router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/requests", response_model=RequestStatsResponse)
def get_request_stats(
    current_user: dict = Depends(require_roles(APPROVERS)),
) -> RequestStatsResponse:
    return analytics_service.get_request_stats(employee_service.visible_employee_ids(current_user))


@router.get("/events")
def get_recent_events(
    limit: int = Query(default=100, ge=1, le=1000),
    event_type: Optional[str] = None,
    actor_id: Optional[str] = None,
    current_user: dict = Depends(require_roles(HR_STAFF)),
) -> list[dict]:
    _ = current_user
    return analytics_service.get_recent_events(limit, event_type, actor_id)
