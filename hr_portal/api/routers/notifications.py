from fastapi import APIRouter, Depends

from hr_portal.api.deps import get_current_user
from hr_portal.models.notification import NotificationRecord
from hr_portal.services.container import notification_service


router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationRecord])
def list_notifications(
    unread_only: bool = False,
    current_user: dict = Depends(get_current_user),
) -> list[NotificationRecord]:
    return notification_service.list_for_user(current_user, unread_only)


@router.post("/{notification_id}/read", response_model=NotificationRecord)
def mark_notification_read(
    notification_id: str,
    current_user: dict = Depends(get_current_user),
) -> NotificationRecord:
    return notification_service.mark_read(current_user, notification_id)
