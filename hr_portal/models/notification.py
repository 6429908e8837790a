from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NotificationRecord(BaseModel):
    notification_id: str
    employee_id: str
    type: str
    title: str
    message: str
    request_id: Optional[str] = None
    read: bool = False
    created_at: datetime
