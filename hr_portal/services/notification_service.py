from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from fastapi import HTTPException

from hr_portal.models.notification import NotificationRecord
from hr_portal.repositories.data_store import NOTIFICATIONS, DataStore, iso_now


class NotificationService:
    def __init__(self, store: DataStore) -> None:
        self.store = store

    def notify(
        self,
        employee_id: str | None,
        notification_type: str,
        title: str,
        message: str,
        request_id: str | None = None,
    ) -> NotificationRecord | None:
        if not employee_id:
            return None

        notification_id = f"ntf-{uuid4().hex[:10]}"
        row = self.store.insert(
            NOTIFICATIONS,
            notification_id,
            {
                "notification_id": notification_id,
                "employee_id": employee_id,
                "type": notification_type,
                "title": title,
                "message": message,
                "request_id": request_id,
                "read": False,
                "created_at": iso_now(),
            },
        )
        return self._to_model(row)

    def list_for_user(self, user: dict[str, Any], unread_only: bool = False) -> list[NotificationRecord]:
        employee_id = user.get("employee_id")
        if not employee_id:
            return []
        rows = self.store.find(NOTIFICATIONS, employee_id=employee_id)
        if unread_only:
            rows = [r for r in rows if not r["read"]]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [self._to_model(r) for r in rows]

    def mark_read(self, user: dict[str, Any], notification_id: str) -> NotificationRecord:
        row = self.store.get(NOTIFICATIONS, notification_id)
        if not row or row["employee_id"] != user.get("employee_id"):
            raise HTTPException(status_code=404, detail="Notification not found")
        updated = self.store.update(NOTIFICATIONS, notification_id, {"read": True})
        return self._to_model(updated)

    @staticmethod
    def _to_model(row: dict[str, Any]) -> NotificationRecord:
        return NotificationRecord(
            notification_id=row["notification_id"],
            employee_id=row["employee_id"],
            type=row["type"],
            title=row["title"],
            message=row["message"],
            request_id=row.get("request_id"),
            read=row["read"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
