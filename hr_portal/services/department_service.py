from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from fastapi import HTTPException

from hr_portal.core.rbac import ensure_permission
from hr_portal.models.employee import (
    DepartmentCreate,
    DepartmentRecord,
    EmployeeStatus,
)
from hr_portal.repositories.data_store import DEPARTMENTS, EMPLOYEES, DataStore, iso_now
from hr_portal.services.analytics_service import EventLogger


class DepartmentService:
    """Departments and their head / deputy slots.

    A head must be an active employee and can head only one department; a
    deputy must differ from the head.
    """

    def __init__(self, store: DataStore, event_logger: EventLogger) -> None:
        self.store = store
        self.event_logger = event_logger

    def require_department(self, department_id: str) -> dict[str, Any]:
        row = self.store.get(DEPARTMENTS, department_id)
        if not row:
            raise HTTPException(status_code=404, detail="Department not found")
        return row

    def department_headed_by(self, employee_id: str) -> dict[str, Any] | None:
        headed = self.store.find(DEPARTMENTS, head_id=employee_id)
        return headed[0] if headed else None

    def _require_active_member(self, employee_id: str, department_id: str | None, label: str) -> dict[str, Any]:
        employee = self.store.get(EMPLOYEES, employee_id)
        if not employee:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        if employee["status"] != EmployeeStatus.ACTIVE:
            raise HTTPException(status_code=400, detail=f"{label} must be an active employee")
        if department_id and employee.get("department_id") not in {department_id, None}:
            raise HTTPException(status_code=400, detail=f"{label} must belong to the department")
        return employee

    def create_department(self, actor: dict[str, Any], payload: DepartmentCreate) -> DepartmentRecord:
        ensure_permission(actor, "can_manage_departments")

        with self.store.transaction():
            if any(d["name"].lower() == payload.name.lower() for d in self.store.all(DEPARTMENTS)):
                raise HTTPException(status_code=409, detail="A department with this name already exists")

            department_id = f"dept-{uuid4().hex[:10]}"
            now = iso_now()

            for employee_id, label in ((payload.head_id, "Head"), (payload.deputy_head_id, "Deputy")):
                if not employee_id:
                    continue
                self._require_active_member(employee_id, None, label)
                if self.department_headed_by(employee_id):
                    raise HTTPException(status_code=409, detail=f"{label} already heads another department")
                if label == "Head" and self.store.find(DEPARTMENTS, deputy_head_id=employee_id):
                    raise HTTPException(
                        status_code=409,
                        detail="Head is deputy of another department, clear that slot first",
                    )
                for other in self.store.find(DEPARTMENTS, deputy_head_id=employee_id):
                    self.store.update(DEPARTMENTS, other["department_id"], {"deputy_head_id": None, "updated_at": now})
                self.store.update(EMPLOYEES, employee_id, {"department_id": department_id, "updated_at": now})

            if payload.head_id:
                self.store.update(
                    EMPLOYEES,
                    payload.head_id,
                    {"is_manager": True, "position": "Department Head", "updated_at": now},
                )

            row = self.store.insert(
                DEPARTMENTS,
                department_id,
                {
                    "department_id": department_id,
                    "name": payload.name,
                    "description": payload.description,
                    "head_id": payload.head_id,
                    "deputy_head_id": payload.deputy_head_id,
                    "created_at": now,
                    "updated_at": now,
                },
            )

        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={"action": "department_created", "department_id": department_id, "count": 1},
        )
        return self.to_record(row)

    def list_departments(self) -> list[DepartmentRecord]:
        rows = sorted(self.store.all(DEPARTMENTS), key=lambda r: r["name"])
        return [self.to_record(r) for r in rows]

    def get_department(self, department_id: str) -> DepartmentRecord:
        return self.to_record(self.require_department(department_id))

    def set_deputy(
        self,
        actor: dict[str, Any],
        department_id: str,
        deputy_head_id: str | None,
    ) -> DepartmentRecord:
        ensure_permission(actor, "can_manage_departments")

        with self.store.transaction():
            department = self.require_department(department_id)
            if deputy_head_id:
                if deputy_head_id == department.get("head_id"):
                    raise HTTPException(status_code=400, detail="Deputy must differ from the department head")
                self._require_active_member(deputy_head_id, department_id, "Deputy")

            updated = self.store.update_if(
                DEPARTMENTS,
                department_id,
                {"head_id": department.get("head_id")},
                {"deputy_head_id": deputy_head_id, "updated_at": iso_now()},
            )
            if updated is None:
                raise HTTPException(status_code=409, detail="Department leadership changed, retry")

        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={
                "action": "department_deputy_set",
                "department_id": department_id,
                "deputy_head_id": deputy_head_id,
                "count": 1,
            },
        )
        return self.to_record(updated)

    @staticmethod
    def to_record(row: dict[str, Any]) -> DepartmentRecord:
        return DepartmentRecord(
            department_id=row["department_id"],
            name=row["name"],
            description=row.get("description", ""),
            head_id=row.get("head_id"),
            deputy_head_id=row.get("deputy_head_id"),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
