from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from fastapi import HTTPException

from hr_portal.core.rbac import Role, ensure_permission, has_permission, is_hr
from hr_portal.models.employee import (
    EmployeeCreate,
    EmployeeRecord,
    EmployeeStatus,
    EmployeeUpdate,
)
from hr_portal.repositories.data_store import DEPARTMENTS, EMPLOYEES, DataStore, iso_now
from hr_portal.services.analytics_service import EventLogger
from hr_portal.services.request_lifecycle import manages_employee
from hr_portal.services.role_service import RoleService


class EmployeeService:
    def __init__(self, store: DataStore, event_logger: EventLogger, role_service: RoleService) -> None:
        self.store = store
        self.event_logger = event_logger
        self.role_service = role_service

    def require_employee(self, employee_id: str) -> dict[str, Any]:
        row = self.store.get(EMPLOYEES, employee_id)
        if not row:
            raise HTTPException(status_code=404, detail="Employee not found")
        return row

    def require_linked_employee(self, user: dict[str, Any]) -> dict[str, Any]:
        employee_id = user.get("employee_id")
        if not employee_id:
            raise HTTPException(status_code=400, detail="Account is not linked to an employee record")
        return self.require_employee(employee_id)

    def visible_employee_ids(self, user: dict[str, Any]) -> set[str] | None:
        """Employees whose records ``user`` may see; None means everyone."""
        if is_hr(user["role"]):
            return None

        own_id = user.get("employee_id")
        visible = {own_id} if own_id else set()
        if user["role"] != Role.MANAGER or not own_id:
            return visible

        headed = {d["department_id"] for d in self.store.find(DEPARTMENTS, head_id=own_id)}
        for row in self.store.all(EMPLOYEES):
            if row.get("manager_id") == own_id or row.get("department_id") in headed:
                visible.add(row["employee_id"])
        return visible

    def can_view(self, user: dict[str, Any], employee_id: str) -> bool:
        visible = self.visible_employee_ids(user)
        return visible is None or employee_id in visible

    def manager_of(self, employee: dict[str, Any]) -> str | None:
        """Employee id of whoever approves this employee's requests first."""
        if employee.get("manager_id"):
            return employee["manager_id"]
        department_id = employee.get("department_id")
        if not department_id:
            return None
        department = self.store.get(DEPARTMENTS, department_id)
        head_id = department.get("head_id") if department else None
        return head_id if head_id != employee["employee_id"] else None

    def create_employee(self, actor: dict[str, Any], payload: EmployeeCreate) -> EmployeeRecord:
        ensure_permission(actor, "can_manage_employees")
        if payload.salary is not None:
            ensure_permission(actor, "can_edit_salaries")
        if actor["role"] == Role.MANAGER:
            own = self.require_linked_employee(actor)
            if payload.department_id != own.get("department_id"):
                raise HTTPException(status_code=403, detail="Managers can only add employees to their own department")

        email = payload.email.strip().lower()
        with self.store.transaction():
            if any(e["email"] == email for e in self.store.all(EMPLOYEES)):
                raise HTTPException(status_code=409, detail="An employee with this email already exists")
            if payload.department_id and not self.store.exists(DEPARTMENTS, payload.department_id):
                raise HTTPException(status_code=404, detail="Department not found")
            if payload.manager_id:
                self._require_active(payload.manager_id, "Manager")

            employee_id = f"emp-{uuid4().hex[:10]}"
            now = iso_now()
            row = self.store.insert(
                EMPLOYEES,
                employee_id,
                {
                    "employee_id": employee_id,
                    "first_name": payload.first_name,
                    "last_name": payload.last_name,
                    "email": email,
                    "position": payload.position,
                    "department_id": payload.department_id,
                    "role_id": None,
                    "manager_id": payload.manager_id,
                    "salary": payload.salary,
                    "is_manager": False,
                    "status": EmployeeStatus.ACTIVE,
                    "created_at": now,
                    "updated_at": now,
                },
            )
            if payload.role_id:
                self.role_service.apply_role_change(employee_id, payload.role_id, payload.salary, "Initial role")
                row = self.require_employee(employee_id)

        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={"action": "employee_created", "employee_id": employee_id, "count": 1},
        )
        return self.to_record(row, actor)

    def get_employee(self, viewer: dict[str, Any], employee_id: str) -> EmployeeRecord:
        row = self.require_employee(employee_id)
        if not self.can_view(viewer, employee_id):
            raise HTTPException(status_code=403, detail="Not allowed to view this employee")
        return self.to_record(row, viewer)

    def list_employees(
        self,
        viewer: dict[str, Any],
        department_id: str | None = None,
        status: EmployeeStatus | None = None,
    ) -> list[EmployeeRecord]:
        visible = self.visible_employee_ids(viewer)
        rows = self.store.all(EMPLOYEES)
        if visible is not None:
            rows = [r for r in rows if r["employee_id"] in visible]
        if department_id:
            rows = [r for r in rows if r.get("department_id") == department_id]
        if status:
            rows = [r for r in rows if r["status"] == status]
        rows.sort(key=lambda r: (r["last_name"], r["first_name"]))
        return [self.to_record(r, viewer) for r in rows]

    def update_employee(
        self,
        actor: dict[str, Any],
        employee_id: str,
        payload: EmployeeUpdate,
    ) -> EmployeeRecord:
        ensure_permission(actor, "can_manage_employees")
        changes = payload.model_dump(exclude_unset=True)
        if "salary" in changes:
            ensure_permission(actor, "can_edit_salaries")
        if changes.get("status") == EmployeeStatus.INACTIVE:
            raise HTTPException(status_code=400, detail="Use the deactivate operation to deactivate an employee")

        row = self.require_employee(employee_id)
        if actor["role"] == Role.MANAGER and not manages_employee(self.store, actor, employee_id):
            raise HTTPException(status_code=403, detail="Managers can only update their own team")
        if row["status"] == EmployeeStatus.INACTIVE:
            raise HTTPException(status_code=409, detail="Inactive employees cannot be updated")
        new_status = changes.get("status")
        if new_status and new_status != EmployeeStatus.ACTIVE and self.store.find(DEPARTMENTS, head_id=employee_id):
            raise HTTPException(status_code=409, detail="Reassign the department head before changing their status")

        manager_id = changes.get("manager_id")
        if manager_id:
            if manager_id == employee_id:
                raise HTTPException(status_code=400, detail="An employee cannot manage themselves")
            self._require_active(manager_id, "Manager")

        changes["updated_at"] = iso_now()
        updated = self.store.update(EMPLOYEES, employee_id, changes)

        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={
                "action": "employee_updated",
                "employee_id": employee_id,
                "fields": sorted(k for k in changes if k != "updated_at"),
                "count": 1,
            },
        )
        return self.to_record(updated, actor)

    def _require_active(self, employee_id: str, label: str) -> dict[str, Any]:
        row = self.store.get(EMPLOYEES, employee_id)
        if not row:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        if row["status"] != EmployeeStatus.ACTIVE:
            raise HTTPException(status_code=400, detail=f"{label} must be an active employee")
        return row

    def to_record(self, row: dict[str, Any], viewer: dict[str, Any] | None = None) -> EmployeeRecord:
        show_salary = viewer is None or (
            has_permission(viewer["role"], "can_view_salaries")
            or viewer.get("employee_id") == row["employee_id"]
        )
        return EmployeeRecord(
            employee_id=row["employee_id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            position=row["position"],
            department_id=row.get("department_id"),
            role_id=row.get("role_id"),
            manager_id=row.get("manager_id"),
            salary=row.get("salary") if show_salary else None,
            is_manager=bool(row.get("is_manager")),
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
