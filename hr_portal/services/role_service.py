from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from fastapi import HTTPException

from hr_portal.core.rbac import ensure_permission, has_permission, is_hr
from hr_portal.models.employee import EmployeeStatus
from hr_portal.models.roles import (
    JobRoleCreate,
    JobRoleRecord,
    PromotionCreate,
    PromotionRecord,
    RoleHistoryRecord,
)
from hr_portal.models.workflow import DecisionRequest, RequestStatus
from hr_portal.repositories.data_store import (
    EMPLOYEES,
    ROLE_HISTORY,
    ROLE_PROMOTIONS,
    ROLES,
    DataStore,
    iso_now,
)
from hr_portal.services.analytics_service import EventLogger
from hr_portal.services.notification_service import NotificationService
from hr_portal.services.request_lifecycle import (
    ensure_not_self,
    ensure_pending,
    load_request,
    manages_employee,
    new_request_id,
    pending_fields,
    resolve_pending,
)


class RoleService:
    """Job-role catalogue and the per-employee role history.

    History entries never overlap: opening a new entry always closes the
    previous open one at the same instant, inside one store transaction.
    """

    def __init__(
        self,
        store: DataStore,
        event_logger: EventLogger,
        notification_service: NotificationService,
    ) -> None:
        self.store = store
        self.event_logger = event_logger
        self.notification_service = notification_service

    def create_role(self, actor: dict[str, Any], payload: JobRoleCreate) -> JobRoleRecord:
        ensure_permission(actor, "can_manage_roles")

        role_id = f"role-{uuid4().hex[:10]}"
        now = iso_now()
        row = self.store.insert(
            ROLES,
            role_id,
            {
                "role_id": role_id,
                "title": payload.title,
                "level": payload.level,
                "base_salary": payload.base_salary,
                "department_id": payload.department_id,
                "created_at": now,
                "updated_at": now,
            },
        )
        self.event_logger.log_event(
            event_type="admin_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={"action": "job_role_created", "role_id": role_id},
        )
        return self._to_role_model(row)

    def list_roles(self, department_id: str | None = None) -> list[JobRoleRecord]:
        rows = self.store.all(ROLES)
        if department_id:
            rows = [r for r in rows if r.get("department_id") in {department_id, None}]
        rows.sort(key=lambda r: (r["level"], r["title"]))
        return [self._to_role_model(r) for r in rows]

    def require_role(self, role_id: str) -> dict[str, Any]:
        row = self.store.get(ROLES, role_id)
        if not row:
            raise HTTPException(status_code=404, detail="Job role not found")
        return row

    def current_entry(self, employee_id: str) -> dict[str, Any] | None:
        open_entries = self.store.find(ROLE_HISTORY, employee_id=employee_id, effective_to=None)
        return open_entries[0] if open_entries else None

    def close_current_entry(self, employee_id: str, at: str | None = None) -> dict[str, Any] | None:
        entry = self.current_entry(employee_id)
        if not entry:
            return None
        at = self._not_before(at or iso_now(), entry["effective_from"])
        return self.store.update(
            ROLE_HISTORY,
            entry["history_id"],
            {"effective_to": at, "updated_at": iso_now()},
        )

    def apply_role_change(
        self,
        employee_id: str,
        role_id: str,
        salary: float | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Close the open history entry and open one for ``role_id``.

        Also moves the employee document onto the new role and, when given, the
        new salary.
        """
        with self.store.transaction():
            employee = self.store.get(EMPLOYEES, employee_id)
            if not employee:
                raise HTTPException(status_code=404, detail="Employee not found")
            self.require_role(role_id)

            now = iso_now()
            closed = self.close_current_entry(employee_id, at=now)
            effective_from = closed["effective_to"] if closed else now
            new_salary = salary if salary is not None else employee.get("salary")

            history_id = f"rh-{uuid4().hex[:10]}"
            entry = self.store.insert(
                ROLE_HISTORY,
                history_id,
                {
                    "history_id": history_id,
                    "employee_id": employee_id,
                    "role_id": role_id,
                    "salary": new_salary,
                    "effective_from": effective_from,
                    "effective_to": None,
                    "promotion_notes": notes,
                    "created_at": now,
                    "updated_at": now,
                },
            )
            self.store.update(
                EMPLOYEES,
                employee_id,
                {"role_id": role_id, "salary": new_salary, "updated_at": now},
            )
        return entry

    def role_history(self, viewer: dict[str, Any], employee_id: str) -> list[RoleHistoryRecord]:
        if not self.store.exists(EMPLOYEES, employee_id):
            raise HTTPException(status_code=404, detail="Employee not found")
        is_self = viewer.get("employee_id") == employee_id
        if not (is_self or is_hr(viewer["role"]) or manages_employee(self.store, viewer, employee_id)):
            raise HTTPException(status_code=403, detail="Not allowed to view this role history")

        show_salary = is_self or has_permission(viewer["role"], "can_view_salaries")
        rows = sorted(self.store.find(ROLE_HISTORY, employee_id=employee_id), key=lambda r: r["effective_from"])
        return [self._to_history_model(r, show_salary) for r in rows]

    def submit_promotion(self, actor: dict[str, Any], payload: PromotionCreate) -> PromotionRecord:
        ensure_permission(actor, "can_manage_employees")
        if payload.new_salary is not None:
            ensure_permission(actor, "can_edit_salaries")

        employee = self.store.get(EMPLOYEES, payload.employee_id)
        if not employee:
            raise HTTPException(status_code=404, detail="Employee not found")
        if employee["status"] != EmployeeStatus.ACTIVE:
            raise HTTPException(status_code=400, detail="Only active employees can be promoted")
        if not is_hr(actor["role"]) and not manages_employee(self.store, actor, payload.employee_id):
            raise HTTPException(status_code=403, detail="Managers can only propose promotions for their team")
        ensure_not_self(actor, payload.employee_id)
        self.require_role(payload.new_role_id)
        if employee.get("role_id") == payload.new_role_id:
            raise HTTPException(status_code=400, detail="Employee already holds this role")

        with self.store.transaction():
            open_requests = self.store.find(
                ROLE_PROMOTIONS, employee_id=payload.employee_id, status=RequestStatus.PENDING
            )
            if open_requests:
                raise HTTPException(status_code=409, detail="A promotion is already pending for this employee")

            promotion_id = new_request_id("promo")
            row = self.store.insert(
                ROLE_PROMOTIONS,
                promotion_id,
                {
                    "promotion_id": promotion_id,
                    "employee_id": payload.employee_id,
                    "old_role_id": employee.get("role_id"),
                    "new_role_id": payload.new_role_id,
                    "new_salary": payload.new_salary,
                    "notes": payload.notes,
                    "requested_by": actor["user_id"],
                    **pending_fields(),
                },
            )

        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={"action": "promotion_requested", "request_id": promotion_id, "count": 1},
        )
        return self._to_promotion_model(row)

    def decide_promotion(
        self,
        actor: dict[str, Any],
        promotion_id: str,
        payload: DecisionRequest,
    ) -> PromotionRecord:
        ensure_permission(actor, "can_manage_roles")

        with self.store.transaction():
            row = load_request(self.store, ROLE_PROMOTIONS, promotion_id, "Promotion request")
            ensure_pending(row, "Promotion request")
            ensure_not_self(actor, row["employee_id"])
            if payload.approve:
                employee = self.store.get(EMPLOYEES, row["employee_id"])
                if not employee or employee["status"] != EmployeeStatus.ACTIVE:
                    raise HTTPException(status_code=409, detail="Employee is no longer active, reject the promotion")

            updated = resolve_pending(
                self.store,
                ROLE_PROMOTIONS,
                promotion_id,
                approve=payload.approve,
                approver_id=actor["user_id"],
                note=payload.note,
                label="Promotion request",
            )
            if payload.approve:
                self.apply_role_change(
                    row["employee_id"],
                    row["new_role_id"],
                    salary=row.get("new_salary"),
                    notes=row.get("notes") or None,
                )

        self.notification_service.notify(
            row["employee_id"],
            f"promotion_{RequestStatus(updated['status']).value}",
            f"Promotion {RequestStatus(updated['status']).value}",
            f"Your role change request has been {RequestStatus(updated['status']).value}",
            request_id=promotion_id,
        )
        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={
                "action": "promotion_decision",
                "request_id": promotion_id,
                "decision": updated["status"],
                "count": 1,
            },
        )
        return self._to_promotion_model(updated)

    def list_promotions(self, viewer: dict[str, Any]) -> list[PromotionRecord]:
        rows = self.store.all(ROLE_PROMOTIONS)
        if not is_hr(viewer["role"]):
            rows = [
                r
                for r in rows
                if r["employee_id"] == viewer.get("employee_id")
                or r["requested_by"] == viewer["user_id"]
            ]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        show_salary = has_permission(viewer["role"], "can_view_salaries")
        return [self._to_promotion_model(r, show_salary) for r in rows]

    @staticmethod
    def _not_before(at: str, floor: str) -> str:
        return at if datetime.fromisoformat(at) >= datetime.fromisoformat(floor) else floor

    @staticmethod
    def _to_role_model(row: dict[str, Any]) -> JobRoleRecord:
        return JobRoleRecord(
            role_id=row["role_id"],
            title=row["title"],
            level=row["level"],
            base_salary=row["base_salary"],
            department_id=row.get("department_id"),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _to_history_model(row: dict[str, Any], show_salary: bool = True) -> RoleHistoryRecord:
        effective_to = row.get("effective_to")
        return RoleHistoryRecord(
            history_id=row["history_id"],
            employee_id=row["employee_id"],
            role_id=row["role_id"],
            salary=row.get("salary") if show_salary else None,
            effective_from=datetime.fromisoformat(row["effective_from"]),
            effective_to=datetime.fromisoformat(effective_to) if effective_to else None,
            promotion_notes=row.get("promotion_notes"),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    @staticmethod
    def _to_promotion_model(row: dict[str, Any], show_salary: bool = True) -> PromotionRecord:
        approved_at = row.get("approved_at")
        return PromotionRecord(
            promotion_id=row["promotion_id"],
            employee_id=row["employee_id"],
            old_role_id=row.get("old_role_id"),
            new_role_id=row["new_role_id"],
            new_salary=row.get("new_salary") if show_salary else None,
            notes=row["notes"],
            requested_by=row["requested_by"],
            status=row["status"],
            approved_by=row.get("approved_by"),
            approved_at=datetime.fromisoformat(approved_at) if approved_at else None,
            approver_note=row.get("approver_note"),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
