from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from fastapi import HTTPException

from hr_portal.core.rbac import Role, ensure_permission
from hr_portal.models.employee import EmployeeStatus
from hr_portal.models.succession import (
    StaffingChangeResult,
    SuccessionChoice,
    SuccessionDecision,
    SuccessionReason,
    SuccessionStatus,
    SuccessionTicket,
)
from hr_portal.repositories.data_store import (
    DEPARTMENTS,
    EMPLOYEES,
    SUCCESSIONS,
    DataStore,
    iso_now,
)
from hr_portal.services.analytics_service import EventLogger
from hr_portal.services.department_service import DepartmentService
from hr_portal.services.employee_service import EmployeeService
from hr_portal.services.notification_service import NotificationService
from hr_portal.services.request_lifecycle import manages_employee
from hr_portal.services.role_service import RoleService


class SuccessionService:
    """Hand-over of a department head's position.

    Deactivating or transferring a department head, or reassigning the head
    explicitly, does not touch any record straight away. It opens a
    succession ticket listing the deputy and the eligible replacements; the
    staffing change is applied only when an operator resolves that ticket, and
    cancelling it leaves every record as it was.
    """

    def __init__(
        self,
        store: DataStore,
        event_logger: EventLogger,
        employee_service: EmployeeService,
        department_service: DepartmentService,
        role_service: RoleService,
        notification_service: NotificationService,
    ) -> None:
        self.store = store
        self.event_logger = event_logger
        self.employee_service = employee_service
        self.department_service = department_service
        self.role_service = role_service
        self.notification_service = notification_service

    def eligible_candidates(
        self,
        department_id: str,
        outgoing_head_id: str,
        deputy_id: str | None,
    ) -> list[dict[str, Any]]:
        rows = [
            row
            for row in self.store.find(EMPLOYEES, department_id=department_id)
            if row["status"] == EmployeeStatus.ACTIVE
            and row["employee_id"] not in {outgoing_head_id, deputy_id}
        ]
        rows.sort(key=lambda r: (r["last_name"], r["first_name"]))
        return rows

    def _ensure_can_change(self, actor: dict[str, Any], employee_id: str) -> None:
        ensure_permission(actor, "can_manage_employees")
        if actor.get("employee_id") == employee_id:
            raise HTTPException(status_code=400, detail="You cannot change your own employment status")
        if actor["role"] == Role.MANAGER and not manages_employee(self.store, actor, employee_id):
            raise HTTPException(status_code=403, detail="Managers can only change their own team")

    def _open_ticket(
        self,
        actor: dict[str, Any],
        department: dict[str, Any],
        reason: SuccessionReason,
        target_department_id: str | None = None,
    ) -> dict[str, Any]:
        ensure_permission(actor, "can_manage_departments")
        department_id = department["department_id"]

        with self.store.transaction():
            department = self.department_service.require_department(department_id)
            if self.store.find(SUCCESSIONS, department_id=department_id, status=SuccessionStatus.PENDING):
                raise HTTPException(status_code=409, detail="A succession is already open for this department")

            outgoing_head_id = department["head_id"]
            deputy_id = department.get("deputy_head_id")
            candidates = self.eligible_candidates(department_id, outgoing_head_id, deputy_id)

            ticket_id = f"succ-{uuid4().hex[:10]}"
            row = self.store.insert(
                SUCCESSIONS,
                ticket_id,
                {
                    "ticket_id": ticket_id,
                    "department_id": department_id,
                    "department_name": department["name"],
                    "outgoing_head_id": outgoing_head_id,
                    "reason": reason,
                    "target_department_id": target_department_id,
                    "deputy_id": deputy_id,
                    "candidate_ids": [c["employee_id"] for c in candidates],
                    "status": SuccessionStatus.PENDING,
                    "opened_by": actor["user_id"],
                    "new_head_id": None,
                    "resolved_by": None,
                    "resolved_at": None,
                    "created_at": iso_now(),
                },
            )

        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={
                "action": "succession_opened",
                "ticket_id": ticket_id,
                "department_id": department_id,
                "reason": reason.value,
                "count": 1,
            },
        )
        return row

    def deactivate_employee(self, actor: dict[str, Any], employee_id: str) -> StaffingChangeResult:
        self._ensure_can_change(actor, employee_id)
        employee = self.employee_service.require_employee(employee_id)
        if employee["status"] == EmployeeStatus.INACTIVE:
            raise HTTPException(status_code=409, detail="Employee is already inactive")

        headed = self.department_service.department_headed_by(employee_id)
        if headed:
            ticket = self._open_ticket(actor, headed, SuccessionReason.DEACTIVATION)
            return StaffingChangeResult(
                employee=self.employee_service.to_record(employee, actor),
                succession=self._to_ticket_model(ticket, actor),
            )

        with self.store.transaction():
            self._apply_deactivation(employee_id, iso_now())

        self._log_staffing_change(actor, "employee_deactivated", employee_id)
        return StaffingChangeResult(
            employee=self.employee_service.to_record(self.employee_service.require_employee(employee_id), actor)
        )

    def transfer_employee(
        self,
        actor: dict[str, Any],
        employee_id: str,
        target_department_id: str,
    ) -> StaffingChangeResult:
        self._ensure_can_change(actor, employee_id)
        employee = self.employee_service.require_employee(employee_id)
        if employee["status"] == EmployeeStatus.INACTIVE:
            raise HTTPException(status_code=409, detail="Inactive employees cannot be transferred")
        self.department_service.require_department(target_department_id)
        if employee.get("department_id") == target_department_id:
            raise HTTPException(status_code=400, detail="Employee is already in this department")

        headed = self.department_service.department_headed_by(employee_id)
        if headed:
            ticket = self._open_ticket(actor, headed, SuccessionReason.TRANSFER, target_department_id)
            return StaffingChangeResult(
                employee=self.employee_service.to_record(employee, actor),
                succession=self._to_ticket_model(ticket, actor),
            )

        with self.store.transaction():
            self._apply_transfer(employee_id, target_department_id, iso_now())

        self._log_staffing_change(actor, "employee_transferred", employee_id)
        return StaffingChangeResult(
            employee=self.employee_service.to_record(self.employee_service.require_employee(employee_id), actor)
        )

    def open_reassignment(self, actor: dict[str, Any], department_id: str) -> SuccessionTicket:
        department = self.department_service.require_department(department_id)
        if not department.get("head_id"):
            raise HTTPException(status_code=409, detail="Department has no head to replace")
        ticket = self._open_ticket(actor, department, SuccessionReason.REASSIGNMENT)
        return self._to_ticket_model(ticket, actor)

    def get_ticket(self, actor: dict[str, Any], ticket_id: str) -> SuccessionTicket:
        ensure_permission(actor, "can_manage_departments")
        return self._to_ticket_model(self._require_ticket(ticket_id), actor)

    def resolve(
        self,
        actor: dict[str, Any],
        ticket_id: str,
        decision: SuccessionDecision,
    ) -> SuccessionTicket:
        ensure_permission(actor, "can_manage_departments")

        with self.store.transaction():
            ticket = self._require_ticket(ticket_id)
            self._ensure_ticket_pending(ticket)
            if ticket["reason"] == SuccessionReason.DEACTIVATION and decision.outgoing_role_id:
                raise HTTPException(
                    status_code=400,
                    detail="A deactivated head keeps no role, omit outgoing_role_id",
                )

            department = self.department_service.require_department(ticket["department_id"])
            outgoing_id = ticket["outgoing_head_id"]
            if department.get("head_id") != outgoing_id:
                raise HTTPException(
                    status_code=409,
                    detail="Department leadership changed since the succession was opened",
                )

            deputy_id = department.get("deputy_head_id")
            if decision.decision == SuccessionChoice.DEPUTY:
                if not deputy_id:
                    raise HTTPException(status_code=400, detail="Department has no deputy to promote")
                new_head = self.employee_service.require_employee(deputy_id)
                if new_head["status"] != EmployeeStatus.ACTIVE:
                    raise HTTPException(status_code=400, detail="Deputy is not an active employee")
                if new_head.get("department_id") != department["department_id"]:
                    raise HTTPException(status_code=400, detail="Deputy no longer belongs to the department")
                if self.department_service.department_headed_by(deputy_id):
                    raise HTTPException(status_code=409, detail="Deputy already heads another department")
            else:
                eligible = {
                    row["employee_id"]
                    for row in self.eligible_candidates(department["department_id"], outgoing_id, deputy_id)
                }
                if decision.replacement_id not in eligible:
                    raise HTTPException(status_code=400, detail="Replacement is not an eligible candidate")
                new_head = self.employee_service.require_employee(decision.replacement_id)

            new_head_id = new_head["employee_id"]
            now = iso_now()
            department_changes: dict[str, Any] = {"head_id": new_head_id, "updated_at": now}
            if new_head_id == deputy_id:
                department_changes["deputy_head_id"] = None
            self.store.update_if(DEPARTMENTS, department["department_id"], {"head_id": outgoing_id}, department_changes)

            self.store.update(
                EMPLOYEES,
                new_head_id,
                {"is_manager": True, "position": "Department Head", "manager_id": None, "updated_at": now},
            )
            for report in self.store.find(EMPLOYEES, manager_id=outgoing_id, department_id=department["department_id"]):
                if report["employee_id"] != new_head_id:
                    self.store.update(EMPLOYEES, report["employee_id"], {"manager_id": new_head_id, "updated_at": now})

            reason = SuccessionReason(ticket["reason"])
            if reason == SuccessionReason.DEACTIVATION:
                self._apply_deactivation(outgoing_id, now)
            else:
                if reason == SuccessionReason.TRANSFER:
                    self._apply_transfer(outgoing_id, ticket["target_department_id"], now)
                else:
                    self.store.update(
                        EMPLOYEES,
                        outgoing_id,
                        {"is_manager": False, "position": "Employee", "manager_id": new_head_id, "updated_at": now},
                    )
                if decision.outgoing_role_id:
                    self.role_service.apply_role_change(outgoing_id, decision.outgoing_role_id, notes="Succession")

            resolved = self.store.update_if(
                SUCCESSIONS,
                ticket_id,
                {"status": SuccessionStatus.PENDING},
                {
                    "status": SuccessionStatus.RESOLVED,
                    "new_head_id": new_head_id,
                    "resolved_by": actor["user_id"],
                    "resolved_at": now,
                },
            )
            if resolved is None:
                raise HTTPException(status_code=409, detail="Succession already closed")

        self.notification_service.notify(
            new_head_id,
            "succession",
            "New Department Head",
            f"You are now the head of {department['name']}",
        )
        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={
                "action": "succession_resolved",
                "ticket_id": ticket_id,
                "decision": decision.decision.value,
                "new_head_id": new_head_id,
                "count": 1,
            },
        )
        return self._to_ticket_model(resolved, actor)

    def cancel(self, actor: dict[str, Any], ticket_id: str) -> SuccessionTicket:
        ensure_permission(actor, "can_manage_departments")
        ticket = self._require_ticket(ticket_id)
        self._ensure_ticket_pending(ticket)

        cancelled = self.store.update_if(
            SUCCESSIONS,
            ticket_id,
            {"status": SuccessionStatus.PENDING},
            {"status": SuccessionStatus.CANCELLED, "resolved_by": actor["user_id"], "resolved_at": iso_now()},
        )
        if cancelled is None:
            raise HTTPException(status_code=409, detail="Succession already closed")

        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={"action": "succession_cancelled", "ticket_id": ticket_id, "count": 1},
        )
        return self._to_ticket_model(cancelled, actor)

    def _require_ticket(self, ticket_id: str) -> dict[str, Any]:
        row = self.store.get(SUCCESSIONS, ticket_id)
        if not row:
            raise HTTPException(status_code=404, detail="Succession not found")
        return row

    @staticmethod
    def _ensure_ticket_pending(ticket: dict[str, Any]) -> None:
        if ticket["status"] != SuccessionStatus.PENDING:
            raise HTTPException(
                status_code=409,
                detail=f"Succession already {SuccessionStatus(ticket['status']).value}",
            )

    def _apply_deactivation(self, employee_id: str, now: str) -> None:
        self.store.update(
            EMPLOYEES,
            employee_id,
            {"status": EmployeeStatus.INACTIVE, "is_manager": False, "updated_at": now},
        )
        for department in self.store.find(DEPARTMENTS, deputy_head_id=employee_id):
            self.store.update(DEPARTMENTS, department["department_id"], {"deputy_head_id": None, "updated_at": now})
        for report in self.store.find(EMPLOYEES, manager_id=employee_id):
            self.store.update(EMPLOYEES, report["employee_id"], {"manager_id": None, "updated_at": now})
        self.role_service.close_current_entry(employee_id, at=now)

    def _apply_transfer(self, employee_id: str, target_department_id: str, now: str) -> None:
        target = self.department_service.require_department(target_department_id)
        for department in self.store.find(DEPARTMENTS, deputy_head_id=employee_id):
            self.store.update(DEPARTMENTS, department["department_id"], {"deputy_head_id": None, "updated_at": now})
        target_head = target.get("head_id")
        self.store.update(
            EMPLOYEES,
            employee_id,
            {
                "department_id": target_department_id,
                "manager_id": target_head if target_head != employee_id else None,
                "is_manager": False,
                "position": "Employee",
                "updated_at": now,
            },
        )

    def _log_staffing_change(self, actor: dict[str, Any], action: str, employee_id: str) -> None:
        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={"action": action, "employee_id": employee_id, "count": 1},
        )

    def _to_ticket_model(self, row: dict[str, Any], viewer: dict[str, Any]) -> SuccessionTicket:
        deputy = self.store.get(EMPLOYEES, row["deputy_id"]) if row.get("deputy_id") else None
        candidates = [self.store.get(EMPLOYEES, employee_id) for employee_id in row["candidate_ids"]]
        resolved_at = row.get("resolved_at")
        return SuccessionTicket(
            ticket_id=row["ticket_id"],
            department_id=row["department_id"],
            department_name=row["department_name"],
            outgoing_head_id=row["outgoing_head_id"],
            reason=row["reason"],
            target_department_id=row.get("target_department_id"),
            deputy=self.employee_service.to_record(deputy, viewer) if deputy else None,
            candidates=[self.employee_service.to_record(c, viewer) for c in candidates if c],
            status=row["status"],
            opened_by=row["opened_by"],
            new_head_id=row.get("new_head_id"),
            resolved_by=row.get("resolved_by"),
            resolved_at=datetime.fromisoformat(resolved_at) if resolved_at else None,
            created_at=datetime.fromisoformat(row["created_at"]),
        )
