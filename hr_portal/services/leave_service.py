from __future__ import annotations

from datetime import date, datetime
from typing import Any

from fastapi import HTTPException

from hr_portal.core.config import settings
from hr_portal.core.rbac import is_hr
from hr_portal.models.leave import (
    LeaveAllotmentUpdate,
    LeaveBalanceRecord,
    LeaveRequestCreate,
    LeaveRequestRecord,
    LeaveType,
    MedicalCertificateCheck,
)
from hr_portal.models.workflow import DecisionRequest, RequestStatus
from hr_portal.repositories.data_store import LEAVE_REQUESTS, DataStore
from hr_portal.services.analytics_service import EventLogger
from hr_portal.services.employee_service import EmployeeService
from hr_portal.services.leave_balance_service import LeaveBalanceLedger
from hr_portal.services.notification_service import NotificationService
from hr_portal.services.request_lifecycle import (
    ensure_can_decide,
    ensure_pending,
    load_request,
    new_request_id,
    pending_fields,
    resolve_pending,
)


def calculate_leave_duration(start_date: date, end_date: date) -> int:
    """Number of leave days, counting both the start and the end date."""
    return (end_date - start_date).days + 1


def requires_medical_certificate(
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    threshold_days: int = settings.medical_certificate_threshold_days,
) -> bool:
    if leave_type != LeaveType.SICK:
        return False
    return calculate_leave_duration(start_date, end_date) > threshold_days


class LeaveService:
    def __init__(
        self,
        store: DataStore,
        event_logger: EventLogger,
        employee_service: EmployeeService,
        ledger: LeaveBalanceLedger,
        notification_service: NotificationService,
    ) -> None:
        self.store = store
        self.event_logger = event_logger
        self.employee_service = employee_service
        self.ledger = ledger
        self.notification_service = notification_service

    def medical_certificate_check(
        self,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
    ) -> MedicalCertificateCheck:
        if end_date < start_date:
            raise HTTPException(status_code=400, detail="end_date must be on or after start_date")
        return MedicalCertificateCheck(
            leave_type=leave_type,
            days=calculate_leave_duration(start_date, end_date),
            requires_medical_certificate=requires_medical_certificate(leave_type, start_date, end_date),
        )

    def create_leave_request(self, user: dict[str, Any], payload: LeaveRequestCreate) -> LeaveRequestRecord:
        employee = self.employee_service.require_linked_employee(user)
        if payload.start_date.year != payload.end_date.year:
            raise HTTPException(status_code=400, detail="Leave requests cannot span two calendar years")
        if (
            requires_medical_certificate(payload.leave_type, payload.start_date, payload.end_date)
            and not payload.medical_certificate_url
        ):
            raise HTTPException(
                status_code=400,
                detail=(
                    "A medical certificate is required for sick leave longer than "
                    f"{settings.medical_certificate_threshold_days} days"
                ),
            )

        request_id = new_request_id("leave")
        row = self.store.insert(
            LEAVE_REQUESTS,
            request_id,
            {
                "request_id": request_id,
                "employee_id": employee["employee_id"],
                "department_id": employee.get("department_id"),
                "leave_type": payload.leave_type,
                "start_date": payload.start_date.isoformat(),
                "end_date": payload.end_date.isoformat(),
                "days": calculate_leave_duration(payload.start_date, payload.end_date),
                "reason": payload.reason.strip(),
                "medical_certificate_url": payload.medical_certificate_url,
                **pending_fields(),
            },
        )

        self.notification_service.notify(
            self.employee_service.manager_of(employee),
            "leave_request",
            "New Leave Request",
            f"{employee['first_name']} {employee['last_name']} has submitted a leave request",
            request_id=request_id,
        )
        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=user["user_id"],
            actor_role=user["role"],
            details={"action": "leave_created", "request_id": request_id, "count": 1},
        )
        return self._to_leave_model(row)

    def decide_leave_request(
        self,
        user: dict[str, Any],
        request_id: str,
        payload: DecisionRequest,
    ) -> LeaveRequestRecord:
        # Status flip and balance deduction commit together or not at all.
        with self.store.transaction():
            row = load_request(self.store, LEAVE_REQUESTS, request_id, "Leave request")
            ensure_pending(row, "Leave request")
            ensure_can_decide(self.store, user, row["employee_id"])

            if payload.approve:
                self.ledger.decrement(
                    row["employee_id"],
                    row["leave_type"],
                    row["days"],
                    year=date.fromisoformat(row["start_date"]).year,
                )

            updated = resolve_pending(
                self.store,
                LEAVE_REQUESTS,
                request_id,
                approve=payload.approve,
                approver_id=user["user_id"],
                note=payload.note,
                label="Leave request",
            )

        decision = RequestStatus(updated["status"]).value
        self.notification_service.notify(
            row["employee_id"],
            f"leave_{decision}",
            f"Leave Request {decision.capitalize()}",
            f"Your leave request has been {decision}" + (f": {payload.note}" if payload.note else ""),
            request_id=request_id,
        )
        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=user["user_id"],
            actor_role=user["role"],
            details={
                "action": "leave_decision",
                "request_id": request_id,
                "decision": decision,
                "count": 1,
            },
        )
        return self._to_leave_model(updated)

    def list_leave_requests(
        self,
        user: dict[str, Any],
        status: RequestStatus | None = None,
    ) -> list[LeaveRequestRecord]:
        visible = self.employee_service.visible_employee_ids(user)
        rows = self.store.all(LEAVE_REQUESTS)
        if visible is not None:
            rows = [r for r in rows if r["employee_id"] in visible]
        if status:
            rows = [r for r in rows if r["status"] == status]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [self._to_leave_model(r) for r in rows]

    def get_balance(self, user: dict[str, Any], employee_id: str, year: int | None = None) -> LeaveBalanceRecord:
        self.employee_service.require_employee(employee_id)
        if not self.employee_service.can_view(user, employee_id):
            raise HTTPException(status_code=403, detail="Not allowed to view this leave balance")
        return self.ledger.get_balance(employee_id, year)

    def set_allotment(
        self,
        user: dict[str, Any],
        employee_id: str,
        payload: LeaveAllotmentUpdate,
    ) -> LeaveBalanceRecord:
        if not is_hr(user["role"]):
            raise HTTPException(status_code=403, detail="Only HR can change leave allotments")
        self.employee_service.require_employee(employee_id)
        balance = self.ledger.set_allotment(employee_id, payload)

        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=user["user_id"],
            actor_role=user["role"],
            details={
                "action": "leave_allotment_set",
                "employee_id": employee_id,
                "year": balance.year,
                "count": 1,
            },
        )
        return balance

    @staticmethod
    def _to_leave_model(row: dict[str, Any]) -> LeaveRequestRecord:
        approved_at = row.get("approved_at")
        return LeaveRequestRecord(
            request_id=row["request_id"],
            employee_id=row["employee_id"],
            department_id=row.get("department_id"),
            leave_type=row["leave_type"],
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
            days=row["days"],
            reason=row["reason"],
            medical_certificate_url=row.get("medical_certificate_url"),
            status=row["status"],
            approved_by=row.get("approved_by"),
            approved_at=datetime.fromisoformat(approved_at) if approved_at else None,
            approver_note=row.get("approver_note"),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
