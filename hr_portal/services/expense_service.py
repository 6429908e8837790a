from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import HTTPException

from hr_portal.core.rbac import is_hr
from hr_portal.models.expense import (
    ApprovalStage,
    ExpenseDecisionRequest,
    ExpenseRequestCreate,
    ExpenseRequestRecord,
    StageApproval,
)
from hr_portal.models.workflow import RequestStatus
from hr_portal.repositories.data_store import EXPENSE_REQUESTS, DataStore, iso_now
from hr_portal.services.analytics_service import EventLogger
from hr_portal.services.employee_service import EmployeeService
from hr_portal.services.notification_service import NotificationService
from hr_portal.services.request_lifecycle import (
    ensure_can_decide,
    ensure_not_self,
    ensure_pending,
    load_request,
    new_request_id,
    pending_fields,
)

logger = logging.getLogger(__name__)


def _empty_stage() -> dict[str, Any]:
    return {"status": RequestStatus.PENDING, "approver_id": None, "decided_at": None, "comment": None}


class ExpenseService:
    """Two-stage expense approval: the manager stage, then the HR stage.

    ``current_stage`` names the stage awaiting a decision. Each decision is a
    conditional write on ``(status, current_stage)``, so of two concurrent
    deciders of the same stage exactly one succeeds.
    """

    def __init__(
        self,
        store: DataStore,
        event_logger: EventLogger,
        employee_service: EmployeeService,
        notification_service: NotificationService,
    ) -> None:
        self.store = store
        self.event_logger = event_logger
        self.employee_service = employee_service
        self.notification_service = notification_service

    def create_expense_request(self, user: dict[str, Any], payload: ExpenseRequestCreate) -> ExpenseRequestRecord:
        employee = self.employee_service.require_linked_employee(user)

        request_id = new_request_id("exp")
        row = self.store.insert(
            EXPENSE_REQUESTS,
            request_id,
            {
                "request_id": request_id,
                "employee_id": employee["employee_id"],
                "department_id": employee.get("department_id"),
                "amount": round(payload.amount, 2),
                "category": payload.category,
                "description": payload.description.strip(),
                "receipt_url": payload.receipt_url,
                "current_stage": ApprovalStage.MANAGER,
                "manager_approval": _empty_stage(),
                "hr_approval": _empty_stage(),
                **pending_fields(),
            },
        )

        self.notification_service.notify(
            self.employee_service.manager_of(employee),
            "expense_request",
            "New Expense Request",
            f"{employee['first_name']} {employee['last_name']} has submitted an expense request",
            request_id=request_id,
        )
        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=user["user_id"],
            actor_role=user["role"],
            details={"action": "expense_created", "request_id": request_id, "count": 1},
        )
        return self._to_expense_model(row)

    def decide_expense_request(
        self,
        user: dict[str, Any],
        request_id: str,
        payload: ExpenseDecisionRequest,
    ) -> ExpenseRequestRecord:
        row = load_request(self.store, EXPENSE_REQUESTS, request_id, "Expense request")
        ensure_pending(row, "Expense request")
        if row["current_stage"] != payload.stage:
            raise HTTPException(
                status_code=409,
                detail=f"Expense request is awaiting the {ApprovalStage(row['current_stage']).value} stage",
            )

        if payload.stage == ApprovalStage.MANAGER:
            ensure_can_decide(self.store, user, row["employee_id"])
        else:
            ensure_not_self(user, row["employee_id"])
            if not is_hr(user["role"]):
                raise HTTPException(status_code=403, detail="Only HR can decide the HR approval stage")

        now = iso_now()
        stage_record = {
            "status": RequestStatus.APPROVED if payload.approve else RequestStatus.REJECTED,
            "approver_id": user["user_id"],
            "decided_at": now,
            "comment": payload.note,
        }
        stage_field = "manager_approval" if payload.stage == ApprovalStage.MANAGER else "hr_approval"
        changes: dict[str, Any] = {stage_field: stage_record, "updated_at": now}

        if not payload.approve:
            changes.update(status=RequestStatus.REJECTED, current_stage=None)
        elif payload.stage == ApprovalStage.MANAGER:
            changes.update(current_stage=ApprovalStage.HR)
        else:
            changes.update(status=RequestStatus.APPROVED, current_stage=None)

        updated = self.store.update_if(
            EXPENSE_REQUESTS,
            request_id,
            {"status": RequestStatus.PENDING, "current_stage": payload.stage},
            changes,
        )
        if updated is None:
            logger.warning(
                "Conflicting %s-stage decision on expense %s by %s",
                payload.stage.value,
                request_id,
                user["user_id"],
            )
            raise HTTPException(
                status_code=409,
                detail=f"Expense request {payload.stage.value} stage already decided",
            )

        self._notify_outcome(updated, payload)
        self.event_logger.log_event(
            event_type="workflow_action",
            actor_id=user["user_id"],
            actor_role=user["role"],
            details={
                "action": "expense_decision",
                "request_id": request_id,
                "stage": payload.stage.value,
                "approve": payload.approve,
                "count": 1,
            },
        )
        return self._to_expense_model(updated)

    def _notify_outcome(self, row: dict[str, Any], payload: ExpenseDecisionRequest) -> None:
        status = RequestStatus(row["status"])
        amount = f"${row['amount']:.2f}"
        category = getattr(row["category"], "value", row["category"])
        if status == RequestStatus.PENDING:
            self.notification_service.notify(
                row["employee_id"],
                "expense_manager_approved",
                "Expense Request Forwarded to HR",
                f"Your {category} expense ({amount}) was approved by your manager and is awaiting HR",
                request_id=row["request_id"],
            )
            return
        self.notification_service.notify(
            row["employee_id"],
            f"expense_{status.value}",
            f"Expense Request {status.value.capitalize()}",
            f"Your {category} expense ({amount}) was {status.value}"
            + (f": {payload.note}" if payload.note else ""),
            request_id=row["request_id"],
        )

    def list_expense_requests(
        self,
        user: dict[str, Any],
        status: RequestStatus | None = None,
        stage: ApprovalStage | None = None,
    ) -> list[ExpenseRequestRecord]:
        visible = self.employee_service.visible_employee_ids(user)
        rows = self.store.all(EXPENSE_REQUESTS)
        if visible is not None:
            rows = [r for r in rows if r["employee_id"] in visible]
        if status:
            rows = [r for r in rows if r["status"] == status]
        if stage:
            rows = [r for r in rows if r.get("current_stage") == stage]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [self._to_expense_model(r) for r in rows]

    @staticmethod
    def _to_stage(raw: dict[str, Any]) -> StageApproval:
        decided_at = raw.get("decided_at")
        return StageApproval(
            status=raw["status"],
            approver_id=raw.get("approver_id"),
            decided_at=datetime.fromisoformat(decided_at) if decided_at else None,
            comment=raw.get("comment"),
        )

    def _to_expense_model(self, row: dict[str, Any]) -> ExpenseRequestRecord:
        return ExpenseRequestRecord(
            request_id=row["request_id"],
            employee_id=row["employee_id"],
            department_id=row.get("department_id"),
            amount=row["amount"],
            category=row["category"],
            description=row["description"],
            receipt_url=row.get("receipt_url"),
            status=row["status"],
            current_stage=row.get("current_stage"),
            manager_approval=self._to_stage(row["manager_approval"]),
            hr_approval=self._to_stage(row["hr_approval"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
