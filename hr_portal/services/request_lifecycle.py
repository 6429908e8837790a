"""Shared pending -> approved/rejected transitions for workflow requests.

Every request collection stores ``status`` plus the approver stamp
(``approved_by``, ``approved_at``, ``approver_note``). Resolution goes through
``DataStore.update_if`` keyed on ``status == pending`` so two approvers racing
on the same request cannot both win.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from fastapi import HTTPException, status

from hr_portal.core.rbac import Role, is_hr
from hr_portal.models.workflow import RequestStatus
from hr_portal.repositories.data_store import DEPARTMENTS, EMPLOYEES, DataStore, iso_now

logger = logging.getLogger(__name__)


def new_request_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:10]}"


def pending_fields() -> dict[str, Any]:
    now = iso_now()
    return {
        "status": RequestStatus.PENDING,
        "approved_by": None,
        "approved_at": None,
        "approver_note": None,
        "created_at": now,
        "updated_at": now,
    }


def load_request(store: DataStore, collection: str, request_id: str, label: str) -> dict[str, Any]:
    row = store.get(collection, request_id)
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return row


def ensure_pending(row: dict[str, Any], label: str) -> None:
    if row["status"] != RequestStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{label} already resolved ({RequestStatus(row['status']).value})",
        )


def ensure_not_self(user: dict[str, Any], employee_id: str) -> None:
    if user.get("employee_id") and user["employee_id"] == employee_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You cannot decide your own request",
        )


def manages_employee(store: DataStore, user: dict[str, Any], employee_id: str) -> bool:
    """True when ``user`` is the employee's line manager or department head."""
    manager_employee_id = user.get("employee_id")
    if not manager_employee_id:
        return False
    employee = store.get(EMPLOYEES, employee_id)
    if not employee:
        return False
    if employee.get("manager_id") == manager_employee_id:
        return True
    department_id = employee.get("department_id")
    if not department_id:
        return False
    department = store.get(DEPARTMENTS, department_id)
    return bool(department and department.get("head_id") == manager_employee_id)


def ensure_can_decide(store: DataStore, user: dict[str, Any], employee_id: str) -> None:
    ensure_not_self(user, employee_id)
    if is_hr(user["role"]):
        return
    if user["role"] == Role.MANAGER and manages_employee(store, user, employee_id):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Only the employee's manager or HR can decide this request",
    )


def resolve_pending(
    store: DataStore,
    collection: str,
    request_id: str,
    *,
    approve: bool,
    approver_id: str,
    note: str | None,
    label: str,
    extra_changes: dict[str, Any] | None = None,
) -> dict[str, Any]:
    now = iso_now()
    changes = {
        "status": RequestStatus.APPROVED if approve else RequestStatus.REJECTED,
        "approved_by": approver_id,
        "approved_at": now,
        "approver_note": note,
        "updated_at": now,
        **(extra_changes or {}),
    }
    row = store.update_if(collection, request_id, {"status": RequestStatus.PENDING}, changes)
    if row is not None:
        return row

    if not store.exists(collection, request_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    logger.warning("Conflicting resolution of %s %s by %s", label, request_id, approver_id)
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{label} already resolved")
