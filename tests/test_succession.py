import pytest
from fastapi import HTTPException

from hr_portal.models.employee import EmployeeStatus
from hr_portal.models.succession import (
    SuccessionChoice,
    SuccessionDecision,
    SuccessionReason,
    SuccessionStatus,
)
from hr_portal.repositories.data_store import DEPARTMENTS, EMPLOYEES
from hr_portal.services import container


def test_deactivating_head_opens_ticket_without_changes(actor, store):
    before_department = store.get(DEPARTMENTS, "dept-eng")
    before_head = store.get(EMPLOYEES, "emp-mgr-001")

    result = container.succession_service.deactivate_employee(actor("u-hr-001"), "emp-mgr-001")

    ticket = result.succession
    assert ticket is not None
    assert ticket.reason == SuccessionReason.DEACTIVATION
    assert ticket.status == SuccessionStatus.PENDING
    assert ticket.deputy.employee_id == "emp-dep-001"
    assert {c.employee_id for c in ticket.candidates} == {"emp-emp-002", "emp-emp-003"}
    assert store.get(DEPARTMENTS, "dept-eng") == before_department
    assert store.get(EMPLOYEES, "emp-mgr-001") == before_head


def test_resolve_with_deputy(actor, store):
    ticket = container.succession_service.deactivate_employee(actor("u-hr-001"), "emp-mgr-001").succession

    resolved = container.succession_service.resolve(
        actor("u-hr-001"), ticket.ticket_id, SuccessionDecision(decision=SuccessionChoice.DEPUTY)
    )

    assert resolved.status == SuccessionStatus.RESOLVED
    assert resolved.new_head_id == "emp-dep-001"
    department = store.get(DEPARTMENTS, "dept-eng")
    assert department["head_id"] == "emp-dep-001"
    assert department["deputy_head_id"] is None
    new_head = store.get(EMPLOYEES, "emp-dep-001")
    assert new_head["is_manager"] is True
    assert new_head["position"] == "Department Head"
    outgoing = store.get(EMPLOYEES, "emp-mgr-001")
    assert outgoing["status"] == EmployeeStatus.INACTIVE
    assert outgoing["is_manager"] is False
    assert store.get(EMPLOYEES, "emp-emp-002")["manager_id"] == "emp-dep-001"
    assert container.role_service.current_entry("emp-mgr-001") is None


def test_resolve_with_replacement(actor, store):
    ticket = container.succession_service.open_reassignment(actor("u-hr-001"), "dept-eng")

    container.succession_service.resolve(
        actor("u-hr-001"),
        ticket.ticket_id,
        SuccessionDecision(
            decision=SuccessionChoice.REPLACEMENT,
            replacement_id="emp-emp-003",
            outgoing_role_id="role-eng-sr",
        ),
    )

    department = store.get(DEPARTMENTS, "dept-eng")
    assert department["head_id"] == "emp-emp-003"
    assert department["deputy_head_id"] == "emp-dep-001"
    outgoing = store.get(EMPLOYEES, "emp-mgr-001")
    assert outgoing["status"] == EmployeeStatus.ACTIVE
    assert outgoing["position"] == "Employee"
    assert outgoing["manager_id"] == "emp-emp-003"
    assert outgoing["role_id"] == "role-eng-sr"


def test_replacement_must_be_eligible(actor, store):
    ticket = container.succession_service.open_reassignment(actor("u-hr-001"), "dept-eng")
    with pytest.raises(HTTPException) as exc_info:
        container.succession_service.resolve(
            actor("u-hr-001"),
            ticket.ticket_id,
            SuccessionDecision(decision=SuccessionChoice.REPLACEMENT, replacement_id="emp-hr-001"),
        )
    assert exc_info.value.status_code == 400
    assert store.get(DEPARTMENTS, "dept-eng")["head_id"] == "emp-mgr-001"


def test_cancel_leaves_records_unchanged(actor, store):
    before = store.snapshot()
    ticket = container.succession_service.transfer_employee(actor("u-hr-001"), "emp-mgr-001", "dept-people").succession

    cancelled = container.succession_service.cancel(actor("u-hr-001"), ticket.ticket_id)

    assert cancelled.status == SuccessionStatus.CANCELLED
    after = store.snapshot()
    assert after[DEPARTMENTS] == before[DEPARTMENTS]
    assert after[EMPLOYEES] == before[EMPLOYEES]

    with pytest.raises(HTTPException) as exc_info:
        container.succession_service.resolve(
            actor("u-hr-001"), ticket.ticket_id, SuccessionDecision(decision=SuccessionChoice.DEPUTY)
        )
    assert exc_info.value.status_code == 409


def test_transfer_resolution_moves_outgoing_head(actor, store):
    ticket = container.succession_service.transfer_employee(actor("u-hr-001"), "emp-mgr-001", "dept-people").succession
    container.succession_service.resolve(
        actor("u-hr-001"), ticket.ticket_id, SuccessionDecision(decision=SuccessionChoice.DEPUTY)
    )
    moved = store.get(EMPLOYEES, "emp-mgr-001")
    assert moved["department_id"] == "dept-people"
    assert moved["manager_id"] == "emp-hr-001"
    assert moved["position"] == "Employee"


def test_only_one_open_ticket_per_department(actor):
    container.succession_service.open_reassignment(actor("u-hr-001"), "dept-eng")
    with pytest.raises(HTTPException) as exc_info:
        container.succession_service.open_reassignment(actor("u-hr-001"), "dept-eng")
    assert exc_info.value.status_code == 409


def test_deactivating_regular_employee_is_immediate(actor, store):
    result = container.succession_service.deactivate_employee(actor("u-mgr-001"), "emp-emp-003")
    assert result.succession is None
    assert result.employee.status == EmployeeStatus.INACTIVE

    with pytest.raises(HTTPException) as exc_info:
        container.succession_service.deactivate_employee(actor("u-hr-001"), "emp-emp-003")
    assert exc_info.value.status_code == 409


def test_deactivating_deputy_clears_slot(actor, store):
    container.succession_service.deactivate_employee(actor("u-hr-001"), "emp-dep-001")
    assert store.get(DEPARTMENTS, "dept-eng")["deputy_head_id"] is None


def test_manager_cannot_open_succession(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.succession_service.open_reassignment(actor("u-mgr-001"), "dept-eng")
    assert exc_info.value.status_code == 403


def test_succession_api(client, auth_headers):
    opened = client.post("/departments/dept-eng/succession", headers=auth_headers("u-hr-001"))
    assert opened.status_code == 201
    ticket_id = opened.json()["ticket_id"]

    fetched = client.get(f"/successions/{ticket_id}", headers=auth_headers("u-hr-001"))
    assert fetched.json()["deputy"]["employee_id"] == "emp-dep-001"

    resolved = client.post(
        f"/successions/{ticket_id}/resolve",
        json={"decision": "replacement"},
        headers=auth_headers("u-hr-001"),
    )
    assert resolved.status_code == 422


def test_deputy_from_another_department_cannot_take_over(actor, store):
    store.update(DEPARTMENTS, "dept-eng", {"deputy_head_id": "emp-hr-001"})
    ticket = container.succession_service.deactivate_employee(actor("u-hr-001"), "emp-mgr-001").succession

    with pytest.raises(HTTPException) as exc_info:
        container.succession_service.resolve(
            actor("u-admin-001"), ticket.ticket_id, SuccessionDecision(decision=SuccessionChoice.DEPUTY)
        )

    assert exc_info.value.status_code == 400
    assert store.get(DEPARTMENTS, "dept-eng")["head_id"] == "emp-mgr-001"
    assert [d["department_id"] for d in store.find(DEPARTMENTS, head_id="emp-hr-001")] == ["dept-people"]
    assert store.get(EMPLOYEES, "emp-mgr-001")["status"] == EmployeeStatus.ACTIVE


def test_deactivation_refuses_outgoing_role(actor, store):
    ticket = container.succession_service.deactivate_employee(actor("u-hr-001"), "emp-mgr-001").succession

    with pytest.raises(HTTPException) as exc_info:
        container.succession_service.resolve(
            actor("u-hr-001"),
            ticket.ticket_id,
            SuccessionDecision(decision=SuccessionChoice.DEPUTY, outgoing_role_id="role-eng"),
        )

    assert exc_info.value.status_code == 400
    assert store.get(DEPARTMENTS, "dept-eng")["head_id"] == "emp-mgr-001"
    assert container.succession_service.get_ticket(actor("u-hr-001"), ticket.ticket_id).status == (
        SuccessionStatus.PENDING
    )
