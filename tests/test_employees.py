import pytest
from fastapi import HTTPException

from hr_portal.models.employee import DepartmentCreate, EmployeeCreate, EmployeeStatus, EmployeeUpdate
from hr_portal.repositories.data_store import DEPARTMENTS, EMPLOYEES
from hr_portal.services import container


def test_create_employee_with_role_opens_history(actor):
    created = container.employee_service.create_employee(
        actor("u-hr-001"),
        EmployeeCreate(
            first_name="Morgan",
            last_name="Lee",
            email="Morgan.Lee@example.com",
            department_id="dept-eng",
            role_id="role-eng",
            salary=95000,
        ),
    )
    assert created.email == "morgan.lee@example.com"
    assert created.role_id == "role-eng"
    assert container.role_service.current_entry(created.employee_id)["salary"] == 95000


def test_duplicate_employee_email_conflicts(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.employee_service.create_employee(
            actor("u-hr-001"),
            EmployeeCreate(first_name="Sam", last_name="Patel", email="sam.patel@example.com"),
        )
    assert exc_info.value.status_code == 409


def test_manager_cannot_set_salary(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.employee_service.create_employee(
            actor("u-mgr-001"),
            EmployeeCreate(first_name="Kai", last_name="Ng", email="kai@example.com", department_id="dept-eng", salary=1),
        )
    assert exc_info.value.status_code == 403


def test_status_inactive_goes_through_deactivation(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.employee_service.update_employee(
            actor("u-hr-001"), "emp-emp-002", EmployeeUpdate(status=EmployeeStatus.INACTIVE)
        )
    assert exc_info.value.status_code == 400


def test_department_head_cannot_head_twice(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.department_service.create_department(
            actor("u-hr-001"), DepartmentCreate(name="Platform", head_id="emp-mgr-001")
        )
    assert exc_info.value.status_code == 409


def test_new_department_promotes_head(actor, store):
    department = container.department_service.create_department(
        actor("u-hr-001"), DepartmentCreate(name="Platform", head_id="emp-emp-003")
    )
    head = container.employee_service.get_employee(actor("u-hr-001"), "emp-emp-003")
    assert head.department_id == department.department_id
    assert head.is_manager is True
    assert head.position == "Department Head"


def test_deputy_must_differ_from_head(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.department_service.set_deputy(actor("u-hr-001"), "dept-eng", "emp-mgr-001")
    assert exc_info.value.status_code == 400

    with pytest.raises(ValueError):
        DepartmentCreate(name="Ops", head_id="emp-1", deputy_head_id="emp-1")


def test_deputy_must_belong_to_department(actor):
    with pytest.raises(HTTPException) as exc_info:
        container.department_service.set_deputy(actor("u-hr-001"), "dept-people", "emp-emp-002")
    assert exc_info.value.status_code == 400

    updated = container.department_service.set_deputy(actor("u-hr-001"), "dept-eng", "emp-emp-002")
    assert updated.deputy_head_id == "emp-emp-002"


def test_notifications_mark_read(client, auth_headers):
    client.post(
        "/leave",
        json={"leave_type": "casual", "start_date": "2030-10-01", "end_date": "2030-10-01", "reason": "Moving"},
        headers=auth_headers("u-emp-002"),
    )
    listed = client.get("/notifications?unread_only=true", headers=auth_headers("u-mgr-001")).json()
    assert len(listed) == 1

    read = client.post(f"/notifications/{listed[0]['notification_id']}/read", headers=auth_headers("u-mgr-001"))
    assert read.json()["read"] is True
    assert client.get("/notifications?unread_only=true", headers=auth_headers("u-mgr-001")).json() == []

    other = client.post(f"/notifications/{listed[0]['notification_id']}/read", headers=auth_headers("u-emp-002"))
    assert other.status_code == 404


def test_transfer_api_for_regular_employee(client, auth_headers):
    response = client.post(
        "/employees/emp-emp-003/transfer",
        json={"department_id": "dept-people"},
        headers=auth_headers("u-hr-001"),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["succession"] is None
    assert body["employee"]["department_id"] == "dept-people"
    assert body["employee"]["manager_id"] == "emp-hr-001"


def test_deputy_elsewhere_cannot_head_new_department(actor, store):
    with pytest.raises(HTTPException) as exc_info:
        container.department_service.create_department(
            actor("u-admin-001"), DepartmentCreate(name="Platform", head_id="emp-dep-001")
        )
    assert exc_info.value.status_code == 409
    assert store.get(DEPARTMENTS, "dept-eng")["deputy_head_id"] == "emp-dep-001"
    assert store.get(EMPLOYEES, "emp-dep-001")["department_id"] == "dept-eng"


def test_new_department_takes_deputy_from_old_slot(actor, store):
    department = container.department_service.create_department(
        actor("u-admin-001"),
        DepartmentCreate(name="Platform", head_id="emp-emp-003", deputy_head_id="emp-dep-001"),
    )
    assert store.get(DEPARTMENTS, "dept-eng")["deputy_head_id"] is None
    assert store.get(EMPLOYEES, "emp-dep-001")["department_id"] == department.department_id


def test_head_cannot_go_on_leave_without_handover(actor, store):
    with pytest.raises(HTTPException) as exc_info:
        container.employee_service.update_employee(
            actor("u-hr-001"), "emp-mgr-001", EmployeeUpdate(status=EmployeeStatus.ON_LEAVE)
        )
    assert exc_info.value.status_code == 409
    assert store.get(EMPLOYEES, "emp-mgr-001")["status"] == EmployeeStatus.ACTIVE

    updated = container.employee_service.update_employee(
        actor("u-hr-001"), "emp-emp-003", EmployeeUpdate(status=EmployeeStatus.ON_LEAVE)
    )
    assert updated.status == EmployeeStatus.ON_LEAVE
