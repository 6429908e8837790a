from __future__ import annotations

from typing import Any

from hr_portal.core.rbac import Role
from hr_portal.core.security import hash_password
from hr_portal.models.employee import EmployeeStatus
from hr_portal.repositories.data_store import (
    DEPARTMENTS,
    EMPLOYEES,
    ROLE_HISTORY,
    ROLES,
    USERS,
    DataStore,
    iso_now,
)

DEMO_DEPARTMENTS = [
    {
        "department_id": "dept-eng",
        "name": "Engineering",
        "description": "Product engineering",
        "head_id": "emp-mgr-001",
        "deputy_head_id": "emp-dep-001",
    },
    {
        "department_id": "dept-people",
        "name": "People Operations",
        "description": "HR and people programs",
        "head_id": "emp-hr-001",
        "deputy_head_id": None,
    },
]

DEMO_ROLES = [
    {"role_id": "role-eng-mgr", "title": "Engineering Manager", "level": 4, "base_salary": 145000.0, "department_id": "dept-eng"},
    {"role_id": "role-eng-sr", "title": "Senior Engineer", "level": 3, "base_salary": 125000.0, "department_id": "dept-eng"},
    {"role_id": "role-eng", "title": "Software Engineer", "level": 2, "base_salary": 98000.0, "department_id": "dept-eng"},
    {"role_id": "role-hr-partner", "title": "HR Partner", "level": 3, "base_salary": 90000.0, "department_id": "dept-people"},
]

DEMO_EMPLOYEES = [
    {
        "employee_id": "emp-hr-001",
        "first_name": "Avery",
        "last_name": "Jordan",
        "email": "avery.jordan@example.com",
        "position": "Department Head",
        "department_id": "dept-people",
        "role_id": "role-hr-partner",
        "manager_id": None,
        "salary": 96000.0,
        "is_manager": True,
    },
    {
        "employee_id": "emp-mgr-001",
        "first_name": "Jane",
        "last_name": "Rivera",
        "email": "jane.rivera@example.com",
        "position": "Department Head",
        "department_id": "dept-eng",
        "role_id": "role-eng-mgr",
        "manager_id": None,
        "salary": 150000.0,
        "is_manager": True,
    },
    {
        "employee_id": "emp-dep-001",
        "first_name": "Alex",
        "last_name": "Kim",
        "email": "alex.kim@example.com",
        "position": "Employee",
        "department_id": "dept-eng",
        "role_id": "role-eng-sr",
        "manager_id": "emp-mgr-001",
        "salary": 128000.0,
        "is_manager": False,
    },
    {
        "employee_id": "emp-emp-002",
        "first_name": "Sam",
        "last_name": "Patel",
        "email": "sam.patel@example.com",
        "position": "Employee",
        "department_id": "dept-eng",
        "role_id": "role-eng",
        "manager_id": "emp-mgr-001",
        "salary": 99000.0,
        "is_manager": False,
    },
    {
        "employee_id": "emp-emp-003",
        "first_name": "Riley",
        "last_name": "Chen",
        "email": "riley.chen@example.com",
        "position": "Employee",
        "department_id": "dept-eng",
        "role_id": "role-eng",
        "manager_id": "emp-mgr-001",
        "salary": 97000.0,
        "is_manager": False,
    },
]

DEMO_USERS = [
    {
        "user_id": "u-admin-001",
        "email": "admin@example.com",
        "display_name": "Portal Administrator",
        "role": Role.HR0,
        "employee_id": None,
        "password": "admin123",
    },
    {
        "user_id": "u-hr-001",
        "email": "avery.jordan@example.com",
        "display_name": "Avery Jordan",
        "role": Role.HR,
        "employee_id": "emp-hr-001",
        "password": "hr123",
    },
    {
        "user_id": "u-mgr-001",
        "email": "jane.rivera@example.com",
        "display_name": "Jane Rivera",
        "role": Role.MANAGER,
        "employee_id": "emp-mgr-001",
        "password": "manager123",
    },
    {
        "user_id": "u-emp-001",
        "email": "alex.kim@example.com",
        "display_name": "Alex Kim",
        "role": Role.EMPLOYEE,
        "employee_id": "emp-dep-001",
        "password": "employee123",
    },
    {
        "user_id": "u-emp-002",
        "email": "sam.patel@example.com",
        "display_name": "Sam Patel",
        "role": Role.EMPLOYEE,
        "employee_id": "emp-emp-002",
        "password": "employee456",
    },
]


def seed_demo_data(store: DataStore) -> None:
    """Load the demo organisation into an empty store."""
    with store.lock:
        if store.all(USERS):
            return

        now = iso_now()
        stamps: dict[str, Any] = {"created_at": now, "updated_at": now}

        for department in DEMO_DEPARTMENTS:
            store.insert(DEPARTMENTS, department["department_id"], {**department, **stamps})
        for role in DEMO_ROLES:
            store.insert(ROLES, role["role_id"], {**role, **stamps})

        for employee in DEMO_EMPLOYEES:
            store.insert(
                EMPLOYEES,
                employee["employee_id"],
                {**employee, "status": EmployeeStatus.ACTIVE, **stamps},
            )
            history_id = f"rh-seed-{employee['employee_id']}"
            store.insert(
                ROLE_HISTORY,
                history_id,
                {
                    "history_id": history_id,
                    "employee_id": employee["employee_id"],
                    "role_id": employee["role_id"],
                    "salary": employee["salary"],
                    "effective_from": now,
                    "effective_to": None,
                    "promotion_notes": "Initial role",
                    **stamps,
                },
            )

        for user in DEMO_USERS:
            record = {**user, "hashed_password": hash_password(user["password"]), "last_login_at": None, **stamps}
            del record["password"]
            store.insert(USERS, record["user_id"], record)
