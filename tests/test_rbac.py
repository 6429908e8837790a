import pytest
from fastapi import HTTPException

from hr_portal.core.rbac import (
    CAPABILITIES,
    ROLE_PERMISSIONS,
    Role,
    UnknownRoleError,
    ensure_permission,
    has_permission,
    is_hr,
    permissions_for,
)


def test_hr0_holds_every_capability():
    perms = permissions_for("HR0")
    assert all(perms.as_dict().values())
    assert set(perms.as_dict()) == CAPABILITIES


def test_hr_cannot_create_users_or_manage_roles():
    perms = permissions_for(Role.HR)
    assert perms.can_manage_employees
    assert perms.can_edit_salaries
    assert not perms.can_create_users
    assert not perms.can_manage_roles


def test_manager_can_view_but_not_edit_salaries():
    assert has_permission("manager", "can_view_salaries")
    assert not has_permission("manager", "can_edit_salaries")
    assert not has_permission("manager", "can_manage_departments")


def test_employee_has_no_capabilities():
    assert not any(ROLE_PERMISSIONS[Role.EMPLOYEE].as_dict().values())


def test_unknown_role_is_rejected():
    with pytest.raises(UnknownRoleError):
        permissions_for("superuser")
    assert has_permission("superuser", "can_view_salaries") is False
    assert is_hr("superuser") is False


def test_unknown_capability_raises():
    with pytest.raises(ValueError):
        permissions_for(Role.HR0).allows("can_launch_rockets")


def test_ensure_permission_raises_403():
    with pytest.raises(HTTPException) as exc_info:
        ensure_permission({"role": Role.EMPLOYEE}, "can_manage_employees")
    assert exc_info.value.status_code == 403
    assert "can_manage_employees" in exc_info.value.detail


def test_is_hr_covers_both_hr_roles():
    assert is_hr("HR0")
    assert is_hr("hr")
    assert not is_hr("manager")
