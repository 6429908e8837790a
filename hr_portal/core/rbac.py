from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from fastapi import HTTPException, status


class Role(str, Enum):
    HR0 = "HR0"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class UnknownRoleError(ValueError):
    def __init__(self, role: Any) -> None:
        super().__init__(f"Unknown role: {role!r}")
        self.role = role


@dataclass(frozen=True)
class UserPermissions:
    can_create_users: bool
    can_manage_employees: bool
    can_manage_departments: bool
    can_view_salaries: bool
    can_edit_salaries: bool
    can_manage_roles: bool

    def allows(self, capability: str) -> bool:
        if capability not in CAPABILITIES:
            raise ValueError(f"Unknown capability: {capability}")
        return bool(getattr(self, capability))

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)


CAPABILITIES: frozenset[str] = frozenset(UserPermissions.__dataclass_fields__)

ROLE_PERMISSIONS: dict[Role, UserPermissions] = {
    Role.HR0: UserPermissions(
        can_create_users=True,
        can_manage_employees=True,
        can_manage_departments=True,
        can_view_salaries=True,
        can_edit_salaries=True,
        can_manage_roles=True,
    ),
    Role.HR: UserPermissions(
        can_create_users=False,
        can_manage_employees=True,
        can_manage_departments=True,
        can_view_salaries=True,
        can_edit_salaries=True,
        can_manage_roles=False,
    ),
    Role.MANAGER: UserPermissions(
        can_create_users=False,
        can_manage_employees=True,
        can_manage_departments=False,
        can_view_salaries=True,
        can_edit_salaries=False,
        can_manage_roles=False,
    ),
    Role.EMPLOYEE: UserPermissions(
        can_create_users=False,
        can_manage_employees=False,
        can_manage_departments=False,
        can_view_salaries=False,
        can_edit_salaries=False,
        can_manage_roles=False,
    ),
}

HR_ROLES: frozenset[Role] = frozenset({Role.HR0, Role.HR})


def parse_role(role: Any) -> Role:
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError as exc:
        raise UnknownRoleError(role) from exc


def permissions_for(role: Any) -> UserPermissions:
    return ROLE_PERMISSIONS[parse_role(role)]


def has_permission(role: Any, capability: str) -> bool:
    try:
        return permissions_for(role).allows(capability)
    except UnknownRoleError:
        return False


def is_hr(role: Any) -> bool:
    try:
        return parse_role(role) in HR_ROLES
    except UnknownRoleError:
        return False


def ensure_permission(user: dict[str, Any], capability: str) -> None:
    """Reject ``user`` unless their stored role grants ``capability``."""
    if not has_permission(user.get("role"), capability):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient permissions: {capability} required",
        )
