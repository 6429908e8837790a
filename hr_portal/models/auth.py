from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from hr_portal.core.rbac import Role


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class UserPublic(BaseModel):
    user_id: str
    email: str
    display_name: str
    role: Role
    employee_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None


class UserAccountCreate(BaseModel):
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=8, max_length=72)
    role: Role
    display_name: str = Field(min_length=1, max_length=120)
    employee_id: Optional[str] = None


class RoleUpdateRequest(BaseModel):
    role: Role


class PermissionsResponse(BaseModel):
    role: Role
    can_create_users: bool
    can_manage_employees: bool
    can_manage_departments: bool
    can_view_salaries: bool
    can_edit_salaries: bool
    can_manage_roles: bool
