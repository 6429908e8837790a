from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from fastapi import HTTPException, status

from hr_portal.core.rbac import Role, ensure_permission, is_hr, permissions_for
from hr_portal.core.security import create_access_token, hash_password, verify_password
from hr_portal.models.auth import (
    PermissionsResponse,
    RoleUpdateRequest,
    Token,
    UserAccountCreate,
    UserPublic,
)
from hr_portal.repositories.data_store import EMPLOYEES, USERS, DataStore, iso_now
from hr_portal.services.analytics_service import EventLogger


class AuthService:
    def __init__(self, store: DataStore, event_logger: EventLogger) -> None:
        self.store = store
        self.event_logger = event_logger

    def find_by_email(self, email: str) -> dict[str, Any] | None:
        wanted = email.strip().lower()
        with self.store.lock:
            users = self.store.all(USERS)
        return next((u for u in users if u["email"].lower() == wanted), None)

    def authenticate(self, email: str, password: str) -> dict[str, Any] | None:
        user = self.find_by_email(email)
        if not user:
            return None
        if not verify_password(password, user["hashed_password"]):
            return None
        return self.store.update(USERS, user["user_id"], {"last_login_at": iso_now()})

    def issue_token(self, user: dict[str, Any]) -> Token:
        token, expires_at = create_access_token(
            user_id=user["user_id"],
            role=Role(user["role"]).value,
            employee_id=user.get("employee_id"),
        )
        self.event_logger.log_event(
            event_type="auth_login",
            actor_id=user["user_id"],
            actor_role=user["role"],
            details={"email": user["email"]},
        )
        return Token(access_token=token, expires_at=expires_at)

    def require_user(self, user_id: str) -> dict[str, Any]:
        user = self.store.get(USERS, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
            )
        return user

    def as_public(self, user: dict[str, Any]) -> UserPublic:
        last_login = user.get("last_login_at")
        return UserPublic(
            user_id=user["user_id"],
            email=user["email"],
            display_name=user["display_name"],
            role=user["role"],
            employee_id=user.get("employee_id"),
            created_at=datetime.fromisoformat(user["created_at"]),
            updated_at=datetime.fromisoformat(user["updated_at"]),
            last_login_at=datetime.fromisoformat(last_login) if last_login else None,
        )

    @staticmethod
    def permissions(role: Any) -> PermissionsResponse:
        return PermissionsResponse(role=role, **permissions_for(role).as_dict())

    def list_users(self, actor: dict[str, Any]) -> list[UserPublic]:
        if not is_hr(actor["role"]):
            raise HTTPException(status_code=403, detail="Only HR can list user accounts")
        users = sorted(self.store.all(USERS), key=lambda u: u["created_at"])
        return [self.as_public(u) for u in users]

    def create_user_account(self, actor: dict[str, Any], payload: UserAccountCreate) -> UserPublic:
        ensure_permission(actor, "can_create_users")

        with self.store.transaction():
            if self.find_by_email(payload.email):
                raise HTTPException(status_code=409, detail="An account with this email already exists")

            if payload.employee_id:
                if not self.store.exists(EMPLOYEES, payload.employee_id):
                    raise HTTPException(status_code=404, detail="Employee not found")
                if self.store.find(USERS, employee_id=payload.employee_id):
                    raise HTTPException(status_code=409, detail="Employee already has a user account")

            user_id = f"u-{uuid4().hex[:10]}"
            now = iso_now()
            row = self.store.insert(
                USERS,
                user_id,
                {
                    "user_id": user_id,
                    "email": payload.email.strip().lower(),
                    "display_name": payload.display_name,
                    "role": payload.role,
                    "employee_id": payload.employee_id,
                    "hashed_password": hash_password(payload.password),
                    "created_at": now,
                    "updated_at": now,
                    "last_login_at": None,
                },
            )

        self.event_logger.log_event(
            event_type="admin_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={"action": "user_created", "user_id": user_id, "role": payload.role.value},
        )
        return self.as_public(row)

    def update_user_role(
        self,
        actor: dict[str, Any],
        user_id: str,
        payload: RoleUpdateRequest,
    ) -> UserPublic:
        ensure_permission(actor, "can_create_users")
        if actor["user_id"] == user_id:
            raise HTTPException(status_code=400, detail="You cannot change your own role")

        target = self.store.get(USERS, user_id)
        if not target:
            raise HTTPException(status_code=404, detail="User not found")

        previous_role = target["role"]
        updated = self.store.update(USERS, user_id, {"role": payload.role, "updated_at": iso_now()})

        self.event_logger.log_event(
            event_type="admin_action",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={
                "action": "user_role_changed",
                "user_id": user_id,
                "from": previous_role,
                "to": payload.role.value,
            },
        )
        return self.as_public(updated)
