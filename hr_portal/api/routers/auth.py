from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from hr_portal.api.deps import HR_STAFF, get_current_user, require_permission, require_roles
from hr_portal.core.rbac import UnknownRoleError
from hr_portal.models.auth import (
    PermissionsResponse,
    RoleUpdateRequest,
    Token,
    UserAccountCreate,
    UserPublic,
)
from hr_portal.services.container import auth_service


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/token", response_model=Token)
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()) -> Token:
    user = auth_service.authenticate(form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_service.issue_token(user)


@router.get("/me", response_model=UserPublic)
def read_me(current_user: dict = Depends(get_current_user)) -> UserPublic:
    return auth_service.as_public(current_user)


@router.get("/me/permissions", response_model=PermissionsResponse)
def read_my_permissions(current_user: dict = Depends(get_current_user)) -> PermissionsResponse:
    return auth_service.permissions(current_user["role"])


@router.get("/roles/{role}/permissions", response_model=PermissionsResponse)
def read_role_permissions(
    role: str,
    current_user: dict = Depends(get_current_user),
) -> PermissionsResponse:
    _ = current_user
    try:
        return auth_service.permissions(role)
    except UnknownRoleError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/users", response_model=list[UserPublic])
def list_users(
    current_user: dict = Depends(require_roles(HR_STAFF)),
) -> list[UserPublic]:
    return auth_service.list_users(current_user)


@router.post("/users", response_model=UserPublic, status_code=201)
def create_user_account(
    payload: UserAccountCreate,
    current_user: dict = Depends(require_permission("can_create_users")),
) -> UserPublic:
    return auth_service.create_user_account(current_user, payload)


@router.patch("/users/{user_id}/role", response_model=UserPublic)
def update_user_role(
    user_id: str,
    payload: RoleUpdateRequest,
    current_user: dict = Depends(require_permission("can_create_users")),
) -> UserPublic:
    return auth_service.update_user_role(current_user, user_id, payload)
