from collections.abc import Callable
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from hr_portal.core.rbac import Role, ensure_permission
from hr_portal.core.security import decode_access_token
from hr_portal.services.container import auth_service


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

HR_STAFF = [Role.HR0, Role.HR]
APPROVERS = [Role.HR0, Role.HR, Role.MANAGER]


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str = Depends(oauth2_scheme)) -> dict[str, Any]:
    """Stored account behind the bearer token.

    Capabilities are always derived from the stored role; a token minted
    before the account's role changed is refused.
    """
    try:
        claims = decode_access_token(token)
    except ValueError as exc:
        raise _credentials_error() from exc

    user_id = claims.get("sub")
    if not user_id:
        raise _credentials_error()

    user = auth_service.require_user(user_id)
    if claims.get("role") != Role(user["role"]).value:
        raise _credentials_error("Role changed, sign in again")
    return user


def require_roles(allowed_roles: list[Role]) -> Callable[[dict[str, Any]], dict[str, Any]]:
    def dependency(user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
        if user["role"] not in allowed_roles:
            raise HTTPException(status_code=403, detail="Insufficient role permissions")
        return user

    return dependency


def require_permission(capability: str) -> Callable[[dict[str, Any]], dict[str, Any]]:
    def dependency(user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
        ensure_permission(user, capability)
        return user

    return dependency
