from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from hr_portal.core.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    user_id: str,
    role: str,
    employee_id: str | None = None,
    expires_delta: timedelta | None = None,
) -> tuple[str, datetime]:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims: dict[str, Any] = {"sub": user_id, "role": role, "exp": expire}
    if employee_id:
        claims["employee_id"] = employee_id
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm), expire


def decode_access_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc


def create_chat_user_token(user_id: str, api_secret: str) -> str:
    """Client token accepted by the chat service for ``user_id``.

    The chat service verifies an HS256 JWT carrying only ``user_id`` and signed
    with the application's API secret. No expiry is set.
    """
    return jwt.encode({"user_id": user_id}, api_secret, algorithm="HS256")


def create_chat_server_token(api_secret: str) -> str:
    return jwt.encode({"server": True}, api_secret, algorithm="HS256")
