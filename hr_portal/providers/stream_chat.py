"""Stream Chat server-side REST client."""

import logging
from typing import Any

import httpx

from hr_portal.core.security import create_chat_server_token, create_chat_user_token

logger = logging.getLogger(__name__)


class ChatServiceError(RuntimeError):
    """Raised when the chat service rejects a call or cannot be reached."""


class StreamChatClient:
    """Minimal client for the Stream Chat REST API."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = "https://chat.stream-io-api.com",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Public API key of the chat application
            api_secret: API secret used to sign server and user tokens
            base_url: REST endpoint of the chat service
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, used to stub the service
        """
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.api_secret)

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": create_chat_server_token(self.api_secret),
            "stream-auth-type": "jwt",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
                response = client.request(
                    method,
                    path,
                    params={"api_key": self.api_key},
                    headers=self._get_headers(),
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.error("Chat service request %s %s failed: %s", method, path, exc)
            raise ChatServiceError(f"Chat service unreachable: {exc}") from exc

        if response.status_code >= 400:
            logger.error("Chat service returned %s for %s %s: %s", response.status_code, method, path, response.text)
            raise ChatServiceError(f"Chat service returned HTTP {response.status_code}")
        return response.json() if response.content else {}

    def create_token(self, user_id: str) -> str:
        return create_chat_user_token(user_id, self.api_secret)

    def upsert_users(self, users: list[dict[str, Any]]) -> dict[str, Any]:
        """Create or update chat users.

        Args:
            users: Dicts with at least ``id``; ``None`` values are dropped

        Returns:
            Service response with the stored users
        """
        body = {
            "users": {
                user["id"]: {key: value for key, value in user.items() if value is not None}
                for user in users
            }
        }
        return self._request("POST", "/users", body)

    def get_or_create_channel(
        self,
        channel_type: str,
        channel_id: str,
        members: list[str],
        created_by_id: str,
    ) -> dict[str, Any]:
        body = {
            "data": {"members": members, "created_by_id": created_by_id},
            "state": False,
            "watch": False,
            "presence": False,
        }
        return self._request("POST", f"/channels/{channel_type}/{channel_id}/query", body)
