from __future__ import annotations

from typing import Any

from fastapi import HTTPException

from hr_portal.models.chat import (
    ChatTokenRequest,
    ChatTokenResponse,
    ChatUser,
    CreateChatRequest,
    CreateChatResponse,
)
from hr_portal.providers.stream_chat import ChatServiceError, StreamChatClient
from hr_portal.services.analytics_service import EventLogger

CHANNEL_TYPE = "messaging"
CHANNEL_PREFIX = "chat_"


def derive_channel_id(user_a: str, user_b: str) -> str:
    """Direct-message channel id for a pair of users, independent of order."""
    first, second = sorted((user_a, user_b))
    return f"{CHANNEL_PREFIX}{first}_{second}"


def default_display_name(email: str) -> str:
    return email.split("@")[0]


class ChatService:
    def __init__(self, client: StreamChatClient, event_logger: EventLogger) -> None:
        self.client = client
        self.event_logger = event_logger

    def _ensure_configured(self) -> None:
        if not self.client.configured:
            raise HTTPException(status_code=503, detail="Chat service is not configured")

    @staticmethod
    def _ensure_self(actor: dict[str, Any], user_id: str) -> None:
        if actor["user_id"] != user_id:
            raise HTTPException(status_code=403, detail="You can only act as your own chat user")

    @staticmethod
    def _chat_profile(user: ChatUser | ChatTokenRequest) -> dict[str, Any]:
        user_id = user.id if isinstance(user, ChatUser) else user.user_id
        profile = {
            "id": user_id,
            "email": user.email,
            "name": user.name or default_display_name(user.email),
            "image": user.image,
        }
        if isinstance(user, ChatUser):
            profile["position"] = user.position
        return profile

    def issue_token(self, actor: dict[str, Any], payload: ChatTokenRequest) -> ChatTokenResponse:
        self._ensure_configured()
        self._ensure_self(actor, payload.user_id)
        try:
            self.client.upsert_users([self._chat_profile(payload)])
        except ChatServiceError as exc:
            raise HTTPException(status_code=502, detail="Failed to generate token") from exc

        return ChatTokenResponse(token=self.client.create_token(payload.user_id))

    def upsert_user(self, actor: dict[str, Any], payload: ChatTokenRequest) -> dict[str, bool]:
        self._ensure_configured()
        self._ensure_self(actor, payload.user_id)
        try:
            self.client.upsert_users([self._chat_profile(payload)])
        except ChatServiceError as exc:
            raise HTTPException(status_code=502, detail="Error creating chat user") from exc
        return {"success": True}

    def create_chat(self, actor: dict[str, Any], payload: CreateChatRequest) -> CreateChatResponse:
        self._ensure_configured()
        self._ensure_self(actor, payload.current_user.id)
        if payload.current_user.id == payload.other_user.id:
            raise HTTPException(status_code=400, detail="A chat needs two different users")

        channel_id = derive_channel_id(payload.current_user.id, payload.other_user.id)
        try:
            self.client.upsert_users(
                [self._chat_profile(payload.current_user), self._chat_profile(payload.other_user)]
            )
            self.client.get_or_create_channel(
                CHANNEL_TYPE,
                channel_id,
                members=[payload.current_user.id, payload.other_user.id],
                created_by_id=payload.current_user.id,
            )
        except ChatServiceError as exc:
            raise HTTPException(status_code=502, detail="Failed to create chat") from exc

        self.event_logger.log_event(
            event_type="chat_event",
            actor_id=actor["user_id"],
            actor_role=actor["role"],
            details={"action": "chat_created", "channel_id": channel_id},
        )
        return CreateChatResponse(channel_id=channel_id)
