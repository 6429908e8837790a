from fastapi import APIRouter, Depends

from hr_portal.api.deps import get_current_user
from hr_portal.models.chat import (
    ChatTokenRequest,
    ChatTokenResponse,
    CreateChatRequest,
    CreateChatResponse,
)
from hr_portal.services.container import chat_service


router = APIRouter(prefix="/api/stream", tags=["Chat"])


@router.post("/token", response_model=ChatTokenResponse)
def issue_chat_token(
    payload: ChatTokenRequest,
    current_user: dict = Depends(get_current_user),
) -> ChatTokenResponse:
    return chat_service.issue_token(current_user, payload)


@router.post("/create-chat", response_model=CreateChatResponse)
def create_chat(
    payload: CreateChatRequest,
    current_user: dict = Depends(get_current_user),
) -> CreateChatResponse:
    return chat_service.create_chat(current_user, payload)


@router.post("/create-user")
def create_chat_user(
    payload: ChatTokenRequest,
    current_user: dict = Depends(get_current_user),
) -> dict[str, bool]:
    return chat_service.upsert_user(current_user, payload)
