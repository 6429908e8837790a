from typing import Optional

from pydantic import BaseModel, Field


class ChatUser(BaseModel):
    id: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=254)
    name: Optional[str] = None
    image: Optional[str] = None
    position: Optional[str] = None


class ChatTokenRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=254)
    name: Optional[str] = None
    image: Optional[str] = None


class ChatTokenResponse(BaseModel):
    token: str


class CreateChatRequest(BaseModel):
    current_user: ChatUser
    other_user: ChatUser


class CreateChatResponse(BaseModel):
    success: bool = True
    channel_id: str
