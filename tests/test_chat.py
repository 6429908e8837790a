import json

import httpx
import pytest
from fastapi import HTTPException
from jose import jwt

from hr_portal.models.chat import ChatTokenRequest, ChatUser, CreateChatRequest
from hr_portal.providers.stream_chat import StreamChatClient
from hr_portal.services import container
from hr_portal.services.chat_service import ChatService, default_display_name, derive_channel_id


class RecordingTransport:
    def __init__(self, status_code: int = 201):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"ok": True})


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def chat_service(transport):
    client = StreamChatClient(
        api_key="test-key",
        api_secret="test-secret",
        base_url="https://chat.example.test",
        transport=httpx.MockTransport(transport),
    )
    return ChatService(client=client, event_logger=container.event_logger)


def test_channel_id_is_order_independent():
    assert derive_channel_id("u-b", "u-a") == "chat_u-a_u-b"
    assert derive_channel_id("u-a", "u-b") == derive_channel_id("u-b", "u-a")


def test_default_display_name():
    assert default_display_name("sam.patel@example.com") == "sam.patel"


def test_issue_token_upserts_user_and_signs_token(chat_service, transport, actor):
    response = chat_service.issue_token(
        actor("u-emp-002"), ChatTokenRequest(user_id="u-emp-002", email="sam.patel@example.com")
    )

    assert jwt.decode(response.token, "test-secret", algorithms=["HS256"]) == {"user_id": "u-emp-002"}
    request = transport.requests[0]
    assert request.url.path == "/users"
    assert request.url.params["api_key"] == "test-key"
    body = json.loads(request.content)
    assert body["users"]["u-emp-002"]["name"] == "sam.patel"
    assert "image" not in body["users"]["u-emp-002"]


def test_create_chat_uses_derived_channel(chat_service, transport, actor):
    payload = CreateChatRequest(
        current_user=ChatUser(id="u-emp-002", email="sam.patel@example.com"),
        other_user=ChatUser(id="u-mgr-001", email="jane.rivera@example.com", name="Jane Rivera"),
    )

    response = chat_service.create_chat(actor("u-emp-002"), payload)

    assert response.success is True
    assert response.channel_id == "chat_u-emp-002_u-mgr-001"
    channel_request = transport.requests[-1]
    assert channel_request.url.path == "/channels/messaging/chat_u-emp-002_u-mgr-001/query"
    assert json.loads(channel_request.content)["data"]["members"] == ["u-emp-002", "u-mgr-001"]


def test_cannot_act_as_another_user(chat_service, actor):
    with pytest.raises(HTTPException) as exc_info:
        chat_service.issue_token(actor("u-emp-002"), ChatTokenRequest(user_id="u-mgr-001", email="jane.rivera@example.com"))
    assert exc_info.value.status_code == 403


def test_remote_failure_maps_to_502(actor):
    client = StreamChatClient(
        api_key="k",
        api_secret="s",
        transport=httpx.MockTransport(RecordingTransport(status_code=500)),
    )
    service = ChatService(client=client, event_logger=container.event_logger)
    with pytest.raises(HTTPException) as exc_info:
        service.upsert_user(actor("u-emp-002"), ChatTokenRequest(user_id="u-emp-002", email="sam.patel@example.com"))
    assert exc_info.value.status_code == 502


def test_unconfigured_chat_returns_503(client, auth_headers):
    response = client.post(
        "/api/stream/token",
        json={"user_id": "u-emp-002", "email": "sam.patel@example.com"},
        headers=auth_headers("u-emp-002"),
    )
    assert response.status_code == 503
