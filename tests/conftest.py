from __future__ import annotations

import os
import tempfile

os.environ.setdefault("HR_PORTAL_DATA_DIR", tempfile.mkdtemp(prefix="hr-portal-tests-"))
os.environ["HR_PORTAL_SEED_DEMO_DATA"] = "true"
for _name in ("STREAM_API_KEY", "STREAM_API_SECRET", "SUPABASE_URL", "SUPABASE_SERVICE_KEY"):
    os.environ.pop(_name, None)

import pytest
from fastapi.testclient import TestClient

from hr_portal.main import app
from hr_portal.repositories.data_store import USERS
from hr_portal.services import container

SEED = container.store.snapshot()


@pytest.fixture(autouse=True)
def reset_store():
    container.store.restore(SEED)
    yield
    container.store.restore(SEED)


@pytest.fixture
def store():
    return container.store


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def actor():
    def _actor(user_id: str) -> dict:
        return container.store.get(USERS, user_id)

    return _actor


@pytest.fixture
def auth_headers(actor):
    def _headers(user_id: str) -> dict[str, str]:
        token = container.auth_service.issue_token(actor(user_id))
        return {"Authorization": f"Bearer {token.access_token}"}

    return _headers
