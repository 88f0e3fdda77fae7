import asyncio

import pytest
from fastapi.testclient import TestClient

from apps.backend.main import create_app
from tests.fakes import FakeSupabase

USER_ID = "user-123"
TOKEN = "good-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def sb():
    return FakeSupabase(users={TOKEN: USER_ID})


@pytest.fixture
def client(sb):
    return TestClient(create_app(sb))


@pytest.fixture
def anon_client():
    return TestClient(create_app(None))
