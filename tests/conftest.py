"""Shared fixtures for AidBridge tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from aidbridge.application.use_cases.chat import ChatUseCase
from aidbridge.config import Settings
from aidbridge.domain.models import DonatedItem, NewItem, NewUser, User, UserType
from aidbridge.main import create_app
from aidbridge.services.entity_store import EntityStore
from aidbridge.services.seed_data import seeded_store


def pytest_configure(config):
    """Set pytest-asyncio mode to auto so async test functions work without markers."""
    config.option.asyncio_mode = "auto"


@pytest.fixture()
def test_settings() -> Settings:
    """Settings that never read a real .env and never reach Azure."""
    return Settings(
        _env_file=None,
        azure_openai_api_key="",
        azure_openai_endpoint="",
        jwt_secret="test-secret-test-secret-test-secret",
        seed_sample_data=True,
    )


@pytest.fixture()
def store() -> EntityStore:
    return EntityStore()


@pytest.fixture()
def sample_store() -> EntityStore:
    return seeded_store()


@pytest.fixture()
def donor(store: EntityStore) -> User:
    return store.add_user(NewUser(email="jane@example.com", full_name="Jane", user_type=UserType.DONOR))


@pytest.fixture()
def ngo(store: EntityStore) -> User:
    return store.add_user(
        NewUser(
            email="contact@goodcause.org",
            full_name="GoodCause NGO",
            user_type=UserType.NGO,
            ngo_verification_id="NGO-1",
        )
    )


@pytest.fixture()
def item(store: EntityStore, donor: User) -> DonatedItem:
    return store.add_item(
        NewItem(
            donor_id=donor.user_id,
            item_name="Winter Coat",
            description="Warm coat, size L.",
            category="Clothing",
            image_url="https://picsum.photos/seed/coat/400/300",
        )
    )


@pytest.fixture()
def oracle() -> AsyncMock:
    """A mock reply oracle returning a canned answer."""
    mock = AsyncMock()
    mock.generate_reply.return_value = "Sure, pickup on Saturday works."
    return mock


@pytest.fixture()
def chat_use_case(store: EntityStore, oracle: AsyncMock) -> ChatUseCase:
    return ChatUseCase(store=store, oracle=oracle)


@pytest.fixture()
def client(test_settings: Settings, oracle: AsyncMock):
    """TestClient over the seeded app with the reply oracle mocked out."""
    app = create_app(test_settings)
    with TestClient(app) as c:
        app.state.chat_uc = ChatUseCase(store=app.state.store, oracle=oracle)
        yield c


@pytest.fixture()
def login_as(client: TestClient):
    """Return a helper that logs in by email and yields the auth header."""

    def _login(email: str) -> dict[str, str]:
        response = client.post("/auth/login", json={"email": email, "password": "password"})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
