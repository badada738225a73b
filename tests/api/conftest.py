"""Shared fixtures for API tests."""

from collections.abc import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from procurement.application.session import SESSION_COOKIE_NAME
from procurement.domain import User
from procurement.infrastructure.blob_store import InMemoryBlobStore
from procurement.infrastructure.config import Settings
from procurement.infrastructure.notifier import Notifier
from procurement.infrastructure.store import InMemoryKeyValueStore
from procurement.main import create_app


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def build_app(notifier: Notifier, blob_store: InMemoryBlobStore) -> Callable[[Settings], FastAPI]:
    """Build an app around in-memory collaborators."""

    def _build(app_settings: Settings) -> FastAPI:
        return create_app(
            app_settings,
            store=InMemoryKeyValueStore(),
            blob_store=blob_store,
            notifier=notifier,
        )

    return _build


@pytest.fixture
def app(build_app, settings: Settings) -> FastAPI:
    return build_app(settings)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client without a session."""
    return TestClient(app)


@pytest.fixture
def client_for(app: FastAPI) -> Callable[[User], TestClient]:
    """Create test clients signed in as a given user."""

    def _client(user: User) -> TestClient:
        token = app.state.container.sessions.tokens.issue_session(user)
        return TestClient(app, cookies={SESSION_COOKIE_NAME: token})

    return _client


@pytest.fixture
def requester_client(client_for, requester: User) -> TestClient:
    return client_for(requester)


@pytest.fixture
def purchaser_client(client_for, purchaser: User) -> TestClient:
    return client_for(purchaser)


@pytest.fixture
def ceo_client(client_for, ceo: User) -> TestClient:
    return client_for(ceo)
