"""Shared pytest fixtures and configuration."""

import os

# Set test environment variables before the app reads its settings
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-at-least-32-characters")
os.environ.setdefault("AUTH_PROVIDER", "jwt")
os.environ.setdefault("DOCUMENT_STORE_BACKEND", "memory")
os.environ.setdefault("BLOB_STORE_BACKEND", "memory")

from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.security import create_access_token
from app.main import app as fastapi_app
from app.services.blob_store import InMemoryBlobStore
from app.services.document_store import InMemoryDocumentStore, get_document_store
from app.services.identity import JWTIdentityVerifier, get_identity_verifier


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Fresh in-process document store for each test."""
    return InMemoryDocumentStore()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    """Fresh in-process blob store for each test."""
    return InMemoryBlobStore(base_url="http://blobs.test")


@pytest.fixture
def app(store):
    """The FastAPI app wired to the per-test stores and JWT auth."""
    fastapi_app.dependency_overrides[get_document_store] = lambda: store
    fastapi_app.dependency_overrides[get_identity_verifier] = JWTIdentityVerifier
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def transport(app) -> ASGITransport:
    # Unhandled errors come back as 500 responses instead of being re-raised
    return ASGITransport(app=app, raise_app_exceptions=False)


@pytest_asyncio.fixture
async def client(transport) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_token() -> Callable[[str], str]:
    """Mint an access token for a user id."""
    return lambda user_id: create_access_token(user_id)


@pytest.fixture
def auth_headers(make_token) -> Callable[[str], dict]:
    """Authorization headers for a user id."""
    return lambda user_id="alice": {"Authorization": f"Bearer {make_token(user_id)}"}
