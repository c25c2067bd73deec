"""
Event Gateway: Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    ├── test_settings:       Settings with every collaborator configured
    ├── fake_store:          In-memory stand-in for the identity store
    ├── png_bytes / png_b64: A tiny image and its base64 form
    ├── app:                 FastAPI app built from test_settings
    └── test_client:         HTTPX AsyncClient bound to the app (no server)
"""

import base64
import itertools
import os
from typing import Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Environment must be set before gateway modules build their default settings
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256"
os.environ["LOG_LEVEL"] = "WARNING"

from gateway.clients.graphql_client import UserRecord  # noqa: E402
from gateway.config import Settings  # noqa: E402
from gateway.exceptions import DuplicateUserError  # noqa: E402
from gateway.security import hash_password  # noqa: E402


class FakeIdentityStore:
    """
    Mimics IdentityStore over a dict keyed by email.

    Enforces the unique-email constraint the real store has, and records the
    password value it was asked to store so tests can inspect it.
    """

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self._ids = itertools.count(1)
        self.reachable = True

    def add_user(self, email: str, password: str, role: Optional[str] = "user",
                 username: str = "someone") -> int:
        user_id = next(self._ids)
        self.users[email] = {
            "id": user_id,
            "username": username,
            "password": hash_password(password, rounds=4),
            "role": role,
        }
        return user_id

    async def insert_user(self, username: str, email: str, password_hash: str) -> int:
        if email in self.users:
            raise DuplicateUserError(context={"email": email})
        user_id = next(self._ids)
        self.users[email] = {
            "id": user_id,
            "username": username,
            "password": password_hash,
            "role": "user",
        }
        return user_id

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        row = self.users.get(email)
        if row is None:
            return None
        return UserRecord(
            id=row["id"], password=row["password"], role=row["role"], username=row["username"]
        )

    async def ping(self) -> bool:
        return self.reachable


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        graphql_url="http://graphql.test/v1/graphql",
        hasura_admin_secret="admin-secret",
        jwt_secret="test-secret-that-is-long-enough-for-hs256",
        jwt_issuer="Event",
        bcrypt_rounds=4,
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
        chapa_api_key="CHASECK_TEST-123",
        chapa_base_url="https://chapa.test/v1",
        payment_tx_prefix="evt",
        payment_default_email="payer@example.com",
        payment_callback_url="https://hooks.example.com/chapa",
        smtp_username="mailer@example.com",
        smtp_password="app-password",
        smtp_from="mailer@example.com",
        rate_limit_requests=1000,
        log_level="WARNING",
    )


@pytest.fixture
def fake_store() -> FakeIdentityStore:
    return FakeIdentityStore()


@pytest.fixture
def png_bytes() -> bytes:
    """PNG signature plus an IHDR chunk header; enough to be non-trivial bytes."""
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"


@pytest.fixture
def png_b64(png_bytes) -> str:
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def app(test_settings, fake_store):
    from gateway.dependencies import get_identity_store
    from gateway.main import create_app

    application = create_app(test_settings)
    application.dependency_overrides[get_identity_store] = lambda: fake_store
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    The lifespan does not run under ASGITransport, so collaborator clients
    fall back to per-call httpx clients (mocked with respx where needed).
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
