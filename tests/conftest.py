"""Shared test fixtures."""

import os

# Settings() requires a JWT secret at import time
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("ALLOWED_EMAIL_DOMAIN", "uwaterloo.ca")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from src.pm_notify.email_client import LoggingEmailClient, get_email_client  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints.

    ASGITransport does not run the lifespan, so the email client normally
    built at startup is overridden here.
    """
    app.dependency_overrides[get_email_client] = LoggingEmailClient
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
