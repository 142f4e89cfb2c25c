"""Integration-test fixtures (require a migrated PostgreSQL).

Pre-condition: alembic upgrade head against DATABASE_URL.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session. When the database is unreachable every test that
depends on `client` is skipped.
"""

import uuid
from collections.abc import Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from src.main import app
from src.pm_common.database import async_session_factory, engine
from src.pm_notify.email_client import LoggingEmailClient, get_email_client

PASSWORD = "TestPass123"

UserFactory = Callable[..., Awaitable[dict[str, str]]]


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, DBAPIError) as exc:
        pytest.skip(f"PostgreSQL not reachable: {exc}")

    app.dependency_overrides[get_email_client] = LoggingEmailClient
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    await engine.dispose()


async def _verification_token(email: str) -> str:
    async with async_session_factory() as session:
        result = await session.execute(
            text("SELECT verification_token FROM users WHERE email = :email"),
            {"email": email},
        )
        return result.scalar_one()


@pytest_asyncio.fixture(loop_scope="session")
async def make_user(client: AsyncClient) -> UserFactory:
    """Register a fresh user; optionally verify the email and create a profile.

    Returns {"user_id", "email", "token", "market_id"?}.
    """

    async def _make(verified: bool = True, with_profile: bool = False) -> dict[str, str]:
        uid = uuid.uuid4().hex[:8]
        email = f"it_{uid}@uwaterloo.ca"
        reg = await client.post("/api/v1/auth/register", json={
            "name": f"Test User {uid}",
            "email": email,
            "password": PASSWORD,
        })
        assert reg.status_code == 201, reg.text

        if verified:
            token = await _verification_token(email)
            resp = await client.post("/api/v1/auth/verify", json={"token": token})
            assert resp.status_code == 200, resp.text

        login = await client.post(
            "/api/v1/auth/login", json={"email": email, "password": PASSWORD}
        )
        data = login.json()["data"]
        user = {
            "user_id": data["user"]["user_id"],
            "email": email,
            "token": data["access_token"],
        }

        if with_profile:
            resp = await client.post(
                "/api/v1/profile",
                json={"name": f"Test User {uid}"},
                headers={"Authorization": f"Bearer {user['token']}"},
            )
            assert resp.status_code == 201, resp.text
            user["market_id"] = resp.json()["data"]["market_id"]
        return user

    return _make
