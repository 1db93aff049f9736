"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine

# Configure asyncio
pytest_plugins = ["pytest_asyncio"]


class FixedClock:
    """Clock pinned to a given instant; tests move it explicitly."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, **kwargs) -> None:
        self.moment = self.moment + timedelta(**kwargs)


@pytest.fixture(scope="function", autouse=True)
def reset_database_globals() -> Generator[None, None, None]:
    """Each test starts without an engine; the ``db`` fixture installs one."""
    import app.database.connection as db_conn

    db_conn._engine = None
    db_conn._session_factory = None
    yield
    db_conn._engine = None
    db_conn._session_factory = None


@pytest_asyncio.fixture
async def db(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """SQLite database (aiosqlite) with all tables, wired into get_session()."""
    from app.database import connection as db_conn

    engine = await db_conn.init_sqlalchemy_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db_conn.create_tables()
    yield engine
    await db_conn.close_sqlalchemy_engine()


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to 2026-10-19 12:00 UTC."""
    return FixedClock(datetime(2026, 10, 19, 12, 0, tzinfo=UTC))


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from app.api.app import create_api_app

    app = create_api_app()
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def api_app(db):
    """API app bound to the test database; dependency overrides are cleared afterwards."""
    from app.api.app import create_api_app

    app = create_api_app()
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(api_app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for the FastAPI app."""
    transport = ASGITransport(app=api_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_token() -> str:
    """Create a valid JWT token for testing."""
    from app.core.security import create_access_token
    return create_access_token(username="alice")


@pytest.fixture
def admin_token() -> str:
    """Create an admin JWT token for testing (``admin`` is in ADMIN_USERS by default)."""
    from app.core.security import create_access_token
    return create_access_token(username="admin")


@pytest.fixture
def auth_headers(auth_token: str) -> dict:
    """Create authorization headers with a regular user token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def admin_headers(admin_token: str) -> dict:
    """Create authorization headers with an admin token."""
    return {"Authorization": f"Bearer {admin_token}"}


@pytest_asyncio.fixture
async def make_user(db):
    """Factory creating a profile with optional preferences."""
    from app.database.connection import get_session
    from app.repositories import preferences_orm as preferences_repo

    async def _make(
        username: str,
        tickers: list[str] | None = None,
        investor_type: str | None = None,
    ) -> int:
        async with get_session() as session:
            user = await preferences_repo.get_or_create_user_with_session(session, username)
            user_id = user.id
            if tickers is not None or investor_type is not None:
                await preferences_repo.save_preferences_with_session(
                    session,
                    user_id,
                    crypto_assets=tickers or [],
                    investor_type=investor_type,
                )
            await session.commit()
        return user_id

    return _make
