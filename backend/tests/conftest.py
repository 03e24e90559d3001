import os
import uuid
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment variables before importing knowtes modules
os.environ.setdefault("DATABASE_URL", "postgresql+asyncpg://knowtes:knowtes@db:5432/knowtes_test")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("OPENROUTER_API_KEY", "sk-or-test")

from fakes import (  # noqa: E402
    FakeNoteRepository,
    FakeStore,
    FakeSummaryStatRepository,
    FakeTopicRepository,
)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture(scope="function")
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on a real PostgreSQL database with fresh tables.

    Tables are created before and dropped after each test. Uses a per-test
    engine to avoid event loop issues. Skips when the database named by
    ``DATABASE_URL`` cannot be reached.
    """
    from knowtes import models  # noqa: F401 - Import to register models with Base
    from knowtes.config import get_settings
    from knowtes.database import Base, build_engine, build_session_factory

    engine = build_engine(get_settings().async_database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
    except (OSError, SQLAlchemyError) as exc:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {exc}")

    async with build_session_factory(engine)() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def db_session() -> AsyncMock:
    """Stand-in for the request session; only commit/rollback are awaited."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def completion_client() -> MagicMock:
    """Completion client whose ``generate_summary`` is an AsyncMock."""
    from knowtes.completion import OpenRouterClient

    client = MagicMock(spec=OpenRouterClient)
    client.generate_summary = AsyncMock()
    return client


@pytest_asyncio.fixture(scope="function")
async def test_app(user_id, store, db_session, completion_client):
    """Provide the FastAPI app wired to in-memory repositories.

    Authentication is bypassed: every request runs as ``user_id``.
    """
    from knowtes.api.deps import (
        get_completion_client,
        get_note_repository,
        get_summary_stat_repository,
        get_topic_repository,
    )
    from knowtes.database import get_db
    from knowtes.main import app
    from knowtes.services.auth_service import get_current_user

    async def _fake_current_user():
        return {"user_id": user_id, "email": "user@example.com"}

    app.dependency_overrides[get_current_user] = _fake_current_user
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_topic_repository] = lambda: FakeTopicRepository(store)
    app.dependency_overrides[get_note_repository] = lambda: FakeNoteRepository(store)
    app.dependency_overrides[get_summary_stat_repository] = lambda: FakeSummaryStatRepository(store)
    app.dependency_overrides[get_completion_client] = lambda: completion_client
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def make_auth_headers(user_id: uuid.UUID, email: str = "user@example.com") -> dict[str, str]:
    """Create Authorization headers with a valid access token."""
    from knowtes.services.auth_service import create_access_token

    token = create_access_token(data={"sub": str(user_id), "email": email})
    return {"Authorization": f"Bearer {token}"}
