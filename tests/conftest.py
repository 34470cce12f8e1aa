"""Pytest configuration for all tests."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from collectra.domain.entities import Actor
from collectra.domain.services import CreateSessionInput
from collectra.infrastructure.persistence import models  # noqa: F401
from collectra.infrastructure.persistence.database import Base


class FakeClock:
    """Controllable clock for deterministic timestamps."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at 2024-03-01 08:00 UTC."""
    return FakeClock(datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def actor() -> Actor:
    return Actor(id="user-1", name="Dana Coordinator")


@pytest.fixture
def other_actor() -> Actor:
    return Actor(id="user-2", name="Lee Marketer")


@pytest.fixture
def create_input() -> CreateSessionInput:
    """A valid create request for a 500 kg collection."""
    return CreateSessionInput(
        supplier_id="sup-1",
        supplier_name="Green Paper Mill",
        site_location="Warehouse 4, North Gate",
        coordinator_id="user-1",
        coordinator_name="Dana Coordinator",
        estimated_start_date=datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc),
        estimated_end_date=datetime(2024, 3, 1, 16, 0, tzinfo=timezone.utc),
        estimated_amount=500,
    )


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    from collectra.infrastructure.api.app import app
    from collectra.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def actor_headers() -> dict[str, str]:
    return {"X-Actor-Id": "user-1", "X-Actor-Name": "Dana Coordinator"}
