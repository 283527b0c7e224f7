import os
import sys
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from libs.common.events import ActivityJournal, EventBus
from libs.common.notifications import NotificationCenter
from libs.data.models.base import Base


@pytest.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite so that independent sessions see each other's commits."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'admin.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter(history=20)


@pytest.fixture
async def activity(event_bus) -> ActivityJournal:
    journal = ActivityJournal()
    await journal.attach(event_bus)
    return journal


@pytest.fixture
async def client(session_factory, notifications, event_bus, activity):
    from apps.admin_api.dependencies import get_activity, get_events, get_notifications, get_session_factory_dep
    from apps.admin_api.main import app

    app.dependency_overrides[get_session_factory_dep] = lambda: session_factory
    app.dependency_overrides[get_notifications] = lambda: notifications
    app.dependency_overrides[get_events] = lambda: event_bus
    app.dependency_overrides[get_activity] = lambda: activity
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()
