"""
Shared fixtures: an in-memory SQLite database standing in for the
production store, seeded establishments and doctors, and notifiers that
record or fail instead of talking to Redis.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from rendezvous.api.v1.appointments import get_notifier
from rendezvous.core.redis import Notifier
from rendezvous.db.models import Establishment, User
from rendezvous.db.session import get_session
from rendezvous.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class RecordingClient:
    """Stands in for RedisClient and keeps published events in memory."""

    def __init__(self):
        self.events = []

    async def publish_event(self, event: str, payload: dict) -> None:
        self.events.append((event, payload))

    async def close(self):
        pass


class BrokenClient:
    async def publish_event(self, event: str, payload: dict) -> None:
        raise ConnectionError("redis is down")

    async def close(self):
        pass


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def recording_client():
    return RecordingClient()


@pytest.fixture
def notifier(recording_client):
    return Notifier(client=recording_client, enabled=True)


@pytest_asyncio.fixture
async def establishment(session):
    establishment = Establishment(
        name="Clinique des Almadies",
        slug="clinique-des-almadies-0001",
        kind="clinic",
        city="Dakar",
        region="Dakar",
        validation_status="validated",
    )
    session.add(establishment)
    await session.commit()
    await session.refresh(establishment)
    return establishment


@pytest_asyncio.fixture
async def other_establishment(session):
    establishment = Establishment(
        name="Hopital Principal",
        slug="hopital-principal-0002",
        kind="hospital",
        city="Dakar",
        region="Dakar",
        validation_status="validated",
    )
    session.add(establishment)
    await session.commit()
    await session.refresh(establishment)
    return establishment


async def _add_doctor(session, establishment, first_name, last_name):
    doctor = User(
        establishment_id=establishment.id,
        role="doctor",
        first_name=first_name,
        last_name=last_name,
        specialty="Cardiologie",
        active=True,
    )
    session.add(doctor)
    await session.commit()
    await session.refresh(doctor)
    return doctor


@pytest_asyncio.fixture
async def doctor(session, establishment):
    return await _add_doctor(session, establishment, "Awa", "Diop")


@pytest_asyncio.fixture
async def second_doctor(session, establishment):
    return await _add_doctor(session, establishment, "Moussa", "Ndiaye")


@pytest_asyncio.fixture
async def foreign_doctor(session, other_establishment):
    return await _add_doctor(session, other_establishment, "Fatou", "Sall")


@pytest_asyncio.fixture
async def client(session_factory, notifier):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
