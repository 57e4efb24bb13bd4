"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database. The HTTP client talks to
the app through ``ASGITransport`` without running the lifespan, so Redis is
never initialised (rate limiting passes through) and the catalog is whatever
the ``catalog_snapshot`` fixture installs.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from chronolog.auth.jwt import create_access_token
from chronolog.auth.service import register_user
from chronolog.catalog.snapshot import CatalogSnapshot, Champion, Icon, Item, Skin
from chronolog.catalog.store import CatalogStore
from chronolog.database import get_session
from chronolog.db import models  # noqa: F401
from chronolog.db.base import Base
from chronolog.db.models import Activity, TimeEntry, User
from chronolog.main import create_app
from chronolog.randomness import get_random_source
from chronolog.taxonomy.service import find_or_create_category

TEST_PASSWORD = "hunter22"


class ScriptedRandom:
    """RandomSource returning a fixed sequence of values."""

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        self.calls.append(stop)
        if not self._values:
            msg = "ScriptedRandom exhausted"
            raise AssertionError(msg)
        value = self._values.pop(0)
        assert 0 <= value < stop, f"scripted value {value} outside [0, {stop})"
        return value


def make_snapshot(**overrides: object) -> CatalogSnapshot:
    fields: dict[str, object] = {
        "version": "14.1.1",
        "champions": (
            Champion("Ahri", "Ahri", "the Nine-Tailed Fox"),
            Champion("Garen", "Garen", "The Might of Demacia"),
        ),
        "items": (Item("1001", "Boots"), Item("3078", "Trinity Force")),
        "icons": (Icon("29"), Icon("4644")),
        "skins": (Skin("Ahri", "Ahri", 1, "Dynasty Ahri"), Skin("Garen", "Garen", 2, "Desert Trooper Garen")),
    }
    fields.update(overrides)
    return CatalogSnapshot(**fields)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory bound to a fresh in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for service tests and test setup."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# App / HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog_snapshot() -> CatalogSnapshot:
    return make_snapshot()


@pytest_asyncio.fixture
async def app(session_factory, catalog_snapshot):
    app = create_app()
    app.state.catalog = CatalogStore(catalog_snapshot)

    async def _override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_session
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def script_rng(app):
    """Install a ScriptedRandom for the next requests: ``script_rng([59, 0])``."""

    def _install(values: Iterable[int]) -> ScriptedRandom:
        rng = ScriptedRandom(values)
        app.dependency_overrides[get_random_source] = lambda: rng
        return rng

    return _install


# ---------------------------------------------------------------------------
# Users & data helpers
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    user = await register_user(db_session, name="Test User", email="user@example.com", password=TEST_PASSWORD)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    user = await register_user(db_session, name="Other User", email="other@example.com", password=TEST_PASSWORD)
    await db_session.commit()
    return user


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, auth_headers: dict[str, str]) -> AsyncClient:
    client.headers.update(auth_headers)
    return client


async def make_activity(
    db: AsyncSession,
    user: User,
    name: str = "Deep work",
    category: str = "Work",
    intervals_rewarded: int = 0,
) -> Activity:
    activity = Activity(
        user_id=user.id,
        name=name,
        main_category=await find_or_create_category(db, category),
        tags=[],
        intervals_rewarded=intervals_rewarded,
    )
    db.add(activity)
    await db.commit()
    return activity


async def add_entry(
    db: AsyncSession,
    activity: Activity,
    seconds: int | None,
    start: datetime | None = None,
) -> TimeEntry:
    """Add a completed entry of ``seconds`` (running when None)."""
    if start is None:
        start = datetime.now(timezone.utc) - timedelta(seconds=(seconds or 0) + 60)
    entry = TimeEntry(
        user_id=activity.user_id,
        activity_id=activity.id,
        start_time=start,
        end_time=start + timedelta(seconds=seconds) if seconds is not None else None,
    )
    db.add(entry)
    await db.commit()
    return entry


@pytest_asyncio.fixture
async def activity(db_session: AsyncSession, user: User) -> Activity:
    return await make_activity(db_session, user)
