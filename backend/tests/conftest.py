from __future__ import annotations
from datetime import date, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from habitboard.config import settings
from habitboard.db import Base, get_session
from habitboard.main import app
from habitboard.schemas.leaderboard import UserIdentity
from habitboard.schemas.progress import ProgressRecord
import habitboard.models.user  # ensure tables are registered
import habitboard.models.progress

TODAY = date(2026, 10, 18)


class FakeStore:
    """In-memory ProgressStore keyed by (user_id, date)."""

    def __init__(self, records=(), users=()):
        self.records = {(r.user_id, r.date): r for r in records}
        self.users = {u.id: u for u in users}

    async def fetch_submissions(self, min_date=None):
        return [r for r in self.records.values() if min_date is None or r.date >= min_date]

    async def fetch_approved_users(self, ids):
        return [self.users[i] for i in set(ids) if i in self.users]

    async def upsert_submission(self, record):
        self.records[(record.user_id, record.date)] = record
        return record

    async def fetch_user_submissions(self, user_id):
        mine = [r for r in self.records.values() if r.user_id == user_id]
        return sorted(mine, key=lambda r: r.date, reverse=True)

    async def fetch_submission(self, user_id, day):
        return self.records.get((user_id, day))


def make_record(user_id: int, day: date, completed: int = 0, pages: int = 0, distance: float = 0.0) -> ProgressRecord:
    return ProgressRecord(
        user_id=user_id,
        date=day,
        tasks={i: True for i in range(1, completed + 1)},
        pages_read=pages,
        distance_km=distance,
        completed_count=completed,
    )


def make_user(user_id: int, name: str | None = None) -> UserIdentity:
    return UserIdentity(id=user_id, name=name or f"user{user_id}")


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def record():
    return make_record


@pytest.fixture
def identity():
    return make_user


@pytest.fixture
def fake_store():
    return FakeStore


@pytest.fixture
def days_ago():
    return lambda n: TODAY - timedelta(days=n)


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'habitboard_test.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def client(session_factory):
    async def _session_override():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {settings.admin_token}"}
