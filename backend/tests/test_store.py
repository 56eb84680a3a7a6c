from __future__ import annotations
from datetime import timedelta
import pytest
from sqlalchemy import select, func

from habitboard.models.progress import DailyProgress
from habitboard.models.user import User
from habitboard.schemas.progress import ProgressRecord
from habitboard.services.store import SqlProgressStore


async def _add_users(session, *specs):
    for user_id, status in specs:
        session.add(User(id=user_id, name=f"user{user_id}", status=status))
    await session.commit()


@pytest.mark.asyncio
async def test_upsert_overwrites_same_user_and_date(session, today):
    await _add_users(session, (1, "approved"))
    store = SqlProgressStore(session)

    await store.upsert_submission(ProgressRecord(
        user_id=1, date=today, tasks={i: True for i in range(1, 11)}, pages_read=40, completed_count=10,
    ))
    saved = await store.upsert_submission(ProgressRecord(
        user_id=1, date=today, tasks={1: True, 2: True, 3: False}, task_inputs={5: 12}, pages_read=12, completed_count=2,
    ))

    rows = await session.scalar(select(func.count(DailyProgress.id)))
    assert rows == 1
    assert saved.completed_count == 2
    assert saved.pages_read == 12
    assert saved.tasks == {1: True, 2: True, 3: False}
    assert saved.task_inputs == {5: 12}
    assert saved.submitted_at is not None


@pytest.mark.asyncio
async def test_fetch_submissions_by_min_date(session, record, today):
    await _add_users(session, (1, "approved"), (2, "approved"))
    store = SqlProgressStore(session)
    for r in (record(1, today, completed=1), record(1, today - timedelta(days=9), completed=2),
              record(2, today - timedelta(days=3), completed=3)):
        await store.upsert_submission(r)

    assert len(await store.fetch_submissions()) == 3
    recent = await store.fetch_submissions(today - timedelta(days=7))
    assert sorted((r.user_id, r.completed_count) for r in recent) == [(1, 1), (2, 3)]
    assert await store.count_submissions_on(today) == 1


@pytest.mark.asyncio
async def test_fetch_user_submissions_newest_first(session, record, today):
    await _add_users(session, (1, "approved"))
    store = SqlProgressStore(session)
    for n in (2, 0, 1):
        await store.upsert_submission(record(1, today - timedelta(days=n), completed=n))

    history = await store.fetch_user_submissions(1)
    assert [r.date for r in history] == [today, today - timedelta(days=1), today - timedelta(days=2)]
    assert await store.fetch_submission(1, today - timedelta(days=5)) is None


@pytest.mark.asyncio
async def test_fetch_approved_users_filters_status(session):
    await _add_users(session, (1, "approved"), (2, "pending"), (3, "suspended"), (4, "approved"))
    users = await SqlProgressStore(session).fetch_approved_users([1, 2, 3, 4, 5])
    assert sorted(u.id for u in users) == [1, 4]
    assert await SqlProgressStore(session).fetch_approved_users([]) == []
