from __future__ import annotations
from datetime import date, datetime, timezone as dt_tz
from typing import Iterable, Protocol
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from habitboard.models.progress import DailyProgress
from habitboard.models.user import User
from habitboard.schemas.leaderboard import UserIdentity
from habitboard.schemas.progress import ProgressRecord

log = structlog.get_logger()


class StoreError(Exception):
    """The record store could not complete an operation."""


class ProgressStore(Protocol):
    async def fetch_submissions(self, min_date: date | None = None) -> list[ProgressRecord]: ...
    async def fetch_approved_users(self, ids: Iterable[int]) -> list[UserIdentity]: ...
    async def upsert_submission(self, record: ProgressRecord) -> ProgressRecord: ...
    async def fetch_user_submissions(self, user_id: int) -> list[ProgressRecord]: ...
    async def fetch_submission(self, user_id: int, day: date) -> ProgressRecord | None: ...


def _insert_for(dialect_name: str):
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise StoreError(f"upsert not supported on {dialect_name}")
    return insert


class SqlProgressStore:
    """ProgressStore over the daily_progress / users tables."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def fetch_submissions(self, min_date: date | None = None) -> list[ProgressRecord]:
        stmt = select(DailyProgress).execution_options(populate_existing=True)
        if min_date is not None:
            stmt = stmt.where(DailyProgress.date >= min_date)
        try:
            rows = (await self.session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            log.error("store_fetch_submissions_failed", min_date=str(min_date), error=str(e))
            raise StoreError("Failed to fetch submissions") from e
        return [ProgressRecord.model_validate(r) for r in rows]

    async def fetch_approved_users(self, ids: Iterable[int]) -> list[UserIdentity]:
        ids = list(set(ids))
        if not ids:
            return []
        try:
            rows = (await self.session.execute(
                select(User).where(User.id.in_(ids), User.status == "approved")
            )).scalars().all()
        except SQLAlchemyError as e:
            log.error("store_fetch_users_failed", count=len(ids), error=str(e))
            raise StoreError("Failed to fetch users") from e
        return [UserIdentity.model_validate(u) for u in rows]

    async def upsert_submission(self, record: ProgressRecord) -> ProgressRecord:
        """Insert or overwrite the (user_id, date) row; never additive."""
        values = {
            "user_id": record.user_id,
            "date": record.date,
            "tasks": {str(k): v for k, v in record.tasks.items()},
            "task_inputs": {str(k): v for k, v in record.task_inputs.items()},
            "pages_read": record.pages_read,
            "distance_km": record.distance_km,
            "completed_count": record.completed_count,
            "submitted_at": record.submitted_at or datetime.now(dt_tz.utc),
        }
        insert = _insert_for(self.session.get_bind().dialect.name)
        stmt = insert(DailyProgress).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={k: stmt.excluded[k] for k in values if k not in ("user_id", "date")},
        )
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            log.error("store_upsert_failed", user_id=record.user_id, date=record.date.isoformat(), error=str(e))
            raise StoreError("Failed to save progress") from e

        saved = await self.fetch_submission(record.user_id, record.date)
        if saved is None:
            raise StoreError("Saved progress could not be read back")
        return saved

    async def fetch_user_submissions(self, user_id: int) -> list[ProgressRecord]:
        try:
            rows = (await self.session.execute(
                select(DailyProgress).where(DailyProgress.user_id == user_id)
                .order_by(DailyProgress.date.desc()).execution_options(populate_existing=True)
            )).scalars().all()
        except SQLAlchemyError as e:
            log.error("store_fetch_user_submissions_failed", user_id=user_id, error=str(e))
            raise StoreError("Failed to fetch user submissions") from e
        return [ProgressRecord.model_validate(r) for r in rows]

    async def fetch_submission(self, user_id: int, day: date) -> ProgressRecord | None:
        try:
            row = await self.session.scalar(
                select(DailyProgress).where(DailyProgress.user_id == user_id, DailyProgress.date == day)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            log.error("store_fetch_submission_failed", user_id=user_id, date=day.isoformat(), error=str(e))
            raise StoreError("Failed to fetch submission") from e
        return ProgressRecord.model_validate(row) if row else None

    async def count_submissions_on(self, day: date) -> int:
        try:
            total = await self.session.scalar(
                select(func.count(DailyProgress.id)).where(DailyProgress.date == day)
            )
        except SQLAlchemyError as e:
            raise StoreError("Failed to count submissions") from e
        return int(total or 0)
