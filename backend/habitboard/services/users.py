from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from habitboard.models.progress import DailyProgress
from habitboard.models.user import User
from habitboard.schemas.user import RegisterRequest, UserCounts

log = structlog.get_logger()


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    return await session.get(User, user_id, populate_existing=True)


async def register_user(session: AsyncSession, payload: RegisterRequest) -> tuple[User, bool]:
    """
    Create a pending user, or refresh the profile fields of an existing one.
    Status is never changed here. Returns (user, created).
    """
    user = await session.get(User, payload.id)
    created = user is None
    if created:
        user = User(id=payload.id, status="pending", registered_at=datetime.now(dt_tz.utc))
        session.add(user)
    user.name = payload.name
    user.username = payload.username
    user.photo_url = payload.photo_url
    user.is_premium = payload.is_premium
    await session.commit()
    await session.refresh(user)
    log.info("user_registered" if created else "user_profile_refreshed", user_id=user.id, status=user.status)
    return user, created


async def set_user_status(session: AsyncSession, user: User, status: str) -> User:
    previous = user.status
    user.status = status
    if status == "approved":
        user.approved_at = datetime.now(dt_tz.utc)
    await session.commit()
    await session.refresh(user)
    log.info("user_status_changed", user_id=user.id, previous=previous, status=status)
    return user


async def list_users(session: AsyncSession, status: str | None = None, limit: int = 100, offset: int = 0) -> list[User]:
    stmt = select(User)
    if status:
        stmt = stmt.where(User.status == status)
    stmt = stmt.order_by(User.registered_at.desc(), User.id.desc()).limit(limit).offset(offset)
    return list((await session.execute(stmt)).scalars().all())


async def delete_user(session: AsyncSession, user: User) -> None:
    """Remove the user and every progress record they submitted."""
    user_id = user.id
    await session.execute(delete(DailyProgress).where(DailyProgress.user_id == user_id))
    await session.delete(user)
    await session.commit()
    log.info("user_deleted", user_id=user_id)


async def user_counts(session: AsyncSession) -> UserCounts:
    rows = (await session.execute(select(User.status, func.count(User.id)).group_by(User.status))).all()
    by_status = {status: int(n) for status, n in rows}
    return UserCounts(
        total=sum(by_status.values()),
        approved=by_status.get("approved", 0),
        pending=by_status.get("pending", 0),
    )
