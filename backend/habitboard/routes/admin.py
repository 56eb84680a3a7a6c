from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from habitboard.auth_deps import require_admin, check_user_id
from habitboard.db import get_session
from habitboard.schemas.user import AdminDashboard, StatusUpdate, UserPublic
from habitboard.services.leaderboard import utc_today
from habitboard.services.store import SqlProgressStore, StoreError
from habitboard.services.users import get_user, list_users, set_user_status, user_counts

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


async def _change_status(session: AsyncSession, user_id: int, status: str) -> UserPublic:
    check_user_id(user_id)
    user = await get_user(session, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    user = await set_user_status(session, user, status)
    return UserPublic.model_validate(user)


@router.get("/users", response_model=list[UserPublic])
async def users(
    status: str | None = Query(default=None, pattern="^(pending|approved|rejected|suspended)$"),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    return [UserPublic.model_validate(u) for u in await list_users(session, status, limit, offset)]


@router.post("/users/{user_id}/approve", response_model=UserPublic)
async def approve(user_id: int, session: AsyncSession = Depends(get_session)):
    return await _change_status(session, user_id, "approved")


@router.post("/users/{user_id}/reject", response_model=UserPublic)
async def reject(user_id: int, session: AsyncSession = Depends(get_session)):
    return await _change_status(session, user_id, "rejected")


@router.patch("/users/{user_id}/status", response_model=UserPublic)
async def update_status(user_id: int, payload: StatusUpdate, session: AsyncSession = Depends(get_session)):
    return await _change_status(session, user_id, payload.status)


@router.get("/dashboard", response_model=AdminDashboard)
async def dashboard(session: AsyncSession = Depends(get_session)):
    try:
        today_submissions = await SqlProgressStore(session).count_submissions_on(utc_today())
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to load dashboard")
    return AdminDashboard(users=await user_counts(session), today_submissions=today_submissions)
