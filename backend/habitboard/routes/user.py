from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, Body
from sqlalchemy.ext.asyncio import AsyncSession

from habitboard.auth_deps import get_store, get_approved_user, check_user_id
from habitboard.db import get_session
from habitboard.models.user import User
from habitboard.schemas.achievement import UserAchievements
from habitboard.schemas.progress import ActivityPage
from habitboard.schemas.user import DeleteAccountRequest, PublicProfile, TodayStats, UserStatistics
from habitboard.services.achievements import achievement_score, compute_achievements
from habitboard.services.leaderboard import utc_today
from habitboard.services.stats import aggregate_stats
from habitboard.services.store import SqlProgressStore, StoreError
from habitboard.services.users import get_user, delete_user

router = APIRouter(prefix="/user", tags=["user"])

DELETE_CONFIRMATION = "DELETE_MY_ACCOUNT"


async def _history(store: SqlProgressStore, user_id: int):
    try:
        return await store.fetch_user_submissions(user_id)
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to load progress history")


@router.get("/statistics/{user_id}", response_model=UserStatistics)
async def statistics(store: SqlProgressStore = Depends(get_store), user: User = Depends(get_approved_user)):
    records = await _history(store, user.id)
    today = utc_today()
    todays = next((r for r in records if r.date == today), None)
    return UserStatistics(
        today=TodayStats(
            date=today,
            completed=todays.completed_count if todays else 0,
            pages_read=todays.pages_read if todays else 0,
            distance_km=todays.distance_km if todays else 0.0,
        ),
        all_time=aggregate_stats(records),
    )


@router.get("/profile/{user_id}", response_model=PublicProfile)
async def profile(user_id: int, store: SqlProgressStore = Depends(get_store)):
    check_user_id(user_id)
    user = await get_user(store.session, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User profile not found")
    approved = user.status == "approved"
    return PublicProfile(
        id=user.id,
        name=user.name,
        photo_url=user.photo_url,
        is_premium=user.is_premium,
        member_since=user.registered_at,
        status="active" if approved else "inactive",
        statistics=aggregate_stats(await _history(store, user.id)) if approved else None,
    )


@router.get("/achievements/{user_id}", response_model=UserAchievements)
async def achievements(store: SqlProgressStore = Depends(get_store), user: User = Depends(get_approved_user)):
    badges = compute_achievements(aggregate_stats(await _history(store, user.id)), "cumulative")
    return UserAchievements(achievements=badges, total_achievements=len(badges), achievement_score=achievement_score(badges))


@router.get("/activity/{user_id}", response_model=ActivityPage)
async def activity(
    limit: int = Query(default=30, ge=1, le=365),
    offset: int = Query(default=0, ge=0),
    store: SqlProgressStore = Depends(get_store),
    user: User = Depends(get_approved_user),
):
    records = await _history(store, user.id)
    return ActivityPage(items=records[offset:offset + limit], page=offset // limit + 1, limit=limit, total=len(records))


@router.delete("/account/{user_id}")
async def delete_account(
    user_id: int,
    payload: DeleteAccountRequest = Body(...),
    session: AsyncSession = Depends(get_session),
):
    if payload.confirm != DELETE_CONFIRMATION:
        raise HTTPException(status_code=400, detail="Account deletion not confirmed")
    check_user_id(user_id)
    user = await get_user(session, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    await delete_user(session, user)
    return {"message": "Account deleted successfully"}
