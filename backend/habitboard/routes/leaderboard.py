from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from fastapi import APIRouter, Depends, HTTPException, Query
import structlog

from habitboard.auth_deps import get_store, load_approved_user
from habitboard.config import settings
from habitboard.schemas.achievement import AchievementLeaderboard
from habitboard.schemas.leaderboard import (
    LeaderboardPage, LeaderboardStatsResponse, PositionResponse, TopPerformers,
)
from habitboard.services.achievements import build_achievement_leaderboard
from habitboard.services.distribution import compute_distribution
from habitboard.services.leaderboard import (
    InvalidLeaderboardQuery, build_full_leaderboard, build_leaderboard, top_performers, validate_leaderboard_query,
)
from habitboard.services.position import locate_user
from habitboard.services.store import SqlProgressStore, StoreError

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])
log = structlog.get_logger()


def _bad_request(e: InvalidLeaderboardQuery) -> HTTPException:
    return HTTPException(status_code=400, detail=str(e))


def _computation_failed(e: StoreError) -> HTTPException:
    log.error("leaderboard_computation_failed", error=str(e))
    return HTTPException(status_code=500, detail="Leaderboard computation failed")


@router.get("", response_model=LeaderboardPage)
async def get_leaderboard(
    period: str = "all",
    type: str = "overall",
    limit: int = Query(default=settings.default_leaderboard_limit),
    offset: int = 0,
    store: SqlProgressStore = Depends(get_store),
):
    try:
        return await build_leaderboard(store, period, type, limit, offset)
    except InvalidLeaderboardQuery as e:
        raise _bad_request(e)
    except StoreError as e:
        raise _computation_failed(e)


@router.get("/position/{user_id}", response_model=PositionResponse)
async def get_user_position(
    user_id: int,
    period: str = "all",
    type: str = "overall",
    store: SqlProgressStore = Depends(get_store),
):
    try:
        validate_leaderboard_query(period, type)
    except InvalidLeaderboardQuery as e:
        raise _bad_request(e)
    user = await load_approved_user(store.session, user_id)
    try:
        entries = await build_full_leaderboard(store, period, type)
    except StoreError as e:
        raise _computation_failed(e)

    position = locate_user(entries, user.id)
    if position is None:
        return PositionResponse(
            user_position=None,
            total_participants=len(entries),
            leaderboard_type=type,
            time_period=period,
            message="User not found in leaderboard (no submissions yet)",
        )
    return PositionResponse(
        user_position=position,
        surrounding_users=position.surrounding,
        total_participants=len(entries),
        leaderboard_type=type,
        time_period=period,
    )


@router.get("/stats", response_model=LeaderboardStatsResponse)
async def get_leaderboard_stats(
    period: str = "all",
    type: str = "overall",
    store: SqlProgressStore = Depends(get_store),
):
    try:
        validate_leaderboard_query(period, type)
        entries = await build_full_leaderboard(store, period, type)
    except InvalidLeaderboardQuery as e:
        raise _bad_request(e)
    except StoreError as e:
        raise _computation_failed(e)
    return LeaderboardStatsResponse(
        period=period,
        type=type,
        statistics=compute_distribution(entries),
        generated_at=datetime.now(dt_tz.utc),
    )


@router.get("/top-performers", response_model=TopPerformers)
async def get_top_performers(
    period: str = "all",
    limit: int = 10,
    store: SqlProgressStore = Depends(get_store),
):
    try:
        top = await top_performers(store, period, limit)
    except InvalidLeaderboardQuery as e:
        raise _bad_request(e)
    except StoreError as e:
        raise _computation_failed(e)
    return TopPerformers(period=period, top_performers=top, categories=list(top))


@router.get("/achievements", response_model=AchievementLeaderboard)
async def get_achievement_leaderboard(
    limit: int = Query(default=settings.achievement_leaderboard_limit),
    store: SqlProgressStore = Depends(get_store),
):
    if limit < 1 or limit > settings.max_leaderboard_limit:
        raise HTTPException(status_code=400, detail=f"Limit must be between 1 and {settings.max_leaderboard_limit}")
    try:
        entries = await build_full_leaderboard(store, "all", "overall")
    except StoreError as e:
        raise _computation_failed(e)
    return build_achievement_leaderboard(entries, limit)
