from __future__ import annotations
from datetime import date, datetime, timedelta, timezone as dt_tz
from typing import Iterable, get_args
import structlog

from habitboard.config import settings
from habitboard.schemas.leaderboard import (
    AggregatedStats, LeaderboardEntry, LeaderboardPage, LeaderboardType, Period, TopPerformer, UserIdentity,
)
from habitboard.schemas.progress import ProgressRecord
from habitboard.services.stats import aggregate_stats, group_by_user
from habitboard.services.store import ProgressStore

log = structlog.get_logger()

PERIODS: tuple[str, ...] = get_args(Period)
LEADERBOARD_TYPES: tuple[str, ...] = get_args(LeaderboardType)

# Leaderboard type -> AggregatedStats field it ranks by
SORT_KEYS: dict[str, str] = {
    "overall": "total_points",
    "reading": "total_pages",
    "distance": "total_distance",
    "consistency": "total_days",
}

# Days subtracted from today for the period's first included date
PERIOD_DAYS: dict[str, int] = {"daily": 0, "weekly": 7, "monthly": 30}


class InvalidLeaderboardQuery(ValueError):
    pass


def utc_today() -> date:
    return datetime.now(dt_tz.utc).date()


def validate_leaderboard_query(period: str, type: str, limit: int = 100, offset: int = 0) -> None:
    if period not in PERIODS:
        raise InvalidLeaderboardQuery(f"Invalid period. Must be one of: {', '.join(PERIODS)}")
    if type not in LEADERBOARD_TYPES:
        raise InvalidLeaderboardQuery(f"Invalid type. Must be one of: {', '.join(LEADERBOARD_TYPES)}")
    if not isinstance(limit, int) or limit < 1 or limit > settings.max_leaderboard_limit:
        raise InvalidLeaderboardQuery(f"Limit must be between 1 and {settings.max_leaderboard_limit}")
    if not isinstance(offset, int) or offset < 0:
        raise InvalidLeaderboardQuery("Offset must be >= 0")


def period_min_date(period: str, today: date | None = None) -> date | None:
    """
    First date included in the period, or None for all-time.
    "daily" keeps records dated today or later, i.e. today only.
    """
    if period == "all":
        return None
    today = today or utc_today()
    return today - timedelta(days=PERIOD_DAYS[period])


def score_for(stats: AggregatedStats, type: str) -> int | float:
    return getattr(stats, SORT_KEYS.get(type, "total_points"))


def rank_entries(
    records: Iterable[ProgressRecord],
    users: Iterable[UserIdentity],
    type: str = "overall",
) -> list[LeaderboardEntry]:
    """
    Aggregate per user, keep approved identities only, sort by the type's metric
    (descending; ties by ascending user id) and rank the full set from 1.
    """
    by_id = {u.id: u for u in users}
    scored: list[tuple[UserIdentity, AggregatedStats, int | float]] = []
    for user_id, user_records in group_by_user(records).items():
        user = by_id.get(user_id)
        if user is None:
            continue
        stats = aggregate_stats(user_records)
        scored.append((user, stats, score_for(stats, type)))

    scored.sort(key=lambda t: (-t[2], t[0].id))

    return [
        LeaderboardEntry(
            user_id=user.id,
            name=user.name,
            photo_url=user.photo_url,
            is_premium=user.is_premium,
            total_points=stats.total_points,
            total_pages=stats.total_pages,
            total_distance=stats.total_distance,
            days_count=stats.total_days,
            score=score,
            rank=idx + 1,
        )
        for idx, (user, stats, score) in enumerate(scored)
    ]


async def build_full_leaderboard(
    store: ProgressStore,
    period: str = "all",
    type: str = "overall",
    today: date | None = None,
) -> list[LeaderboardEntry]:
    """Every ranked participant for the period; no pagination."""
    records = await store.fetch_submissions(period_min_date(period, today))
    user_ids = {r.user_id for r in records}
    users = await store.fetch_approved_users(user_ids)
    entries = rank_entries(records, users, type)
    log.info(
        "leaderboard_built",
        period=period, type=type, records=len(records), submitters=len(user_ids), participants=len(entries),
    )
    return entries


async def build_leaderboard(
    store: ProgressStore,
    period: str = "all",
    type: str = "overall",
    limit: int = 100,
    offset: int = 0,
    today: date | None = None,
) -> LeaderboardPage:
    validate_leaderboard_query(period, type, limit, offset)
    entries = await build_full_leaderboard(store, period, type, today)
    return LeaderboardPage(
        entries=entries[offset:offset + limit],
        total_participants=len(entries),
        period=period,
        type=type,
    )


async def top_performers(
    store: ProgressStore,
    period: str = "all",
    limit: int = 10,
    today: date | None = None,
) -> dict[str, list[TopPerformer]]:
    out: dict[str, list[TopPerformer]] = {}
    for type in ("overall", "reading", "distance"):
        page = await build_leaderboard(store, period, type, limit, 0, today)
        out[type] = [
            TopPerformer(user_id=e.user_id, name=e.name, score=e.score, photo_url=e.photo_url, rank=e.rank)
            for e in page.entries
        ]
    return out
