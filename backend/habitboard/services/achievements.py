"""
Milestone badges derived from aggregated stats.

Two modes share one catalog:
  - cumulative: every rung of the profile ladders that is met (1000 pages gives
    both "bookworm" and "library_master"); used for a user's own list.
  - tiered: per category only the highest rung met; used for the achievement
    leaderboard, where badges are weighted by rarity.
For the same stats the two modes return different lists.
"""
from __future__ import annotations
from typing import Iterable, Sequence
import structlog

from habitboard.config import settings
from habitboard.schemas.achievement import Achievement, AchievementLeaderboard, AchievementLeaderboardRow
from habitboard.schemas.leaderboard import AggregatedStats, LeaderboardEntry
from habitboard.schemas.progress import ProgressRecord
from habitboard.services.stats import aggregate_stats
from habitboard.services.store import ProgressStore

log = structlog.get_logger()

RARITY_WEIGHTS: dict[str, int] = {"common": 10, "rare": 25, "epic": 50, "legendary": 100}
DEFAULT_RARITY_WEIGHT = 10

# category -> AggregatedStats field measured
CATEGORY_METRICS: dict[str, str] = {
    "points": "total_points",
    "reading": "total_pages",
    "fitness": "total_distance",
    "consistency": "total_days",
}

# category -> rungs as (threshold, badge, on_profile), highest threshold first
LADDERS: dict[str, list[tuple[float, Achievement, bool]]] = {
    "points": [
        (500, Achievement(id="point_master", name="Point Master", description="500+ total points",
                          category="points", rarity="epic", kind="perfectionist"), False),
        (100, Achievement(id="point_collector", name="Point Collector", description="100+ total points",
                          category="points", rarity="rare", kind="perfectionist"), True),
    ],
    "reading": [
        (1000, Achievement(id="library_master", name="Library Master", description="1000+ pages read",
                           category="reading", rarity="legendary", kind="reader"), True),
        (500, Achievement(id="book_lover", name="Book Lover", description="500+ pages read",
                          category="reading", rarity="epic", kind="reader"), False),
        (100, Achievement(id="bookworm", name="Bookworm", description="100+ pages read",
                          category="reading", rarity="rare", kind="reader"), True),
    ],
    "fitness": [
        (500, Achievement(id="ultra_runner", name="Ultra Runner", description="500+ km covered",
                          category="fitness", rarity="legendary", kind="athlete"), False),
        (200, Achievement(id="marathon_hero", name="Marathon Hero", description="200+ km covered",
                          category="fitness", rarity="epic", kind="athlete"), True),
        (50, Achievement(id="runner", name="Runner", description="50+ km covered",
                         category="fitness", rarity="rare", kind="athlete"), True),
    ],
    "consistency": [
        (100, Achievement(id="centurion", name="Centurion", description="100+ days completed",
                          category="consistency", rarity="legendary", kind="consistent"), False),
        (30, Achievement(id="month_master", name="Month Master", description="30+ days completed",
                         category="consistency", rarity="epic", kind="consistent"), True),
        (7, Achievement(id="week_warrior", name="Week Warrior", description="7+ days completed",
                        category="consistency", rarity="rare", kind="consistent"), True),
    ],
}

CATEGORY_ORDER: dict[str, tuple[str, ...]] = {
    "cumulative": ("consistency", "reading", "fitness", "points"),
    "tiered": ("points", "reading", "fitness", "consistency"),
}

# Post-submission unlocks
FIRST_DAY = Achievement(id="first_day", name="First Step", description="Complete your first day",
                        category="consistency", rarity="common", kind="newcomer")
WEEK_WARRIOR = Achievement(id="week_warrior", name="Week Warrior", description="Complete 7 days",
                           category="consistency", rarity="rare", kind="consistent")
PERFECT_DAY = Achievement(id="perfect_day", name="Perfect Day", description="Complete all 10 tasks in a day",
                          category="points", rarity="common", kind="perfectionist")


def compute_achievements(stats: AggregatedStats, mode: str = "cumulative") -> list[Achievement]:
    if mode not in CATEGORY_ORDER:
        raise ValueError(f"unknown achievement mode: {mode}")

    awarded: list[Achievement] = []
    for category in CATEGORY_ORDER[mode]:
        value = getattr(stats, CATEGORY_METRICS[category])
        if mode == "tiered":
            for threshold, badge, _ in LADDERS[category]:
                if value >= threshold:
                    awarded.append(badge)
                    break
        else:
            # profile rungs, lowest first
            for threshold, badge, on_profile in reversed(LADDERS[category]):
                if on_profile and value >= threshold:
                    awarded.append(badge)
    return awarded


def achievement_score(achievements: Iterable[Achievement]) -> int:
    return sum(RARITY_WEIGHTS.get(a.rarity, DEFAULT_RARITY_WEIGHT) for a in achievements)


def stats_of(entry: LeaderboardEntry) -> AggregatedStats:
    return AggregatedStats(
        total_points=entry.total_points,
        total_pages=entry.total_pages,
        total_distance=entry.total_distance,
        total_days=entry.days_count,
    )


def build_achievement_leaderboard(entries: Sequence[LeaderboardEntry], limit: int | None = None) -> AchievementLeaderboard:
    """
    Rank a full board by tiered achievement score.
    The sort is stable, so equal scores keep the incoming board order.
    """
    limit = settings.achievement_leaderboard_limit if limit is None else limit
    scored = []
    for e in entries:
        badges = compute_achievements(stats_of(e), "tiered")
        scored.append((e, badges, achievement_score(badges)))
    scored.sort(key=lambda t: -t[2])

    rows = [
        AchievementLeaderboardRow(
            rank=idx + 1,
            user_id=e.user_id,
            name=e.name,
            photo_url=e.photo_url,
            is_premium=e.is_premium,
            achievement_count=len(badges),
            achievement_score=score,
            top_achievements=badges[:3],
        )
        for idx, (e, badges, score) in enumerate(scored[:limit])
    ]
    return AchievementLeaderboard(achievement_leaderboard=rows, total_participants=len(scored))


def unlock_for_submission(total_days: int, completed_count: int) -> Achievement | None:
    """At most one badge, first matching rule wins."""
    if total_days == 1:
        return FIRST_DAY
    if total_days == 7:
        return WEEK_WARRIOR
    if completed_count == settings.daily_task_count:
        return PERFECT_DAY
    return None


async def check_unlock_on_submit(store: ProgressStore, user_id: int, saved: ProgressRecord) -> Achievement | None:
    """
    Runs after the submission is saved. Failures are logged and reported as
    "no achievement" so they never fail the submission.
    """
    try:
        stats = aggregate_stats(await store.fetch_user_submissions(user_id))
        unlocked = unlock_for_submission(stats.total_days, saved.completed_count)
    except Exception:
        log.exception("achievement_check_failed", user_id=user_id, date=saved.date.isoformat())
        return None
    if unlocked:
        log.info("achievement_unlocked", user_id=user_id, achievement=unlocked.id)
    return unlocked
