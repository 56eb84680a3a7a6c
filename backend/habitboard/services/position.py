from __future__ import annotations
import math
from typing import Sequence
from habitboard.config import settings
from habitboard.schemas.leaderboard import LeaderboardEntry, NeighborEntry, UserPosition


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round .5 away from zero for positive values (banker's rounding is not wanted here)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def percentile_for(index: int, total: int) -> int:
    """Share of the board at or below this position, 0-100; index is zero-based."""
    if total <= 0:
        return 0
    return int(round_half_up((1 - index / total) * 100))


def neighborhood(entries: Sequence[LeaderboardEntry], index: int, size: int | None = None) -> list[NeighborEntry]:
    """
    Up to `size` entries above and below `index`, clamped to the board.
    Ranks are reassigned from the window's absolute position.
    """
    size = settings.neighborhood_size if size is None else size
    start = max(0, index - size)
    end = min(len(entries), index + size + 1)
    return [
        NeighborEntry(
            rank=start + offset + 1,
            user_id=e.user_id,
            name=e.name,
            score=e.score,
            photo_url=e.photo_url,
            is_current_user=(start + offset == index),
        )
        for offset, e in enumerate(entries[start:end])
    ]


def locate_user(
    entries: Sequence[LeaderboardEntry],
    user_id: int,
    size: int | None = None,
) -> UserPosition | None:
    """
    Find `user_id` on a full (unpaginated) board.
    Returns None when the user has no records in the period.
    """
    index = next((i for i, e in enumerate(entries) if e.user_id == user_id), None)
    if index is None:
        return None

    entry = entries[index]
    total = len(entries)
    return UserPosition(
        rank=index + 1,
        score=entry.score,
        total_points=entry.total_points,
        total_pages=entry.total_pages,
        total_distance=entry.total_distance,
        days_count=entry.days_count,
        percentile=percentile_for(index, total),
        surrounding=neighborhood(entries, index, size),
        total_participants=total,
    )
