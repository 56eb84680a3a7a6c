from __future__ import annotations
import math
from typing import Iterable
from habitboard.schemas.leaderboard import LeaderboardEntry, LeaderboardStatistics
from habitboard.services.position import round_half_up

# (label, inclusive upper bound); the first bucket whose bound is >= score wins
BUCKETS: list[tuple[str, float]] = [
    ("0-10", 10),
    ("11-50", 50),
    ("51-100", 100),
    ("101-200", 200),
    ("200+", math.inf),
]


def bucket_for(score: float) -> str:
    for label, upper in BUCKETS:
        if score <= upper:
            return label
    return BUCKETS[-1][0]


def compute_distribution(scores: Iterable[int | float | LeaderboardEntry]) -> LeaderboardStatistics:
    """
    Descriptive statistics over a board's score column.

    median and top_10_percent_threshold index straight into the descending
    array (scores[n // 2], scores[floor(n * 0.1)]), matching what the
    leaderboard has always reported; it is not a textbook median.
    """
    values = sorted(
        (s.score if isinstance(s, LeaderboardEntry) else s for s in scores),
        reverse=True,
    )
    n = len(values)
    if n == 0:
        return LeaderboardStatistics()

    distribution = {label: 0 for label, _ in BUCKETS}
    for v in values:
        distribution[bucket_for(v)] += 1

    return LeaderboardStatistics(
        total_participants=n,
        average=round_half_up(sum(values) / n, 2),
        median=values[n // 2],
        top_10_percent_threshold=values[math.floor(n * 0.1)],
        most_active_score=max(values),
        completion_distribution=distribution,
    )
