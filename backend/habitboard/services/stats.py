from __future__ import annotations
from collections import defaultdict
from typing import Iterable
from habitboard.schemas.leaderboard import AggregatedStats
from habitboard.schemas.progress import ProgressRecord


def aggregate_stats(records: Iterable[ProgressRecord]) -> AggregatedStats:
    """
    Sum one user's records into lifetime (or period) totals.
    The store keeps one record per (user, date), so every record counts as a day.
    """
    points = pages = days = 0
    distance = 0.0
    for r in records:
        points += int(r.completed_count or 0)
        pages += int(r.pages_read or 0)
        distance += float(r.distance_km or 0)
        days += 1
    return AggregatedStats(total_points=points, total_pages=pages, total_distance=distance, total_days=days)


def group_by_user(records: Iterable[ProgressRecord]) -> dict[int, list[ProgressRecord]]:
    grouped: dict[int, list[ProgressRecord]] = defaultdict(list)
    for r in records:
        grouped[r.user_id].append(r)
    return dict(grouped)
