from __future__ import annotations
from datetime import date, timedelta
from typing import Iterable
from habitboard.config import settings
from habitboard.schemas.progress import ProgressRecord, StreakInfo, TaskBreakdown, TaskSummary
from habitboard.services.position import round_half_up

SUMMARY_DAYS: dict[str, int] = {"week": 7, "month": 30, "year": 365}


def summary_range(period: str, today: date) -> tuple[date, date]:
    return today - timedelta(days=SUMMARY_DAYS[period]), today


def task_summary(records: Iterable[ProgressRecord], period: str, today: date) -> TaskSummary:
    """Per-task completion and reading/distance totals for the records inside the period."""
    start, end = summary_range(period, today)
    in_range = [r for r in records if start <= r.date <= end]

    breakdown = {f"task_{i}": TaskBreakdown() for i in range(1, settings.daily_task_count + 1)}
    for r in in_range:
        for i in range(1, settings.daily_task_count + 1):
            row = breakdown[f"task_{i}"]
            row.total += 1
            if r.tasks.get(i) is True:
                row.completed += 1

    days = len(in_range)
    points = sum(r.completed_count for r in in_range)
    pages = sum(r.pages_read for r in in_range)
    distance = sum(r.distance_km for r in in_range)

    return TaskSummary(
        period=period,
        start_date=start,
        end_date=end,
        total_days=days,
        completed_days=sum(1 for r in in_range if r.completed_count == settings.daily_task_count),
        total_points=points,
        average_completion=round_half_up(points / days, 2) if days else 0.0,
        task_breakdown=breakdown,
        total_pages=pages,
        average_pages_per_day=round_half_up(pages / days, 2) if days else 0.0,
        total_distance=round_half_up(distance, 2),
        average_distance_per_day=round_half_up(distance / days, 2) if days else 0.0,
    )


def compute_streak(dates: Iterable[date], today: date) -> StreakInfo:
    """
    Consecutive-day runs over submission dates.
    The current streak stays alive until a full day is missed: a run ending
    yesterday still counts because today can still be submitted.
    """
    days = sorted(set(dates))
    if not days:
        return StreakInfo()

    longest = run = 1
    for prev, cur in zip(days, days[1:]):
        run = run + 1 if cur - prev == timedelta(days=1) else 1
        longest = max(longest, run)

    last = days[-1]
    current = 0
    if last >= today - timedelta(days=1):
        current = 1
        for prev, cur in zip(reversed(days[:-1]), reversed(days)):
            if cur - prev != timedelta(days=1):
                break
            current += 1

    return StreakInfo(
        current_streak=current,
        longest_streak=longest,
        last_submission=last,
        total_submission_days=len(days),
    )
