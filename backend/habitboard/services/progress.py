from __future__ import annotations
import math
from datetime import date, datetime, timezone as dt_tz
from typing import Mapping
import structlog

from habitboard.config import settings
from habitboard.schemas.progress import (
    DailyTasksView, ProgressRecord, SubmissionCreate, SubmissionResult, TaskTemplate, TodaySummary,
)
from habitboard.services.achievements import check_unlock_on_submit
from habitboard.services.leaderboard import utc_today
from habitboard.services.store import ProgressStore

log = structlog.get_logger()

PAGES_TASK = 5
DISTANCE_TASK = 10

TASK_TEMPLATES: list[TaskTemplate] = [
    TaskTemplate(id=1, title="Fajr prayer", description="Pray Fajr on time", type="boolean", category="spiritual"),
    TaskTemplate(id=2, title="Dhuhr prayer", description="Pray Dhuhr on time", type="boolean", category="spiritual"),
    TaskTemplate(id=3, title="Asr prayer", description="Pray Asr on time", type="boolean", category="spiritual"),
    TaskTemplate(id=4, title="Maghrib prayer", description="Pray Maghrib on time", type="boolean", category="spiritual"),
    TaskTemplate(
        id=PAGES_TASK, title="Reading", description="Daily book reading (pages)", type="number",
        category="education", input_label="Pages read", min_value=0, max_value=settings.max_pages_read,
    ),
    TaskTemplate(id=6, title="Isha prayer", description="Pray Isha on time", type="boolean", category="spiritual"),
    TaskTemplate(id=7, title="Help your parents", description="Help and serve your parents", type="boolean", category="family"),
    TaskTemplate(id=8, title="Good manners", description="Treat people kindly", type="boolean", category="social"),
    TaskTemplate(id=9, title="Useful deed", description="Do something useful for the community", type="boolean", category="social"),
    TaskTemplate(
        id=DISTANCE_TASK, title="Exercise", description="Physical exercise (distance in km)", type="number",
        category="health", input_label="Distance walked/run (km)", min_value=0, max_value=settings.max_distance_km,
    ),
]

TASK_CATEGORIES = ["spiritual", "education", "family", "social", "health"]


class InvalidSubmission(ValueError):
    pass


def count_completed(tasks: Mapping[int, bool]) -> int:
    return sum(1 for done in tasks.values() if done is True)


def validate_submission(
    tasks: Mapping[int, object],
    pages_read: int,
    distance_km: float,
    task_inputs: Mapping[int, object] | None = None,
) -> None:
    for slot, done in tasks.items():
        if not 1 <= int(slot) <= settings.daily_task_count:
            raise InvalidSubmission(f"Unknown task {slot}; tasks are numbered 1-{settings.daily_task_count}")
        if not isinstance(done, bool):
            raise InvalidSubmission(f"Task {slot} must be boolean")
    for slot, value in (task_inputs or {}).items():
        if not 1 <= int(slot) <= settings.daily_task_count:
            raise InvalidSubmission(f"Unknown task input {slot}")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not math.isfinite(value) or value < 0:
                raise InvalidSubmission(f"Task input {slot} must be a non-negative number")
    if pages_read < 0 or pages_read > settings.max_pages_read:
        raise InvalidSubmission(f"Pages read must be between 0 and {settings.max_pages_read}")
    if not math.isfinite(distance_km) or distance_km < 0 or distance_km > settings.max_distance_km:
        raise InvalidSubmission(f"Distance must be between 0 and {settings.max_distance_km:g} km")


async def submit_daily_progress(
    store: ProgressStore,
    payload: SubmissionCreate,
    today: date | None = None,
) -> SubmissionResult:
    """
    Save (or overwrite) the user's record for the day, then look for a newly
    unlocked achievement. completed_count is derived from `tasks`, never taken
    from the caller.
    """
    validate_submission(payload.tasks, payload.pages_read, payload.distance_km, payload.task_inputs)

    record = ProgressRecord(
        user_id=payload.user_id,
        date=payload.date or today or utc_today(),
        tasks=payload.tasks,
        task_inputs=payload.task_inputs,
        pages_read=payload.pages_read,
        distance_km=payload.distance_km,
        completed_count=count_completed(payload.tasks),
        submitted_at=datetime.now(dt_tz.utc),
    )
    saved = await store.upsert_submission(record)
    log.info(
        "progress_submitted",
        user_id=saved.user_id, date=saved.date.isoformat(), completed=saved.completed_count,
        pages_read=saved.pages_read, distance_km=saved.distance_km,
    )

    unlocked = await check_unlock_on_submit(store, saved.user_id, saved)

    return SubmissionResult(
        total_points=saved.completed_count,
        today=TodaySummary(completed=saved.completed_count, pages_read=saved.pages_read, distance_km=saved.distance_km),
        achievement_unlocked=unlocked,
        submitted_at=saved.submitted_at,
    )


def daily_view(day: date, record: ProgressRecord | None) -> DailyTasksView:
    if record is None:
        return DailyTasksView(
            date=day, tasks={}, task_inputs={}, pages_read=0, distance_km=0.0,
            completed_count=0, is_submitted=False,
        )
    return DailyTasksView(
        date=day,
        tasks=record.tasks,
        task_inputs=record.task_inputs,
        pages_read=record.pages_read,
        distance_km=record.distance_km,
        completed_count=record.completed_count,
        is_submitted=True,
        submitted_at=record.submitted_at,
    )
