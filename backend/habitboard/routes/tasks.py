from __future__ import annotations
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query

from habitboard.auth_deps import get_store, get_approved_user, load_approved_user
from habitboard.models.user import User
from habitboard.schemas.progress import (
    DailyTasksView, StreakInfo, SubmissionCreate, SubmissionResult, TaskSummary, TaskTemplateList,
)
from habitboard.services.insights import compute_streak, task_summary
from habitboard.services.leaderboard import utc_today
from habitboard.services.progress import (
    TASK_CATEGORIES, TASK_TEMPLATES, InvalidSubmission, daily_view, submit_daily_progress,
)
from habitboard.services.store import SqlProgressStore, StoreError

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/templates", response_model=TaskTemplateList)
async def task_templates():
    return TaskTemplateList(tasks=TASK_TEMPLATES, total_tasks=len(TASK_TEMPLATES), categories=TASK_CATEGORIES)


@router.get("/daily/{user_id}", response_model=DailyTasksView)
async def daily_tasks(
    day: date | None = Query(default=None, alias="date"),
    store: SqlProgressStore = Depends(get_store),
    user: User = Depends(get_approved_user),
):
    target = day or utc_today()
    try:
        record = await store.fetch_submission(user.id, target)
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to load daily progress")
    return daily_view(target, record)


@router.post("/submit", response_model=SubmissionResult)
async def submit(payload: SubmissionCreate, store: SqlProgressStore = Depends(get_store)):
    await load_approved_user(store.session, payload.user_id)
    try:
        return await submit_daily_progress(store, payload)
    except InvalidSubmission as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to save progress")


@router.get("/summary/{user_id}", response_model=TaskSummary)
async def summary(
    period: str = Query(default="week", pattern="^(week|month|year)$"),
    store: SqlProgressStore = Depends(get_store),
    user: User = Depends(get_approved_user),
):
    try:
        records = await store.fetch_user_submissions(user.id)
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to load progress history")
    return task_summary(records, period, utc_today())


@router.get("/streak/{user_id}", response_model=StreakInfo)
async def streak(
    store: SqlProgressStore = Depends(get_store),
    user: User = Depends(get_approved_user),
):
    try:
        records = await store.fetch_user_submissions(user.id)
    except StoreError:
        raise HTTPException(status_code=500, detail="Failed to load progress history")
    return compute_streak((r.date for r in records), utc_today())
