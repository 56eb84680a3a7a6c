from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Annotated, Literal
import datetime as dt
from datetime import date, datetime

from habitboard.schemas.achievement import Achievement

TaskSlot = Annotated[int, Field(ge=1, le=10)]
# Free-form input attached to a task: a checkbox, a count (pages, km) or a note
TaskInput = bool | int | float | str
SummaryPeriod = Literal["week", "month", "year"]


class ProgressRecord(BaseModel):
    """One user's submission for one calendar day, as read from the store."""
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    date: date
    tasks: dict[TaskSlot, bool] = Field(default_factory=dict)
    task_inputs: dict[TaskSlot, TaskInput] = Field(default_factory=dict)
    pages_read: int = Field(default=0, ge=0)
    distance_km: float = Field(default=0.0, ge=0)
    completed_count: int = Field(default=0, ge=0, le=10)
    submitted_at: datetime | None = None

    @field_serializer("tasks", "task_inputs")
    def serialize_slots(self, value: dict) -> dict:
        return {str(k): v for k, v in sorted(value.items())}


class SubmissionCreate(BaseModel):
    user_id: int = Field(gt=0)
    tasks: dict[int, bool] = Field(default_factory=dict)
    task_inputs: dict[int, TaskInput] = Field(default_factory=dict)
    pages_read: int = 0
    distance_km: float = 0.0
    date: dt.date | None = None  # defaults to today (UTC)


class TodaySummary(BaseModel):
    completed: int
    pages_read: int
    distance_km: float


class SubmissionResult(BaseModel):
    total_points: int
    today: TodaySummary
    achievement_unlocked: Achievement | None = None
    submitted_at: datetime | None = None
    message: str = "Progress saved"


class DailyTasksView(BaseModel):
    date: date
    tasks: dict[int, bool]
    task_inputs: dict[int, TaskInput]
    pages_read: int
    distance_km: float
    completed_count: int
    is_submitted: bool
    submitted_at: datetime | None = None


class TaskTemplate(BaseModel):
    id: int
    title: str
    description: str
    type: Literal["boolean", "number"]
    category: str
    points: int = 1
    input_label: str | None = None
    min_value: float | None = None
    max_value: float | None = None


class TaskTemplateList(BaseModel):
    tasks: list[TaskTemplate]
    total_tasks: int
    categories: list[str]


class TaskBreakdown(BaseModel):
    completed: int = 0
    total: int = 0


class TaskSummary(BaseModel):
    period: SummaryPeriod
    start_date: date
    end_date: date
    total_days: int
    completed_days: int
    total_points: int
    average_completion: float
    task_breakdown: dict[str, TaskBreakdown]
    total_pages: int
    average_pages_per_day: float
    total_distance: float
    average_distance_per_day: float


class StreakInfo(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    last_submission: date | None = None
    total_submission_days: int = 0


class ActivityPage(BaseModel):
    items: list[ProgressRecord]
    page: int
    limit: int
    total: int
