from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal
from datetime import date, datetime

from habitboard.schemas.leaderboard import AggregatedStats

UserStatus = Literal["pending", "approved", "rejected", "suspended"]

class RegisterRequest(BaseModel):
    id: int = Field(gt=0)
    name: str = Field(min_length=1, max_length=120)
    username: str | None = Field(default=None, max_length=64)
    photo_url: str | None = None
    is_premium: bool = False

class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    username: str | None = None
    photo_url: str | None = None
    is_premium: bool
    status: UserStatus
    registered_at: datetime | None = None
    approved_at: datetime | None = None

class AccessCheck(BaseModel):
    exists: bool
    status: UserStatus | None = None
    can_access: bool

class StatusUpdate(BaseModel):
    status: UserStatus

class PublicProfile(BaseModel):
    id: int
    name: str
    photo_url: str | None = None
    is_premium: bool
    member_since: datetime | None = None
    status: Literal["active", "inactive"]
    statistics: AggregatedStats | None = None

class TodayStats(BaseModel):
    date: date
    completed: int = 0
    pages_read: int = 0
    distance_km: float = 0.0

class UserStatistics(BaseModel):
    today: TodayStats
    all_time: AggregatedStats

class DeleteAccountRequest(BaseModel):
    confirm: str

class UserCounts(BaseModel):
    total: int
    approved: int
    pending: int

class AdminDashboard(BaseModel):
    users: UserCounts
    today_submissions: int
