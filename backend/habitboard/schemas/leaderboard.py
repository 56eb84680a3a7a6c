from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal
from datetime import datetime

from habitboard.schemas.achievement import Achievement

Period = Literal["daily", "weekly", "monthly", "all"]
LeaderboardType = Literal["overall", "reading", "distance", "consistency"]
Score = int | float


class AggregatedStats(BaseModel):
    total_points: int = 0
    total_pages: int = 0
    total_distance: float = 0.0
    total_days: int = 0

    @property
    def days_count(self) -> int:
        return self.total_days


class UserIdentity(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    photo_url: str | None = None
    is_premium: bool = False


class LeaderboardEntry(BaseModel):
    user_id: int
    name: str
    photo_url: str | None = None
    is_premium: bool = False
    total_points: int
    total_pages: int
    total_distance: float
    days_count: int
    score: Score
    rank: int = Field(ge=1)
    achievements: list[Achievement] = Field(default_factory=list)


class LeaderboardPage(BaseModel):
    entries: list[LeaderboardEntry]
    total_participants: int
    period: Period
    type: LeaderboardType


class NeighborEntry(BaseModel):
    rank: int
    user_id: int
    name: str
    score: Score
    photo_url: str | None = None
    is_current_user: bool


class UserPosition(BaseModel):
    rank: int
    score: Score
    total_points: int
    total_pages: int
    total_distance: float
    days_count: int
    percentile: int
    surrounding: list[NeighborEntry]
    total_participants: int


class PositionResponse(BaseModel):
    user_position: UserPosition | None
    surrounding_users: list[NeighborEntry] = Field(default_factory=list)
    total_participants: int
    leaderboard_type: LeaderboardType
    time_period: Period
    message: str | None = None


class LeaderboardStatistics(BaseModel):
    total_participants: int = 0
    average: float = 0
    median: Score = 0
    top_10_percent_threshold: Score = 0
    most_active_score: Score = 0
    completion_distribution: dict[str, int] = Field(default_factory=dict)


class LeaderboardStatsResponse(BaseModel):
    period: Period
    type: LeaderboardType
    statistics: LeaderboardStatistics
    generated_at: datetime


class TopPerformer(BaseModel):
    user_id: int
    name: str
    score: Score
    photo_url: str | None = None
    rank: int


class TopPerformers(BaseModel):
    period: Period
    top_performers: dict[str, list[TopPerformer]]
    categories: list[str]
