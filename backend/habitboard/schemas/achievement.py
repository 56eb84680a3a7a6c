from __future__ import annotations
from pydantic import BaseModel
from typing import Literal

AchievementCategory = Literal["points", "reading", "fitness", "consistency"]
Rarity = Literal["common", "rare", "epic", "legendary"]
AchievementKind = Literal["newcomer", "consistent", "reader", "athlete", "perfectionist"]
AchievementMode = Literal["cumulative", "tiered"]

class Achievement(BaseModel):
    id: str
    name: str
    description: str
    category: AchievementCategory
    rarity: Rarity
    kind: AchievementKind

class UserAchievements(BaseModel):
    achievements: list[Achievement]
    total_achievements: int
    achievement_score: int

class AchievementLeaderboardRow(BaseModel):
    rank: int
    user_id: int
    name: str
    photo_url: str | None = None
    is_premium: bool = False
    achievement_count: int
    achievement_score: int
    top_achievements: list[Achievement]

class AchievementLeaderboard(BaseModel):
    achievement_leaderboard: list[AchievementLeaderboardRow]
    total_participants: int
