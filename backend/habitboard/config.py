from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "habitboard-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "HabitBoard")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/habitboard_dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Admin endpoints (approve/reject, dashboard)
    admin_token: str = os.getenv("ADMIN_TOKEN", "dev-admin-token-change-me")

    # Daily task limits
    daily_task_count: int = int(os.getenv("DAILY_TASK_COUNT", "10"))
    max_pages_read: int = int(os.getenv("MAX_PAGES_READ", "1000"))
    max_distance_km: float = float(os.getenv("MAX_DISTANCE_KM", "100"))

    # Leaderboards
    default_leaderboard_limit: int = int(os.getenv("DEFAULT_LEADERBOARD_LIMIT", "100"))
    max_leaderboard_limit: int = int(os.getenv("MAX_LEADERBOARD_LIMIT", "1000"))
    achievement_leaderboard_limit: int = int(os.getenv("ACHIEVEMENT_LEADERBOARD_LIMIT", "50"))
    neighborhood_size: int = int(os.getenv("NEIGHBORHOOD_SIZE", "3"))  # entries shown above/below a user

settings = Settings()
