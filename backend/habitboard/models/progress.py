from __future__ import annotations
from datetime import date, datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, BigInteger, Float, Date, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, func
from habitboard.db import Base, JSONType


class DailyProgress(Base):
    """
    One user's task completion for one calendar day.
    Re-submitting the same (user_id, date) overwrites the row.
    completed_count is always recomputed from `tasks` before saving.
    """
    __tablename__ = "daily_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    date: Mapped[date] = mapped_column(Date, index=True, nullable=False)

    tasks: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)        # {"1": true, ...}
    task_inputs: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)  # {"5": 30, "10": 4.5}
    pages_read: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    distance_km: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    completed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_progress_user_date"),
        CheckConstraint("completed_count >= 0 AND completed_count <= 10", name="ck_daily_progress_completed_range"),
        CheckConstraint("pages_read >= 0", name="ck_daily_progress_pages_nonneg"),
        CheckConstraint("distance_km >= 0", name="ck_daily_progress_distance_nonneg"),
    )
