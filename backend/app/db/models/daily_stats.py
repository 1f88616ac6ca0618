"""Per-day productivity aggregates consumed by weekly reports."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, Float, ForeignKey, Integer, UniqueConstraint, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class DailyStats(Base):
    __tablename__ = "daily_stats"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_stats_user_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    tasks_completed = Column(Integer, nullable=False, server_default=sa_text("0"))
    habits_completed = Column(Integer, nullable=False, server_default=sa_text("0"))
    focus_minutes = Column(Integer, nullable=False, server_default=sa_text("0"))
    productivity_score = Column(Float, nullable=False, server_default=sa_text("0"))
