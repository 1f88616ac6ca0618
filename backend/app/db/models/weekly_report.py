"""AI weekly report ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base
from app.db.types import StringList


class WeeklyReport(Base):
    __tablename__ = "ai_reports"
    # One report per user per week; a concurrent duplicate insert fails here.
    __table_args__ = (UniqueConstraint("user_id", "week_start", name="uq_ai_reports_user_week"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    week_start = Column(DateTime(timezone=True), nullable=False)
    week_end = Column(DateTime(timezone=True), nullable=False)
    summary = Column(Text, nullable=False, default="")
    strengths = Column(StringList, nullable=False, default=list)
    improvements = Column(StringList, nullable=False, default=list)
    suggestions = Column(StringList, nullable=False, default=list)
    productivity_score = Column(Float, nullable=False, default=0.0)
    total_focus_hours = Column(Float, nullable=False, default=0.0)
    habits_completed = Column(Integer, nullable=False, default=0)
    tasks_completed = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
