"""Schemas for weekly AI reports."""
from __future__ import annotations

from datetime import date as date_type, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.schemas.insights import CamelModel


class DailyMetric(CamelModel):
    date: date_type
    tasks_completed: int = 0
    habits_completed: int = 0
    focus_minutes: int = 0
    productivity_score: float = 0.0


class WeeklyMetrics(CamelModel):
    week_start: datetime
    week_end: datetime
    tasks_completed: int
    habits_completed: int
    total_focus_minutes: int
    avg_productivity_score: float
    daily_breakdown: List[DailyMetric]


class WeeklyReportRequest(CamelModel):
    """Accepts `userId` or `user_id`; `weekOffset` counts whole weeks back from the current one."""

    user_id: UUID
    week_start: Optional[datetime] = None
    week_end: Optional[datetime] = None
    week_offset: int = Field(default=0, ge=0)


class WeeklyReportPayload(CamelModel):
    id: UUID
    user_id: UUID
    week_start: datetime
    week_end: datetime
    summary: str
    strengths: List[str]
    improvements: List[str]
    suggestions: List[str]
    productivity_score: float
    total_focus_hours: float
    habits_completed: int
    tasks_completed: int
    created_at: Optional[datetime] = None


class WeeklyReportResponse(BaseModel):
    success: bool = True
    data: Optional[WeeklyReportPayload]
    message: Optional[str] = None
    created: bool = False
    request_id: str
