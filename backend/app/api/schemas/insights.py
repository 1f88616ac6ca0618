"""Schemas for AI insight artifacts and the endpoints that return them.

Artifacts use camelCase keys on the wire because that is the JSON contract the
model is prompted with; Python code reads the snake_case attributes.
"""
from __future__ import annotations

from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
NonNegativeInt = Annotated[int, Field(ge=0, strict=True)]

MIN_PLAN_STEPS = 2
MAX_PLAN_STEPS = 8


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WeeklySummaryArtifact(CamelModel):
    summary: NonEmptyStr
    tasks_completed: NonNegativeInt
    focus_minutes: NonNegativeInt
    top_streak: NonEmptyStr
    recommendation: NonEmptyStr


class GoalPlanArtifact(CamelModel):
    goal: NonEmptyStr
    steps: List[NonEmptyStr] = Field(min_length=MIN_PLAN_STEPS, max_length=MAX_PLAN_STEPS)
    timeline: NonEmptyStr
    focus: NonEmptyStr


class HabitOptimizationArtifact(CamelModel):
    habit: NonEmptyStr
    current_streak: NonNegativeInt
    suggestion: NonEmptyStr
    motivation: NonEmptyStr
    next_step: NonEmptyStr


class WeeklyReportAIPayload(CamelModel):
    """Model output for a weekly report; malformed shapes are repaired, not rejected."""

    summary: str = ""
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("strengths", "improvements", "suggestions", mode="before")
    @classmethod
    def coerce_sequence(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [item if isinstance(item, str) else str(item) for item in value]


class SummarizeRequest(CamelModel):
    tasks_completed: Optional[int] = None
    focus_minutes: Optional[int] = None
    top_habit: Optional[str] = None
    top_streak_days: Optional[int] = None


class GoalPlanRequest(CamelModel):
    goal: Optional[str] = None
    context: Optional[str] = None


class OptimizeHabitRequest(CamelModel):
    habit_name: Optional[str] = None
    current_streak: Optional[int] = None
    context: Optional[str] = None


class WeeklySummaryResponse(BaseModel):
    success: bool = True
    data: WeeklySummaryArtifact
    request_id: str


class GoalPlanResponse(BaseModel):
    success: bool = True
    data: GoalPlanArtifact
    request_id: str


class HabitOptimizationResponse(BaseModel):
    success: bool = True
    data: HabitOptimizationArtifact
    request_id: str
